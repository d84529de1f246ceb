from unittest import mock

from django.conf import settings
from django.core.cache import cache
from django.test import TestCase
from rest_framework.test import APIClient

from authentication.models import AdminRole, AdminUser
from authentication.tokens import issue_session_token
from core.tests.factories import COTABATO, MAGUINDANAO, make_admin, seed_offices, sign_in
from core.throttling import FixedWindowRateThrottle


class LoginViewTests(TestCase):

    def setUp(self):
        cache.clear()
        seed_offices()
        self.client = APIClient()
        self.admin = make_admin('admin_cotabato', office_id=COTABATO, password='Cotabato2025!')

    def test_login_sets_http_only_cookie(self):
        response = self.client.post(
            '/api/v1/auth/login/',
            {'username': 'admin_cotabato', 'password': 'Cotabato2025!'},
            format='json'
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['data']['user'], {
            'name': self.admin.name,
            'role': AdminRole.FIELD_ADMIN,
            'field_office': 'Cotabato City',
            'field_office_id': COTABATO,
        })

        cookie = response.cookies[settings.SESSION_TOKEN_COOKIE]
        self.assertTrue(cookie['httponly'])
        self.assertEqual(cookie['samesite'], 'Strict')
        self.assertTrue(cookie['secure'])
        self.assertEqual(cookie['max-age'], 900)

    def test_wrong_password_is_401(self):
        response = self.client.post(
            '/api/v1/auth/login/',
            {'username': 'admin_cotabato', 'password': 'wrong'},
            format='json'
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error']['code'], 'INVALID_CREDENTIALS')
        self.assertNotIn(settings.SESSION_TOKEN_COOKIE, response.cookies)

    def test_unknown_user_gets_same_message(self):
        response = self.client.post(
            '/api/v1/auth/login/',
            {'username': 'nobody', 'password': 'whatever'},
            format='json'
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error']['message'], 'Invalid credentials.')

    def test_missing_fields_is_400(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'admin_cotabato'}, format='json')
        self.assertEqual(response.status_code, 400)

    @mock.patch.object(FixedWindowRateThrottle, 'timer', return_value=1000.0)
    def test_eleventh_attempt_in_window_is_throttled(self, _timer):
        for _ in range(10):
            response = self.client.post(
                '/api/v1/auth/login/',
                {'username': 'admin_cotabato', 'password': 'wrong'},
                format='json'
            )
            self.assertEqual(response.status_code, 401)

        response = self.client.post(
            '/api/v1/auth/login/',
            {'username': 'admin_cotabato', 'password': 'Cotabato2025!'},
            format='json'
        )
        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.json()['error']['code'], 'RATE_LIMIT_EXCEEDED')


class SessionViewTests(TestCase):

    def setUp(self):
        cache.clear()
        seed_offices()
        self.client = APIClient()
        self.admin = make_admin('main_admin', role=AdminRole.MAIN_ADMIN, office_id=MAGUINDANAO)

    def test_session_requires_cookie(self):
        response = self.client.get('/api/v1/auth/session/')
        self.assertEqual(response.status_code, 401)

    def test_session_reports_claims(self):
        sign_in(self.client, self.admin)
        response = self.client.get('/api/v1/auth/session/')

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['role'], AdminRole.MAIN_ADMIN)
        self.assertEqual(data['field_office_id'], MAGUINDANAO)
        self.assertTrue(data['is_main_admin'])

    def test_bearer_header_is_accepted(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_session_token(self.admin)}')
        response = self.client.get('/api/v1/auth/session/')
        self.assertEqual(response.status_code, 200)

    def test_stale_cookie_does_not_break_public_endpoints(self):
        self.client.cookies[settings.SESSION_TOKEN_COOKIE] = 'stale.token.value'
        response = self.client.get('/api/v1/registrations/group/template/')
        self.assertEqual(response.status_code, 200)

    def test_logout_clears_cookie(self):
        sign_in(self.client, self.admin)
        response = self.client.post('/api/v1/auth/logout/')

        self.assertEqual(response.status_code, 204)
        self.assertEqual(response.cookies[settings.SESSION_TOKEN_COOKIE].value, '')


class SuperuserTests(TestCase):

    def setUp(self):
        cache.clear()
        seed_offices()
        self.client = APIClient()

    def test_superuser_needs_field_office(self):
        with self.assertRaises(ValueError):
            AdminUser.objects.create_superuser('root_admin', 'Maguindanao2025!')
        with self.assertRaises(ValueError):
            AdminUser.objects.create_superuser('root_admin', 'Maguindanao2025!', field_office='nowhere')
        self.assertFalse(AdminUser.objects.exists())

    def test_superuser_can_sign_in(self):
        user = AdminUser.objects.create_superuser('root_admin', 'Maguindanao2025!', field_office='maguindanao')
        self.assertEqual(user.role, AdminRole.MAIN_ADMIN)
        self.assertEqual(user.field_office_id, MAGUINDANAO)

        response = self.client.post(
            '/api/v1/auth/login/',
            {'username': 'root_admin', 'password': 'Maguindanao2025!'},
            format='json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['user']['field_office_id'], MAGUINDANAO)
