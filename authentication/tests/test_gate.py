from datetime import timedelta

from django.conf import settings
from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from authentication.models import AdminRole
from core.tests.factories import COTABATO, MAGUINDANAO, MONITOR_OFFICE, make_admin, seed_offices, sign_in


class AccessGateTests(TestCase):

    def setUp(self):
        seed_offices()
        self.client = APIClient()
        self.field_admin = make_admin('admin_cotabato', office_id=COTABATO)
        self.main_admin = make_admin('main_admin', role=AdminRole.MAIN_ADMIN, office_id=MAGUINDANAO)
        self.monitor = make_admin('rd_ard', role=AdminRole.RD_ARD, office_id=MONITOR_OFFICE)

    def test_no_cookie_redirects_to_login(self):
        for path in ('/admin/dashboard/', '/monitor/'):
            response = self.client.get(path)
            self.assertEqual(response.status_code, 302)
            self.assertEqual(response['Location'], '/admin/login/')

    def test_login_page_is_open(self):
        response = self.client.get('/admin/login/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['login_endpoint'], '/api/v1/auth/login/')

    def test_invalid_signature_redirects_to_login(self):
        self.client.cookies[settings.SESSION_TOKEN_COOKIE] = 'a.b.c'
        response = self.client.get('/admin/dashboard/')
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response['Location'], '/admin/login/')

    def test_expired_token_redirects_to_login(self):
        token = AccessToken.for_user(self.field_admin)
        token['role'] = AdminRole.FIELD_ADMIN
        token['field_office_id'] = COTABATO
        token['iat'] = 1
        token.set_exp(lifetime=timedelta(seconds=-1))
        self.client.cookies[settings.SESSION_TOKEN_COOKIE] = str(token)

        response = self.client.get('/admin/dashboard/')
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response['Location'], '/admin/login/')

    def test_field_admin_reaches_dashboard_with_identity_headers(self):
        sign_in(self.client, self.field_admin)
        response = self.client.get('/admin/dashboard/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['X-User-Id'], str(self.field_admin.pk))
        self.assertEqual(response['X-User-Role'], AdminRole.FIELD_ADMIN)
        data = response.json()['data']
        self.assertEqual(data['field_office']['id'], COTABATO)
        self.assertNotIn('offices', data)

    def test_main_admin_dashboard_includes_breakdown(self):
        sign_in(self.client, self.main_admin)
        response = self.client.get('/admin/dashboard/')
        self.assertEqual(response.status_code, 200)
        codes = [office['code'] for office in response.json()['data']['offices']]
        self.assertNotIn('monitor', codes)

    def test_field_and_main_admin_are_sent_away_from_monitor(self):
        for admin in (self.field_admin, self.main_admin):
            sign_in(self.client, admin)
            response = self.client.get('/monitor/')
            self.assertEqual(response.status_code, 302)
            self.assertEqual(response['Location'], '/admin/dashboard/')

    def test_rd_ard_is_sent_to_monitor(self):
        sign_in(self.client, self.monitor)
        response = self.client.get('/admin/dashboard/')
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response['Location'], '/monitor/')

        response = self.client.get('/monitor/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['X-User-Role'], AdminRole.RD_ARD)
