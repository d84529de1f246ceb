from datetime import timedelta

from django.test import TestCase
from rest_framework_simplejwt.tokens import AccessToken

from authentication.models import AdminRole
from authentication.tokens import (
    AdminSession,
    InvalidSessionToken,
    decode_session_token,
    issue_session_token,
)
from core.tests.factories import COTABATO, MONITOR_OFFICE, make_admin, seed_offices


class SessionTokenTests(TestCase):

    def setUp(self):
        seed_offices()
        self.admin = make_admin('admin_cotabato', office_id=COTABATO)

    def test_issue_and_decode(self):
        session = decode_session_token(issue_session_token(self.admin))

        self.assertEqual(session.subject, str(self.admin.pk))
        self.assertEqual(session.role, AdminRole.FIELD_ADMIN)
        self.assertEqual(session.field_office_id, COTABATO)
        self.assertEqual(session.expires_at - session.issued_at, timedelta(minutes=15))

    def test_tampered_token_is_rejected(self):
        token = issue_session_token(self.admin)
        header, payload, signature = token.split('.')
        tampered = '.'.join([header, payload, signature[::-1]])

        with self.assertRaises(InvalidSessionToken):
            decode_session_token(tampered)

    def test_expired_token_is_rejected(self):
        token = AccessToken.for_user(self.admin)
        token['role'] = self.admin.role
        token['field_office_id'] = COTABATO
        token['iat'] = 1
        token.set_exp(lifetime=timedelta(seconds=-30))

        with self.assertRaises(InvalidSessionToken):
            decode_session_token(str(token))

    def test_garbage_and_empty_tokens(self):
        for raw in ('', None, 'not-a-token', b'a.b.c'):
            with self.assertRaises(InvalidSessionToken):
                decode_session_token(raw)

    def test_missing_claims_are_rejected(self):
        token = AccessToken.for_user(self.admin)
        token['role'] = self.admin.role

        with self.assertRaises(InvalidSessionToken):
            decode_session_token(str(token))

    def test_unknown_role_is_rejected(self):
        token = AccessToken.for_user(self.admin)
        token['role'] = 'superuser'
        token['field_office_id'] = COTABATO
        token['iat'] = 1

        with self.assertRaises(InvalidSessionToken):
            decode_session_token(str(token))

    def test_admin_without_office_cannot_get_a_token(self):
        self.admin.field_office = None
        with self.assertRaises(ValueError):
            issue_session_token(self.admin)


class AdminSessionScopeTests(TestCase):

    def _session(self, role, office_id):
        return AdminSession.from_payload({
            'sub': 'abc',
            'role': role,
            'field_office_id': office_id,
            'iat': 1700000000,
            'exp': 1700000900,
        })

    def test_field_admin_is_limited_to_own_office(self):
        session = self._session(AdminRole.FIELD_ADMIN, COTABATO)
        self.assertEqual(session.office_scope, COTABATO)
        self.assertTrue(session.can_access_office(COTABATO))
        self.assertFalse(session.can_access_office(3))
        self.assertTrue(session.can_modify)

    def test_main_admin_sees_all_offices(self):
        session = self._session(AdminRole.MAIN_ADMIN, 5)
        self.assertIsNone(session.office_scope)
        self.assertTrue(session.can_access_office(3))
        self.assertTrue(session.can_modify)

    def test_rd_ard_is_read_only(self):
        session = self._session(AdminRole.RD_ARD, MONITOR_OFFICE)
        self.assertIsNone(session.office_scope)
        self.assertTrue(session.is_monitor)
        self.assertFalse(session.can_modify)

    def test_string_office_id_is_rejected(self):
        with self.assertRaises(InvalidSessionToken):
            self._session(AdminRole.FIELD_ADMIN, '1')
