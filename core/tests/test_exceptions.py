from django.db import DatabaseError
from django.test import TestCase
from django.urls import resolve
from rest_framework.exceptions import NotAuthenticated, ValidationError
from rest_framework.views import APIView

from authentication.backends import SessionCookieJWTAuthentication
from core.exceptions import (
    CascadeError,
    InvalidTransition,
    RegistrationValidationError,
    custom_exception_handler,
)
from core.tests.factories import seed_offices


class ExceptionHandlerTests(TestCase):

    def test_domain_errors_keep_code_and_status(self):
        response = custom_exception_handler(InvalidTransition('Registration is already approved.'), {})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data, {
            'success': False,
            'error': {'code': 'INVALID_TRANSITION', 'message': 'Registration is already approved.'},
        })

        response = custom_exception_handler(CascadeError(), {})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['error']['code'], 'CASCADE_FAILED')

        response = custom_exception_handler(RegistrationValidationError('Invalid field office'), {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error']['message'], 'Invalid field office')

    def test_validation_errors_report_first_field(self):
        exc = ValidationError({'age': ['Ensure this value is greater than or equal to 1.']})
        response = custom_exception_handler(exc, {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error']['code'], 'BAD_REQUEST')
        self.assertEqual(
            response.data['error']['message'],
            'Validation error: age - Ensure this value is greater than or equal to 1.'
        )

    def test_unauthenticated_message_is_generic(self):
        with self.assertLogs('funrun.security', level='WARNING'):
            response = custom_exception_handler(NotAuthenticated(), {})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['error'], {
            'code': 'UNAUTHORIZED',
            'message': 'Authentication required.',
        })

    def test_database_errors_are_wrapped_and_logged(self):
        with self.assertLogs('funrun.errors', level='ERROR') as logs:
            response = custom_exception_handler(DatabaseError('connection reset'), {})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {
            'success': False,
            'error': {
                'code': 'DATABASE_ERROR',
                'message': 'Failed to save changes. Please try again later.',
            },
        })
        self.assertIn('connection reset', logs.output[0])

    def test_unhandled_errors_fall_through(self):
        self.assertIsNone(custom_exception_handler(KeyError('x'), {}))


class ApiWiringTests(TestCase):

    def test_default_authentication_loads_with_views(self):
        self.assertEqual(APIView.authentication_classes, [SessionCookieJWTAuthentication])
        self.assertEqual(resolve('/api/v1/registrations/stats/').url_name, 'stats')


class FieldOfficeListTests(TestCase):

    def setUp(self):
        seed_offices()

    def test_list_is_public(self):
        response = self.client.get('/api/v1/field-offices/')
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body['success'])
        codes = [office['code'] for office in body['data']]
        self.assertIn('cotabato', codes)

    def test_health_check(self):
        response = self.client.get('/health/')
        self.assertEqual(response.json()['status'], 'healthy')
