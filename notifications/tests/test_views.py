from django.test import TestCase
from rest_framework.test import APIClient

from authentication.models import AdminRole
from core.tests.factories import COTABATO, LANAO, MAGUINDANAO, MONITOR_OFFICE, make_admin, seed_offices, sign_in
from notifications.manager import NotificationType, get_fanout


class NotificationAPITests(TestCase):

    def setUp(self):
        seed_offices()
        self.client = APIClient()
        self.fanout = get_fanout()
        self.fanout.clear()
        self.addCleanup(self.fanout.clear)

        self.field_admin = make_admin('admin_cotabato', office_id=COTABATO)
        self.main_admin = make_admin('main_admin', role=AdminRole.MAIN_ADMIN, office_id=MAGUINDANAO)
        self.monitor = make_admin('rd_ard', role=AdminRole.RD_ARD, office_id=MONITOR_OFFICE)

        self.cotabato = self.fanout.broadcast_notification(
            NotificationType.SYSTEM_ALERT, 'Cotabato', 'Office notice', field_office=COTABATO
        )
        self.lanao = self.fanout.broadcast_notification(
            NotificationType.SYSTEM_ALERT, 'Lanao', 'Office notice', field_office=LANAO
        )
        self.everyone = self.fanout.broadcast_notification(
            NotificationType.SYSTEM_ALERT, 'Everyone', 'Untagged notice'
        )

    def test_requires_session(self):
        self.assertEqual(self.client.get('/api/v1/notifications/').status_code, 401)

    def test_field_admin_sees_own_office_and_untagged(self):
        sign_in(self.client, self.field_admin)
        response = self.client.get('/api/v1/notifications/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual([n['title'] for n in response.json()['data']], ['Everyone', 'Cotabato'])

    def test_monitor_sees_everything(self):
        sign_in(self.client, self.monitor)
        response = self.client.get('/api/v1/notifications/unread-count/')
        self.assertEqual(response.json()['data']['unread_count'], 3)

    def test_mark_read(self):
        sign_in(self.client, self.field_admin)

        response = self.client.post(f'/api/v1/notifications/{self.cotabato.id}/read/')
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['data']['read'])

        response = self.client.get('/api/v1/notifications/', {'read': 'false'})
        self.assertEqual([n['title'] for n in response.json()['data']], ['Everyone'])

    def test_mark_read_unknown_or_other_office_is_noop(self):
        sign_in(self.client, self.field_admin)

        for notification_id in (self.lanao.id, 'broadcast-missing'):
            response = self.client.post(f'/api/v1/notifications/{notification_id}/read/')
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json()['data'], {'id': notification_id, 'read': False})

        sign_in(self.client, self.monitor)
        response = self.client.get('/api/v1/notifications/unread-count/')
        self.assertEqual(response.json()['data']['unread_count'], 3)

    def test_read_all_counts_visible_only(self):
        sign_in(self.client, self.field_admin)
        response = self.client.post('/api/v1/notifications/read-all/')
        self.assertEqual(response.json()['data']['count'], 2)

        response = self.client.get('/api/v1/notifications/unread-count/')
        self.assertEqual(response.json()['data']['unread_count'], 0)

    def test_read_state_is_kept_per_admin(self):
        sign_in(self.client, self.monitor)
        response = self.client.post('/api/v1/notifications/read-all/')
        self.assertEqual(response.json()['data']['count'], 3)

        response = self.client.post(f'/api/v1/notifications/{self.everyone.id}/read/')
        self.assertEqual(response.status_code, 200)

        sign_in(self.client, self.field_admin)
        response = self.client.get('/api/v1/notifications/unread-count/')
        self.assertEqual(response.json()['data']['unread_count'], 2)

        self.client.post(f'/api/v1/notifications/{self.cotabato.id}/read/')
        response = self.client.get('/api/v1/notifications/', {'read': 'true'})
        self.assertEqual([n['title'] for n in response.json()['data']], ['Cotabato'])

        sign_in(self.client, self.main_admin)
        response = self.client.get('/api/v1/notifications/unread-count/')
        self.assertEqual(response.json()['data']['unread_count'], 3)

    def test_broadcast_is_main_admin_only(self):
        sign_in(self.client, self.field_admin)
        response = self.client.post(
            '/api/v1/notifications/broadcast/', {'title': 'Hi', 'message': 'There'}, format='json'
        )
        self.assertEqual(response.status_code, 403)

        sign_in(self.client, self.main_admin)
        response = self.client.post('/api/v1/notifications/broadcast/', {
            'title': 'Route change',
            'message': 'Start moved to the plaza',
            'field_office': COTABATO,
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['field_office'], str(COTABATO))
        self.assertEqual(self.fanout.get_notifications()[0].title, 'Route change')

    def test_broadcast_rejects_unknown_type(self):
        sign_in(self.client, self.main_admin)
        response = self.client.post('/api/v1/notifications/broadcast/', {
            'type': 'party', 'title': 'x', 'message': 'y',
        }, format='json')
        self.assertEqual(response.status_code, 400)
