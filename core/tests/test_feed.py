from django.test import SimpleTestCase

from core.feed import REGISTRATIONS_CHANNEL, ChangeEvent, ChangeFeed, ChangeType


class ChangeFeedTests(SimpleTestCase):

    def setUp(self):
        self.feed = ChangeFeed()

    def test_publish_reaches_matching_subscribers_in_order(self):
        received = []
        self.feed.subscribe(REGISTRATIONS_CHANNEL, ChangeType.INSERT, lambda e: received.append(('a', e)))
        self.feed.subscribe(REGISTRATIONS_CHANNEL, ChangeType.INSERT, lambda e: received.append(('b', e)))
        self.feed.subscribe(REGISTRATIONS_CHANNEL, ChangeType.UPDATE, lambda e: received.append(('c', e)))

        event = ChangeEvent(table='individual_registrations', event_type=ChangeType.INSERT, new={'id': '1'})
        delivered = self.feed.publish(REGISTRATIONS_CHANNEL, ChangeType.INSERT, event)

        self.assertEqual(delivered, 2)
        self.assertEqual([name for name, _ in received], ['a', 'b'])
        self.assertIs(received[0][1], event)

    def test_failing_subscriber_does_not_block_others(self):
        received = []

        def broken(payload):
            raise RuntimeError('boom')

        self.feed.subscribe('system-notifications', 'notification', broken)
        self.feed.subscribe('system-notifications', 'notification', received.append)

        with self.assertLogs('funrun.notifications', level='ERROR'):
            delivered = self.feed.publish('system-notifications', 'notification', {'id': 'x'})

        self.assertEqual(delivered, 1)
        self.assertEqual(received, [{'id': 'x'}])

    def test_unsubscribe(self):
        received = []
        handle = self.feed.subscribe(REGISTRATIONS_CHANNEL, ChangeType.DELETE, received.append)
        self.assertEqual(self.feed.subscriber_count(REGISTRATIONS_CHANNEL), 1)

        self.assertTrue(self.feed.unsubscribe(handle))
        self.assertFalse(self.feed.unsubscribe(handle))
        self.assertEqual(self.feed.publish(REGISTRATIONS_CHANNEL, ChangeType.DELETE, {}), 0)
        self.assertEqual(received, [])
