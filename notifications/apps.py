import atexit

from django.apps import AppConfig
from django.conf import settings


class NotificationsConfig(AppConfig):
    name = 'notifications'

    def ready(self):
        """Start the process-wide notification fan-out."""
        from core.feed import get_change_feed
        from notifications.manager import NotificationFanout

        self.fanout = NotificationFanout(
            get_change_feed(),
            max_history=settings.NOTIFICATION_HISTORY_LIMIT,
        ).start()
        atexit.register(self.fanout.close)
