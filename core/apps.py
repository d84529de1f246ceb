from django.apps import AppConfig
import logging
from django.conf import settings


class CoreConfig(AppConfig):
    name = 'core'

    def ready(self):
        """Create the process-wide change feed and log token lifetime."""
        from core.feed import ChangeFeed

        self.change_feed = ChangeFeed()

        logger = logging.getLogger(__name__)
        access_lifetime = settings.SIMPLE_JWT.get('ACCESS_TOKEN_LIFETIME')
        logger.info(f"SESSION TOKEN LIFETIME: {access_lifetime}")
