"""
In-process change feed.

Model signals publish row changes here after the surrounding transaction
commits; the notification fan-out subscribes to it. Channels used:

- ``registrations``: events ``INSERT`` / ``UPDATE`` / ``DELETE`` with a
  ``ChangeEvent`` payload
- ``system-notifications``: event ``notification`` with a notification dict
"""

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger('funrun.notifications')

REGISTRATIONS_CHANNEL = 'registrations'
SYSTEM_NOTIFICATIONS_CHANNEL = 'system-notifications'


class ChangeType:
    INSERT = 'INSERT'
    UPDATE = 'UPDATE'
    DELETE = 'DELETE'

    CHOICES = [INSERT, UPDATE, DELETE]


@dataclass(frozen=True)
class ChangeEvent:
    """A single row change on a registration table."""
    table: str
    event_type: str
    new: Dict[str, Any] = field(default_factory=dict)
    old: Dict[str, Any] = field(default_factory=dict)


class ChangeFeed:
    """
    Channel/event keyed publish-subscribe registry.

    Subscribers are invoked synchronously in subscription order. A failing
    subscriber is logged and does not stop delivery to the others.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._subscriptions = {}
        self._handles = itertools.count(1)

    def subscribe(self, channel: str, event: str, callback: Callable) -> int:
        with self._lock:
            handle = next(self._handles)
            self._subscriptions.setdefault((channel, event), {})[handle] = callback
        return handle

    def unsubscribe(self, handle: int) -> bool:
        with self._lock:
            for callbacks in self._subscriptions.values():
                if callbacks.pop(handle, None) is not None:
                    return True
        return False

    def subscriber_count(self, channel: str, event: Optional[str] = None) -> int:
        with self._lock:
            return sum(
                len(callbacks)
                for (ch, ev), callbacks in self._subscriptions.items()
                if ch == channel and (event is None or ev == event)
            )

    def publish(self, channel: str, event: str, payload: Any) -> int:
        """Deliver payload to every subscriber; returns how many succeeded."""
        with self._lock:
            callbacks = list(self._subscriptions.get((channel, event), {}).values())

        delivered = 0
        for callback in callbacks:
            try:
                callback(payload)
                delivered += 1
            except Exception:
                logger.exception(
                    f"Change feed subscriber failed: channel={channel}, event={event}"
                )
        return delivered


def get_change_feed() -> ChangeFeed:
    """Return the process-wide feed created by the core app config."""
    from django.apps import apps
    return apps.get_app_config('core').change_feed
