"""
Notification fan-out for the Funrun backend.

Turns change feed events into admin notifications, keeps a bounded
in-memory history and calls registered listeners.

Usage:
    from notifications.manager import get_fanout

    fanout = get_fanout()
    fanout.add_listener('new_registration', callback)
    fanout.get_notifications(field_office='1')

The fan-out is an explicit object: the notifications app creates and
starts one at startup and closes it at shutdown; tests build their own.
"""

import logging
import threading
import uuid
from collections import deque
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from core.feed import (
    REGISTRATIONS_CHANNEL,
    SYSTEM_NOTIFICATIONS_CHANNEL,
    ChangeEvent,
    ChangeType,
)

logger = logging.getLogger('funrun.notifications')

BROADCAST_EVENT = 'notification'


class NotificationType:
    """Notification type constants."""
    NEW_REGISTRATION = 'new_registration'
    STATUS_UPDATE = 'status_update'
    SYSTEM_ALERT = 'system_alert'

    CHOICES = [
        (NEW_REGISTRATION, 'New Registration'),
        (STATUS_UPDATE, 'Status Update'),
        (SYSTEM_ALERT, 'System Alert'),
    ]

    ALL = [NEW_REGISTRATION, STATUS_UPDATE, SYSTEM_ALERT]


# Registration tables -> registration kind
REGISTRATION_TABLES = {
    'individual_registrations': 'individual',
    'group_registrations': 'group',
}


@dataclass
class RealtimeNotification:
    id: str
    type: str
    title: str
    message: str
    timestamp: datetime
    read: bool = False
    data: Dict[str, Any] = field(default_factory=dict)
    field_office: Optional[str] = None

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'title': self.title,
            'message': self.message,
            'timestamp': self.timestamp.isoformat(),
            'read': self.read,
            'data': self.data,
            'field_office': self.field_office,
        }

    @classmethod
    def from_dict(cls, payload):
        timestamp = payload.get('timestamp')
        if isinstance(timestamp, str):
            timestamp = parse_datetime(timestamp)
        return cls(
            id=str(payload['id']),
            type=payload['type'],
            title=payload.get('title', ''),
            message=payload.get('message', ''),
            timestamp=timestamp or timezone.now(),
            read=bool(payload.get('read', False)),
            data=payload.get('data') or {},
            field_office=payload.get('field_office'),
        )


def _new_id(prefix):
    return f"{prefix}-{uuid.uuid4().hex}"


class NotificationFanout:
    """
    Bounded notification history plus event listeners, fed by a ChangeFeed.

    Listener events: ``new_registration``, ``status_update`` and
    ``notification`` (broadcasts). Listeners run outside the lock, in
    registration order; one failing listener does not stop the others.
    """

    def __init__(self, feed, max_history=100):
        self._feed = feed
        self._lock = threading.RLock()
        self._history = deque(maxlen=max_history)
        # reader (session subject) -> ids that reader has marked read
        self._read_by: Dict[str, Set[str]] = {}
        self._listeners: Dict[str, Dict[Callable, None]] = {}
        self._subscriptions: List[int] = []

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def is_running(self):
        return bool(self._subscriptions)

    def start(self):
        """Subscribe to registration changes and system broadcasts."""
        with self._lock:
            if self._subscriptions:
                return self
            feed = self._feed
            self._subscriptions = [
                feed.subscribe(REGISTRATIONS_CHANNEL, ChangeType.INSERT, self._handle_insert),
                feed.subscribe(REGISTRATIONS_CHANNEL, ChangeType.UPDATE, self._handle_update),
                feed.subscribe(SYSTEM_NOTIFICATIONS_CHANNEL, BROADCAST_EVENT, self._handle_broadcast),
            ]
        logger.info('Notification fan-out started')
        return self

    def close(self):
        """Unsubscribe from the feed and drop all listeners."""
        with self._lock:
            for handle in self._subscriptions:
                self._feed.unsubscribe(handle)
            self._subscriptions = []
            self._listeners.clear()
        logger.info('Notification fan-out closed')

    def clear(self):
        """Forget all notifications."""
        with self._lock:
            self._history.clear()
            self._read_by.clear()

    # =========================================================================
    # HISTORY
    # =========================================================================

    def add_notification(self, notification: RealtimeNotification):
        """Prepend a notification; the oldest beyond the limit is dropped."""
        with self._lock:
            if len(self._history) == self._history.maxlen:
                dropped = self._history[-1].id
                for read_ids in self._read_by.values():
                    read_ids.discard(dropped)
            self._history.appendleft(notification)

    def _visible(self, field_office=None):
        if field_office is None:
            return list(self._history)
        field_office = str(field_office)
        return [
            n for n in self._history
            if not n.field_office or n.field_office == field_office
        ]

    def _is_read(self, notification, reader):
        if notification.read:
            return True
        return reader is not None and notification.id in self._read_by.get(reader, ())

    def _mark(self, notification, reader):
        if reader is None:
            notification.read = True
        else:
            self._read_by.setdefault(reader, set()).add(notification.id)

    def get_notifications(self, field_office=None, reader=None) -> List[RealtimeNotification]:
        """
        Newest first. With a field office, only untagged notifications and
        those tagged with that office.

        ``reader`` is a session subject; each reader keeps its own read
        state. Without one, only the shared ``read`` flag counts.
        """
        with self._lock:
            return [
                replace(n, read=self._is_read(n, reader))
                for n in self._visible(field_office)
            ]

    def get_unread_count(self, field_office=None, reader=None) -> int:
        with self._lock:
            return sum(1 for n in self._visible(field_office) if not self._is_read(n, reader))

    def mark_as_read(self, notification_id, reader=None) -> bool:
        """Returns False when the id is unknown."""
        with self._lock:
            for notification in self._history:
                if notification.id == notification_id:
                    self._mark(notification, reader)
                    return True
        return False

    def mark_all_as_read(self, field_office=None, reader=None) -> int:
        """Returns how many notifications changed from unread to read."""
        changed = 0
        with self._lock:
            for notification in self._visible(field_office):
                if not self._is_read(notification, reader):
                    self._mark(notification, reader)
                    changed += 1
        return changed

    # =========================================================================
    # LISTENERS
    # =========================================================================

    def add_listener(self, event, listener):
        with self._lock:
            self._listeners.setdefault(event, {})[listener] = None

    def remove_listener(self, event, listener):
        with self._lock:
            listeners = self._listeners.get(event)
            if listeners:
                listeners.pop(listener, None)

    def notify_listeners(self, event, payload):
        with self._lock:
            listeners = list(self._listeners.get(event, {}))

        for listener in listeners:
            try:
                listener(payload)
            except Exception:
                logger.exception(f"Notification listener failed for event {event}")

    # =========================================================================
    # BROADCAST
    # =========================================================================

    def broadcast_notification(self, type, title, message, field_office=None, data=None):
        """
        Publish a notification to every fan-out subscribed to the system
        channel, this one included.
        """
        if type not in NotificationType.ALL:
            raise ValueError(f"Unknown notification type: {type}")

        notification = RealtimeNotification(
            id=_new_id('broadcast'),
            type=type,
            title=title,
            message=message,
            timestamp=timezone.now(),
            read=False,
            data=data or {},
            field_office=str(field_office) if field_office not in (None, '') else None,
        )
        self._feed.publish(SYSTEM_NOTIFICATIONS_CHANNEL, BROADCAST_EVENT, notification.to_dict())
        return notification

    # =========================================================================
    # FEED HANDLERS
    # =========================================================================

    def _handle_insert(self, event: ChangeEvent):
        kind = REGISTRATION_TABLES.get(event.table)
        if kind is None:
            return

        record = event.new
        if kind == 'individual':
            message = f"{record.get('full_name')} has registered for {settings.FUNRUN_EVENT_NAME}"
        else:
            message = f"{record.get('agency_name')} has submitted a group registration"

        notification = RealtimeNotification(
            id=_new_id(f"new-{kind}-{record.get('id')}"),
            type=NotificationType.NEW_REGISTRATION,
            title='New Registration',
            message=message,
            timestamp=timezone.now(),
            data={'record': record, 'type': kind},
            field_office=_office_tag(record),
        )
        self.add_notification(notification)
        self.notify_listeners(NotificationType.NEW_REGISTRATION, notification)

    def _handle_update(self, event: ChangeEvent):
        kind = REGISTRATION_TABLES.get(event.table)
        if kind is None:
            return

        record, old = event.new, event.old
        if record.get('status') == old.get('status'):
            return

        if kind == 'individual':
            message = f"{record.get('full_name')}'s registration status changed to {record.get('status')}"
        else:
            message = f"{record.get('agency_name')}'s group registration status changed to {record.get('status')}"

        notification = RealtimeNotification(
            id=_new_id(f"status-{kind}-{record.get('id')}"),
            type=NotificationType.STATUS_UPDATE,
            title='Status Updated',
            message=message,
            timestamp=timezone.now(),
            data={'record': record, 'old_record': old, 'type': kind},
            field_office=_office_tag(record),
        )
        self.add_notification(notification)
        self.notify_listeners(NotificationType.STATUS_UPDATE, notification)

    def _handle_broadcast(self, payload):
        notification = RealtimeNotification.from_dict(payload)
        self.add_notification(notification)
        self.notify_listeners(BROADCAST_EVENT, notification)


def _office_tag(record):
    office_id = record.get('field_office_id')
    return str(office_id) if office_id is not None else None


def get_fanout() -> NotificationFanout:
    """Return the fan-out started by the notifications app config."""
    from django.apps import apps
    return apps.get_app_config('notifications').fanout
