"""
Serializers for notifications.
"""

from rest_framework import serializers

from .manager import NotificationType


class NotificationSerializer(serializers.Serializer):
    """Read-only view of a RealtimeNotification."""

    id = serializers.CharField(read_only=True)
    type = serializers.CharField(read_only=True)
    title = serializers.CharField(read_only=True)
    message = serializers.CharField(read_only=True)
    timestamp = serializers.DateTimeField(read_only=True)
    read = serializers.BooleanField(read_only=True)
    data = serializers.DictField(read_only=True)
    field_office = serializers.CharField(read_only=True, allow_null=True)


class UnreadCountSerializer(serializers.Serializer):
    """Serializer for unread count response."""

    unread_count = serializers.IntegerField()


class BroadcastSerializer(serializers.Serializer):
    """Main admin broadcast request."""

    type = serializers.ChoiceField(
        choices=NotificationType.CHOICES,
        default=NotificationType.SYSTEM_ALERT
    )
    title = serializers.CharField(max_length=200)
    message = serializers.CharField(max_length=2000)
    field_office = serializers.IntegerField(required=False, allow_null=True)
    data = serializers.DictField(required=False, default=dict)
