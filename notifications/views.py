"""
Notification views for the Funrun backend.

Provides API endpoints for:
- List notifications
- Get unread count
- Mark notification as read
- Mark all as read
- Broadcast a system notification (main admin)

Field admins see notifications for their own field office plus untagged
ones; main admin and RD/ARD see everything. Each admin has their own
read/unread state.
"""

from rest_framework import status, views

from authentication.permissions import IsMainAdmin
from core.responses import success_response
from .manager import get_fanout
from .serializers import BroadcastSerializer, NotificationSerializer, UnreadCountSerializer


def _office_filter(request):
    scope = request.auth.office_scope
    return str(scope) if scope is not None else None


def _reader(request):
    # Read state is kept per signed-in admin
    return request.auth.subject


class NotificationListView(views.APIView):
    """
    List notifications for the current session, newest first.

    GET /api/v1/notifications/

    Query parameters:
    - read: Filter by read status (true/false)
    - type: Filter by notification type
    """

    def get(self, request):
        notifications = get_fanout().get_notifications(_office_filter(request), reader=_reader(request))

        read = request.query_params.get('read')
        if read is not None:
            wanted = read.lower() == 'true'
            notifications = [n for n in notifications if n.read == wanted]

        notification_type = request.query_params.get('type')
        if notification_type:
            notifications = [n for n in notifications if n.type == notification_type]

        return success_response(NotificationSerializer(notifications, many=True).data)


class UnreadCountView(views.APIView):
    """
    Get count of unread notifications.

    GET /api/v1/notifications/unread-count/
    """

    def get(self, request):
        count = get_fanout().get_unread_count(_office_filter(request), reader=_reader(request))
        return success_response(UnreadCountSerializer({'unread_count': count}).data)


class MarkNotificationReadView(views.APIView):
    """
    Mark a notification as read.

    POST /api/v1/notifications/{id}/read/
    """

    def post(self, request, pk):
        fanout = get_fanout()
        visible = {n.id for n in fanout.get_notifications(_office_filter(request))}

        # Unknown or out-of-scope ids are a no-op, not an error
        if pk not in visible:
            return success_response({'id': pk, 'read': False})

        fanout.mark_as_read(pk, reader=_reader(request))
        return success_response({'id': pk, 'read': True})


class MarkAllReadView(views.APIView):
    """
    Mark all visible notifications as read.

    POST /api/v1/notifications/read-all/
    """

    def post(self, request):
        count = get_fanout().mark_all_as_read(_office_filter(request), reader=_reader(request))
        return success_response(
            {'count': count},
            message=f'Marked {count} notifications as read.',
        )


class BroadcastView(views.APIView):
    """
    Send a system notification to every admin.

    POST /api/v1/notifications/broadcast/ (main admin)

    Request:
    {
        "title": "Route change",
        "message": "...",
        "type": "system_alert",      // optional
        "field_office": 1            // optional, limits visibility
    }
    """

    permission_classes = [IsMainAdmin]

    def post(self, request):
        serializer = BroadcastSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        notification = get_fanout().broadcast_notification(
            data['type'],
            data['title'],
            data['message'],
            field_office=data.get('field_office'),
            data=data.get('data'),
        )
        return success_response(
            NotificationSerializer(notification).data,
            message='Notification broadcast.',
            status=status.HTTP_201_CREATED,
        )
