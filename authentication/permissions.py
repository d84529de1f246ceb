"""
Custom permissions for the Funrun backend.

Implements role-based access control from the session token:
- Field admin: own field office, read and write
- Main admin: all field offices, read and write
- RD/ARD: all field offices, read only
"""

from rest_framework import permissions

from .tokens import AdminSession


def get_session(request):
    session = getattr(request, 'auth', None)
    if isinstance(session, AdminSession):
        return session
    return None


class HasAdminSession(permissions.BasePermission):
    """Any signed-in admin role."""

    message = "Authentication required."

    def has_permission(self, request, view):
        return get_session(request) is not None


class IsRegistrationManager(permissions.BasePermission):
    """
    Read access for every admin role; write access for field and main admins.

    Object checks restrict field admins to their own field office.
    """

    message = "You do not have permission to modify registrations."

    def has_permission(self, request, view):
        session = get_session(request)
        if session is None:
            return False

        if request.method in permissions.SAFE_METHODS:
            return True

        return session.can_modify

    def has_object_permission(self, request, view, obj):
        session = get_session(request)
        if session is None:
            return False
        return session.can_access_office(obj.field_office_id)


class IsMainAdmin(permissions.BasePermission):
    """Main admin only."""

    message = "This action requires main admin access."

    def has_permission(self, request, view):
        session = get_session(request)
        return session is not None and session.is_main_admin
