"""
Access gate for the admin and monitor page areas.

Runs before any protected page is served:
- /admin/<anything but login> and /monitor* need a valid session cookie
- missing or invalid token redirects to the login page
- /monitor* is reserved for RD/ARD; other roles go to the admin dashboard
- RD/ARD sessions on /admin/* go to the monitor page

API paths are not handled here; they authenticate through
``SessionCookieJWTAuthentication``.
"""

import logging
import re

from django.conf import settings
from django.http import HttpResponseRedirect

from authentication.models import AdminRole
from authentication.tokens import InvalidSessionToken, decode_session_token

security_logger = logging.getLogger('funrun.security')

PROTECTED_PATHS = [
    re.compile(r'^/admin/(?!login)'),
    re.compile(r'^/monitor'),
]


def is_protected_path(path):
    return any(pattern.match(path) for pattern in PROTECTED_PATHS)


def route_for_role(path, role):
    """
    Return the redirect target for a role on a protected path,
    or None when the role may stay.
    """
    if path.startswith('/monitor') and role != AdminRole.RD_ARD:
        return settings.ADMIN_HOME_PATH
    if path.startswith('/admin') and role == AdminRole.RD_ARD:
        return settings.MONITOR_HOME_PATH
    return None


class AccessGateMiddleware:
    """
    Verify the session cookie on protected page paths.

    On success the decoded session is attached as ``request.admin_session``
    and the response carries ``X-User-Id`` and ``X-User-Role``.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.admin_session = None

        if not is_protected_path(request.path):
            return self.get_response(request)

        raw_token = request.COOKIES.get(settings.SESSION_TOKEN_COOKIE)
        if not raw_token:
            return HttpResponseRedirect(settings.ADMIN_LOGIN_PATH)

        try:
            session = decode_session_token(raw_token)
        except InvalidSessionToken as exc:
            security_logger.warning(
                f"Access gate rejected token: path={request.path}, reason={exc}"
            )
            return HttpResponseRedirect(settings.ADMIN_LOGIN_PATH)

        target = route_for_role(request.path, session.role)
        if target is not None:
            return HttpResponseRedirect(target)

        request.admin_session = session
        response = self.get_response(request)
        response['X-User-Id'] = session.subject
        response['X-User-Role'] = session.role
        return response
