"""
Session-cookie JWT authentication for the Funrun API.

Reads the ``authToken`` cookie set at login and falls back to an
``Authorization: Bearer <token>`` header. Role and field office come from
the verified token claims; no database lookup is made per request.

On success ``request.user`` is a simplejwt ``TokenUser`` and
``request.auth`` is the decoded ``AdminSession``. A missing or invalid
token leaves the request anonymous, so protected views answer 401 and
public views are unaffected by a stale cookie.
"""

import logging

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTStatelessUserAuthentication
from rest_framework_simplejwt.models import TokenUser

from core.utils import get_client_ip
from .tokens import InvalidSessionToken, decode_session_token

security_logger = logging.getLogger('funrun.security')


class SessionCookieJWTAuthentication(JWTStatelessUserAuthentication):
    """
    Authenticate API requests from the admin session token.

    Returns:
        tuple: (TokenUser, AdminSession) if a valid token is present,
        None otherwise.
    """

    def authenticate(self, request):
        raw_token = request.COOKIES.get(settings.SESSION_TOKEN_COOKIE)

        if not raw_token:
            header = self.get_header(request)
            if header is None:
                return None
            raw_token = self.get_raw_token(header)
            if raw_token is None:
                return None

        try:
            session = decode_session_token(raw_token)
        except InvalidSessionToken as exc:
            security_logger.warning(
                f"Rejected session token: path={request.path}, "
                f"ip={get_client_ip(request)}, reason={exc}"
            )
            return None

        return (TokenUser(session.claims), session)
