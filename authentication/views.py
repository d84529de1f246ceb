"""
Authentication views for the Funrun backend.

Provides endpoints for:
- Admin login (sets the session cookie)
- Logout (clears the session cookie)
- Current session info
- Login page placeholder at /admin/login/
"""

import logging

from django.conf import settings
from rest_framework import status, views
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core.utils import get_client_ip
from core.responses import failure_response, success_response
from core.throttling import LoginThrottle
from .permissions import HasAdminSession
from .serializers import AdminLoginSerializer, AdminUserSerializer, SessionSerializer
from .tokens import issue_session_token

auth_logger = logging.getLogger('funrun.auth')


def _cookie_max_age():
    return int(settings.SIMPLE_JWT['ACCESS_TOKEN_LIFETIME'].total_seconds())


class LoginView(views.APIView):
    """
    Admin login.

    POST /api/v1/auth/login/

    Request:
    {
        "username": "admin_cotabato",
        "password": "..."
    }

    Response (200), with the ``authToken`` cookie set:
    {
        "success": true,
        "data": {"user": {"name", "role", "field_office", "field_office_id"}}
    }

    401 on bad credentials, 400 on malformed payload, 429 when rate limited.
    """

    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [LoginThrottle]

    def post(self, request):
        serializer = AdminLoginSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        user = serializer.authenticate_admin()
        if user is None:
            return failure_response(
                'Invalid credentials.',
                'INVALID_CREDENTIALS',
                status.HTTP_401_UNAUTHORIZED,
            )

        token = issue_session_token(user)
        auth_logger.info(
            f"Admin login: user={user.id}, role={user.role}, ip={get_client_ip(request)}"
        )

        response = success_response({'user': AdminUserSerializer(user).data})
        response.set_cookie(
            settings.SESSION_TOKEN_COOKIE,
            token,
            max_age=_cookie_max_age(),
            path='/',
            secure=not settings.DEBUG,
            httponly=True,
            samesite='Strict',
        )
        return response


class LogoutView(views.APIView):
    """
    Clear the session cookie.

    POST /api/v1/auth/logout/

    Always 204, whether or not a session existed.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        response = Response(status=status.HTTP_204_NO_CONTENT)
        response.delete_cookie(settings.SESSION_TOKEN_COOKIE, path='/', samesite='Strict')
        return response


class SessionView(views.APIView):
    """
    Current session details.

    GET /api/v1/auth/session/
    """

    permission_classes = [HasAdminSession]

    def get(self, request):
        return success_response(SessionSerializer(request.auth).data)


class LoginPageView(views.APIView):
    """
    Login page entry point.

    GET /admin/login/

    Left open by the access gate; tells clients where to post credentials.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return success_response({
            'login_endpoint': '/api/v1/auth/login/',
            'event': settings.FUNRUN_EVENT_NAME,
        })
