"""
Audit logging middleware for the Funrun backend.

Logs every request with the admin identity taken from the session token.
"""

import logging
import time
from django.utils import timezone

from core.utils import get_client_ip

audit_logger = logging.getLogger('funrun.audit')


class AuditLoggingMiddleware:
    """
    Middleware to log all requests for audit purposes.

    Captures:
    - Request method and path
    - Admin subject and role (from the gate or from DRF authentication)
    - Response status code
    - Request duration
    - Client IP address
    """

    skip_prefixes = (
        '/static/',
        '/media/',
        '/health/',
        '/favicon.ico',
    )

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        start_time = time.time()

        response = self.get_response(request)

        duration = time.time() - start_time

        if not self._should_skip(request.path):
            self._log_request(request, response, duration)

        return response

    def _should_skip(self, path):
        return any(path.startswith(prefix) for prefix in self.skip_prefixes)

    def _identity(self, request):
        # The gate sets admin_session on page routes; DRF copies auth onto
        # the underlying request for API routes.
        session = getattr(request, 'admin_session', None) or getattr(request, 'auth', None)
        subject = getattr(session, 'subject', None)
        if subject is None:
            return 'anonymous', 'none'
        return str(subject), session.role

    def _log_request(self, request, response, duration):
        user_id, user_role = self._identity(request)

        log_data = {
            'timestamp': timezone.now().isoformat(),
            'method': request.method,
            'path': request.path,
            'user_id': user_id,
            'user_role': user_role,
            'status_code': response.status_code,
            'duration_ms': round(duration * 1000, 2),
            'ip_address': get_client_ip(request),
            'user_agent': request.META.get('HTTP_USER_AGENT', '')[:200],
        }

        if response.status_code >= 500:
            audit_logger.error(f"Request: {log_data}")
        elif response.status_code >= 400:
            audit_logger.warning(f"Request: {log_data}")
        else:
            audit_logger.info(f"Request: {log_data}")
