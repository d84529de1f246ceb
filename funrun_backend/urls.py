"""
URL configuration for the Funrun backend.

API Structure:
- /api/v1/auth/           - Admin login, logout and session
- /api/v1/field-offices/  - Field office reference list (public)
- /api/v1/registrations/  - Submissions, review workflow, exports
- /api/v1/notifications/  - Admin notification feed
- /admin/login/           - Login page descriptor
- /admin/dashboard/       - Field/main admin dashboard (gated)
- /monitor/               - RD/ARD monitoring view (gated)
"""

from django.urls import path, include
from django.http import JsonResponse
from django.conf import settings
from django.conf.urls.static import static

from authentication.views import LoginPageView
from registrations.views import AdminDashboardView, MonitorView


def health_check(request):
    """Health check endpoint for load balancers."""
    return JsonResponse({
        'status': 'healthy',
        'service': 'funrun-backend'
    })


def api_root(request):
    """API root endpoint with version info."""
    return JsonResponse({
        'name': 'Funrun Registration API',
        'version': 'v1',
        'endpoints': {
            'auth': '/api/v1/auth/',
            'field_offices': '/api/v1/field-offices/',
            'registrations': '/api/v1/registrations/',
            'notifications': '/api/v1/notifications/',
        }
    })


urlpatterns = [
    # Health check (public)
    path('health/', health_check, name='health-check'),
    path('api/health/', health_check, name='api-health-check'),

    # API root
    path('api/v1/', api_root, name='api-root'),
    path('api/', api_root, name='api-root-short'),

    # Authentication endpoints
    path('api/v1/auth/', include('authentication.urls', namespace='auth')),

    # Field office reference data
    path('api/v1/field-offices/', include('core.urls', namespace='core')),

    # Registration endpoints
    path('api/v1/registrations/', include('registrations.urls', namespace='registrations')),

    # Notification endpoints
    path('api/v1/notifications/', include('notifications.urls', namespace='notifications')),

    # Admin pages (gated by AccessGateMiddleware except login)
    path('admin/login/', LoginPageView.as_view(), name='admin-login'),
    path('admin/dashboard/', AdminDashboardView.as_view(), name='admin-dashboard'),
    path('monitor/', MonitorView.as_view(), name='monitor'),
]

# Serve media files during development (DEBUG=True)
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
