"""
URL configuration for registrations app.
"""

from django.urls import path, register_converter

from .views import (
    GroupExportView,
    GroupReconcileView,
    GroupRegistrationListCreateView,
    IndividualExportView,
    IndividualRegistrationListCreateView,
    MasterListExportView,
    MasterListView,
    RegistrationDetailView,
    RegistrationStatusView,
    RosterParseView,
    RosterTemplateView,
    StatisticsView,
)


class RegistrationTypeConverter:
    regex = 'individual|group'

    def to_python(self, value):
        return value

    def to_url(self, value):
        return value


register_converter(RegistrationTypeConverter, 'regtype')

app_name = 'registrations'

urlpatterns = [
    # Individual
    path('individual/', IndividualRegistrationListCreateView.as_view(), name='individual-list'),
    path('individual/export/', IndividualExportView.as_view(), name='individual-export'),

    # Group
    path('group/', GroupRegistrationListCreateView.as_view(), name='group-list'),
    path('group/export/', GroupExportView.as_view(), name='group-export'),
    path('group/template/', RosterTemplateView.as_view(), name='group-template'),
    path('group/parse/', RosterParseView.as_view(), name='group-parse'),
    path('group/reconcile/', GroupReconcileView.as_view(), name='group-reconcile'),

    # Review actions
    path('<regtype:registration_type>/<uuid:pk>/', RegistrationDetailView.as_view(), name='registration-detail'),
    path('<regtype:registration_type>/<uuid:pk>/status/', RegistrationStatusView.as_view(), name='registration-status'),

    # Aggregates
    path('stats/', StatisticsView.as_view(), name='stats'),
    path('participants/', MasterListView.as_view(), name='participants'),
    path('participants/export/', MasterListExportView.as_view(), name='participants-export'),
]
