"""
URL configuration for Core app.

Handles public reference data endpoints.
"""
from django.urls import path
from core.views import FieldOfficeListView

app_name = 'core'

urlpatterns = [
    # Field office list (public, no auth required)
    path('', FieldOfficeListView.as_view(), name='field-office-list'),
]
