"""
URL configuration for authentication app.
"""

from django.urls import path

from .views import LoginView, LogoutView, SessionView

app_name = 'authentication'

urlpatterns = [
    path('login/', LoginView.as_view(), name='login'),
    path('logout/', LogoutView.as_view(), name='logout'),
    path('session/', SessionView.as_view(), name='session'),
]
