"""
Serializers for admin sign-in.
"""

import logging

from django.contrib.auth import authenticate
from rest_framework import serializers

from .models import AdminUser

auth_logger = logging.getLogger('funrun.auth')


class AdminLoginSerializer(serializers.Serializer):
    """
    Validate username + password against AdminUser.

    Invalid credentials never say which part was wrong.
    """

    username = serializers.CharField(max_length=150, trim_whitespace=True)
    password = serializers.CharField(
        max_length=128,
        write_only=True,
        trim_whitespace=False,
        style={'input_type': 'password'}
    )

    def authenticate_admin(self):
        """
        Return the authenticated admin or None.

        Call after ``is_valid()``.
        """
        username = self.validated_data['username']
        password = self.validated_data['password']

        user = authenticate(
            request=self.context.get('request'),
            username=username,
            password=password
        )

        if user is None or not user.is_active:
            auth_logger.warning(f"Failed login for username={username!r}")
            return None

        if user.field_office_id is None:
            auth_logger.error(f"Admin {username!r} has no field office assigned")
            return None

        return user


class AdminUserSerializer(serializers.ModelSerializer):
    """Public view of an admin after login."""

    field_office = serializers.CharField(source='field_office.name', default=None)
    field_office_id = serializers.IntegerField()

    class Meta:
        model = AdminUser
        fields = ['name', 'role', 'field_office', 'field_office_id']


class SessionSerializer(serializers.Serializer):
    """Current session as seen by the API."""

    subject = serializers.CharField()
    role = serializers.CharField()
    field_office_id = serializers.IntegerField()
    issued_at = serializers.DateTimeField()
    expires_at = serializers.DateTimeField()
    is_main_admin = serializers.BooleanField()
    can_modify = serializers.BooleanField()
