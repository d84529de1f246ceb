"""
Session tokens for admin sign-in.

A session token is a signed HS256 access token (simplejwt) carrying:
- sub: admin user id
- role: field_admin | main_admin | rd_ard
- field_office_id: home field office id
- iat / exp: issue and expiry times

Tokens are decoded once into an ``AdminSession``; anything that fails
verification or lacks a required claim is rejected as a whole.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict, Optional

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken
from rest_framework_simplejwt.utils import datetime_to_epoch

from authentication.models import AdminRole

security_logger = logging.getLogger('funrun.security')

REQUIRED_CLAIMS = ('role', 'field_office_id', 'iat', 'exp')


class InvalidSessionToken(Exception):
    """Raised when a session token cannot be trusted."""


@dataclass(frozen=True)
class AdminSession:
    """Verified, immutable view of a session token."""

    subject: str
    role: str
    field_office_id: int
    issued_at: datetime
    expires_at: datetime
    claims: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'AdminSession':
        subject = payload.get(api_settings.USER_ID_CLAIM)
        if subject in (None, ''):
            raise InvalidSessionToken('Token has no subject')

        missing = [claim for claim in REQUIRED_CLAIMS if payload.get(claim) is None]
        if missing:
            raise InvalidSessionToken(f"Token is missing claims: {', '.join(missing)}")

        role = payload['role']
        if role not in AdminRole.ALL:
            raise InvalidSessionToken(f"Unknown role: {role}")

        office_id = payload['field_office_id']
        if isinstance(office_id, bool) or not isinstance(office_id, int):
            raise InvalidSessionToken('field_office_id must be an integer')

        try:
            issued_at = datetime.fromtimestamp(int(payload['iat']), tz=dt_timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload['exp']), tz=dt_timezone.utc)
        except (TypeError, ValueError, OverflowError) as exc:
            raise InvalidSessionToken('Token timestamps are invalid') from exc

        return cls(
            subject=str(subject),
            role=role,
            field_office_id=office_id,
            issued_at=issued_at,
            expires_at=expires_at,
            claims=dict(payload),
        )

    @property
    def is_main_admin(self) -> bool:
        return self.role == AdminRole.MAIN_ADMIN

    @property
    def is_monitor(self) -> bool:
        return self.role == AdminRole.RD_ARD

    @property
    def can_view_all_offices(self) -> bool:
        return self.role in AdminRole.CROSS_OFFICE_ROLES

    @property
    def can_modify(self) -> bool:
        return self.role != AdminRole.RD_ARD

    @property
    def office_scope(self) -> Optional[int]:
        """Field office id to filter by, or None for all offices."""
        if self.can_view_all_offices:
            return None
        return self.field_office_id

    def can_access_office(self, field_office_id) -> bool:
        if self.can_view_all_offices:
            return True
        return field_office_id is not None and int(field_office_id) == self.field_office_id


def issue_session_token(user) -> str:
    """Sign a session token for an authenticated admin."""
    if user.field_office_id is None:
        raise ValueError(f"Admin {user.username} has no field office")

    token = AccessToken.for_user(user)
    token['iat'] = datetime_to_epoch(token.current_time)
    token['role'] = user.role
    token['field_office_id'] = int(user.field_office_id)
    return str(token)


def decode_session_token(raw_token) -> AdminSession:
    """
    Verify signature and expiry, then decode the claims.

    Raises:
        InvalidSessionToken: on any verification or payload problem
    """
    if not raw_token:
        raise InvalidSessionToken('No token provided')

    if isinstance(raw_token, bytes):
        raw_token = raw_token.decode('utf-8', errors='replace')

    try:
        token = AccessToken(raw_token)
    except TokenError as exc:
        raise InvalidSessionToken(str(exc)) from exc

    return AdminSession.from_payload(token.payload)
