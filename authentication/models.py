"""
Authentication models for the Funrun backend.

Contains:
- AdminRole constants
- Custom AdminUser model for field office, main and RD/ARD admins

Security Features:
- UUID primary keys
- Django password hashing
- Role and field office copied into the session token at login
"""

from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager

from core.models import BaseModel, FieldOffice


class AdminRole:
    """
    Admin role constants.

    FIELD_ADMIN: reviews registrations of a single field office
    MAIN_ADMIN: sees and manages every field office
    RD_ARD: read-only monitoring across all field offices
    """
    FIELD_ADMIN = 'field_admin'
    MAIN_ADMIN = 'main_admin'
    RD_ARD = 'rd_ard'

    CHOICES = [
        (FIELD_ADMIN, 'Field Office Admin'),
        (MAIN_ADMIN, 'Main Admin'),
        (RD_ARD, 'RD/ARD Monitor'),
    ]

    ALL = [FIELD_ADMIN, MAIN_ADMIN, RD_ARD]

    # Roles that see every field office
    CROSS_OFFICE_ROLES = [MAIN_ADMIN, RD_ARD]


class AdminUserManager(BaseUserManager):
    """Manager for AdminUser accounts."""

    def create_user(self, username, password=None, **extra_fields):
        """
        Create and return an admin account.

        Args:
            username: Login name
            password: Raw password (hashed before saving)
            **extra_fields: name, role, field_office, is_active
        """
        if not username:
            raise ValueError('Admin must have a username')

        role = extra_fields.setdefault('role', AdminRole.FIELD_ADMIN)
        if role not in AdminRole.ALL:
            raise ValueError(f'Invalid admin role: {role}')

        user = self.model(username=username, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, username, password, field_office=None, **extra_fields):
        """
        Create a main admin account.

        Login needs a home field office, so one is required here; it may be
        given as a FieldOffice, its id or its code.
        """
        if not isinstance(field_office, FieldOffice):
            field_office = FieldOffice.resolve(field_office)
        if field_office is None:
            raise ValueError('Main admin must have a field office')

        extra_fields.setdefault('role', AdminRole.MAIN_ADMIN)
        extra_fields.setdefault('name', 'Main Administrator')
        return self.create_user(username, password, field_office=field_office, **extra_fields)


class AdminUser(AbstractBaseUser, BaseModel):
    """
    Admin account allowed to sign in to the review surface.

    The session token carries ``role`` and ``field_office_id`` taken from
    this row at login; changes here apply from the next login.
    """

    username = models.CharField(
        max_length=150,
        unique=True,
        help_text="Login name"
    )

    name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Display name"
    )

    role = models.CharField(
        max_length=20,
        choices=AdminRole.CHOICES,
        default=AdminRole.FIELD_ADMIN,
        db_index=True
    )

    field_office = models.ForeignKey(
        'core.FieldOffice',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='admins',
        help_text="Home field office"
    )

    is_active = models.BooleanField(default=True)

    objects = AdminUserManager()

    USERNAME_FIELD = 'username'
    REQUIRED_FIELDS = ['field_office']

    class Meta:
        db_table = 'admin_users'
        verbose_name = 'Admin User'
        verbose_name_plural = 'Admin Users'
        ordering = ['username']

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"

    @property
    def is_main_admin(self):
        return self.role == AdminRole.MAIN_ADMIN

    @property
    def is_rd_ard(self):
        return self.role == AdminRole.RD_ARD

    @property
    def is_field_admin(self):
        return self.role == AdminRole.FIELD_ADMIN
