"""
Registration models for the Funrun backend.

Contains:
- IndividualRegistration: single runner with payment receipt
- GroupRegistration: organization submitting a participant roster
- GroupParticipant: one runner from a group roster

Invariants:
- or_number is set iff status is approved, and is exactly 8 digits
- approved and rejected are terminal
- approving a group copies its OR number to every participant
"""

import os
import re

from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from django.utils import timezone

from core.models import BaseModel


class RegistrationStatus:
    """Review status constants."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    CHOICES = [
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
    ]

    # No transition leaves these states
    TERMINAL_STATES = [APPROVED, REJECTED]


class RegistrationType:
    """Registration kind used in URLs and workflow calls."""
    INDIVIDUAL = 'individual'
    GROUP = 'group'

    CHOICES = [
        (INDIVIDUAL, 'Individual'),
        (GROUP, 'Group'),
    ]

    ALL = [INDIVIDUAL, GROUP]


class Gender:
    MALE = 'Male'
    FEMALE = 'Female'

    CHOICES = [
        (MALE, 'Male'),
        (FEMALE, 'Female'),
    ]


OR_NUMBER_PATTERN = r'^[0-9]{8}$'

or_number_validator = RegexValidator(
    regex=OR_NUMBER_PATTERN,
    message='Invalid OR Number. Must be exactly 8 digits.'
)


def is_valid_or_number(value):
    return isinstance(value, str) and re.fullmatch(OR_NUMBER_PATTERN, value) is not None


def sanitize_filename(filename):
    """Replace anything but letters, digits, dot and dash with underscores."""
    return re.sub(r'[^a-zA-Z0-9.-]', '_', os.path.basename(filename))


def _timestamped_name(filename):
    timestamp = int(timezone.now().timestamp() * 1000)
    return f"{timestamp}_{sanitize_filename(filename)}"


def receipt_upload_path(instance, filename):
    """receipts/<individual|group>/<field_office_id>/<timestamp>_<name>"""
    kind = instance.registration_type
    return f"receipts/{kind}/{instance.field_office_id}/{_timestamped_name(filename)}"


def roster_upload_path(instance, filename):
    """registrations/group/<field_office_id>/<timestamp>_<name>"""
    return f"registrations/group/{instance.field_office_id}/{_timestamped_name(filename)}"


class RegistrationRecord(BaseModel):
    """
    Fields and behaviour shared by individual and group registrations.
    """

    registration_type = None

    field_office = models.ForeignKey(
        'core.FieldOffice',
        on_delete=models.PROTECT,
        related_name='%(class)ss',
        help_text="Field office handling this registration"
    )

    receipt = models.FileField(
        upload_to=receipt_upload_path,
        max_length=255,
        blank=True,
        help_text="Payment receipt (PDF, JPEG or PNG)"
    )

    status = models.CharField(
        max_length=20,
        choices=RegistrationStatus.CHOICES,
        default=RegistrationStatus.PENDING,
        db_index=True
    )

    or_number = models.CharField(
        max_length=8,
        blank=True,
        default='',
        validators=[or_number_validator],
        help_text="Official receipt number, set on approval"
    )

    submitted_at = models.DateTimeField(
        default=timezone.now,
        db_index=True
    )

    class Meta:
        abstract = True
        ordering = ['-submitted_at']

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        # Status as loaded, used by change events to detect transitions
        instance._loaded_status = getattr(instance, 'status', None)
        return instance

    @property
    def is_pending(self):
        return self.status == RegistrationStatus.PENDING

    @property
    def receipt_url(self):
        return self.receipt.url if self.receipt else None

    @property
    def display_name(self):
        raise NotImplementedError


class IndividualRegistration(RegistrationRecord):
    """A single runner's registration."""

    registration_type = RegistrationType.INDIVIDUAL

    full_name = models.CharField(max_length=255)

    age = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    gender = models.CharField(max_length=10, choices=Gender.CHOICES)

    contact_number = models.CharField(max_length=30)

    email = models.EmailField(max_length=254)

    address = models.TextField()

    class Meta(RegistrationRecord.Meta):
        db_table = 'individual_registrations'
        verbose_name = 'Individual Registration'
        verbose_name_plural = 'Individual Registrations'
        indexes = [
            models.Index(fields=['field_office', 'status'], name='indiv_office_status_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.status})"

    @property
    def display_name(self):
        return self.full_name


class GroupRegistration(RegistrationRecord):
    """An organization's registration with a participant roster."""

    registration_type = RegistrationType.GROUP

    agency_name = models.CharField(max_length=255)

    contact_person = models.CharField(max_length=255, blank=True)

    contact_number = models.CharField(max_length=30)

    contact_email = models.EmailField(max_length=254, blank=True)

    excel_file = models.FileField(
        upload_to=roster_upload_path,
        max_length=255,
        blank=True,
        help_text="Original roster spreadsheet"
    )

    class Meta(RegistrationRecord.Meta):
        db_table = 'group_registrations'
        verbose_name = 'Group Registration'
        verbose_name_plural = 'Group Registrations'
        indexes = [
            models.Index(fields=['field_office', 'status'], name='group_office_status_idx'),
        ]

    def __str__(self):
        return f"{self.agency_name} ({self.status})"

    @property
    def display_name(self):
        return self.agency_name

    @property
    def excel_file_url(self):
        return self.excel_file.url if self.excel_file else None


class GroupParticipant(BaseModel):
    """One runner listed on a group roster."""

    group_registration = models.ForeignKey(
        GroupRegistration,
        on_delete=models.PROTECT,
        related_name='participants'
    )

    full_name = models.CharField(max_length=255)

    age = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    gender = models.CharField(max_length=10, choices=Gender.CHOICES)

    email = models.EmailField(max_length=254, blank=True)

    or_number = models.CharField(
        max_length=8,
        blank=True,
        default='',
        validators=[or_number_validator]
    )

    class Meta:
        db_table = 'group_participants'
        verbose_name = 'Group Participant'
        verbose_name_plural = 'Group Participants'
        ordering = ['full_name']

    def __str__(self):
        return self.full_name
