"""
Shared test data builders.
"""

from django.conf import settings
from django.core.files.uploadedfile import SimpleUploadedFile

from authentication.management.commands.seed_admins import seed_field_offices
from authentication.models import AdminRole, AdminUser
from authentication.tokens import issue_session_token
from core.models import FieldOffice
from registrations.models import (
    GroupParticipant,
    GroupRegistration,
    IndividualRegistration,
    RegistrationStatus,
)

COTABATO = 1
LANAO = 3
MAGUINDANAO = 5
MONITOR_OFFICE = 99


def seed_offices():
    seed_field_offices()
    return {office.pk: office for office in FieldOffice.objects.all()}


def make_admin(username, role=AdminRole.FIELD_ADMIN, office_id=COTABATO, password='Passw0rd!'):
    return AdminUser.objects.create_user(
        username=username,
        password=password,
        role=role,
        field_office=FieldOffice.objects.get(pk=office_id),
        name=username.replace('_', ' ').title(),
    )


def sign_in(client, user):
    """Put a freshly issued session cookie on an APIClient."""
    client.cookies[settings.SESSION_TOKEN_COOKIE] = issue_session_token(user)
    return client


def receipt_upload(name='receipt.pdf', content_type='application/pdf', content=b'%PDF-1.4 receipt'):
    return SimpleUploadedFile(name, content, content_type=content_type)


def make_individual(office_id=COTABATO, full_name='Juan Dela Cruz', status=RegistrationStatus.PENDING,
                    or_number='', **extra):
    fields = {
        'age': 30,
        'gender': 'Male',
        'contact_number': '09171234567',
        'email': 'juan@example.com',
        'address': 'Cotabato City',
    }
    fields.update(extra)
    return IndividualRegistration.objects.create(
        field_office_id=office_id,
        full_name=full_name,
        status=status,
        or_number=or_number,
        **fields
    )


def make_group(office_id=COTABATO, agency_name='Runners Club', participants=3,
               status=RegistrationStatus.PENDING, or_number=''):
    group = GroupRegistration.objects.create(
        field_office_id=office_id,
        agency_name=agency_name,
        contact_person='Maria Santos',
        contact_number='09181234567',
        contact_email='club@example.com',
        status=status,
        or_number=or_number,
    )
    for index in range(participants):
        GroupParticipant.objects.create(
            group_registration=group,
            full_name=f'Runner {chr(65 + index)}',
            age=20 + index,
            gender='Female' if index % 2 else 'Male',
            email=f'runner{index}@example.com',
            or_number=or_number,
        )
    return group
