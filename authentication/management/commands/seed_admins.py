"""
Management command to seed field offices and demo admin accounts.

Usage:
    python manage.py seed_admins [--force]

Creates the reference field offices and one admin per office:
    - admin_cotabato / Cotabato2025! (Cotabato City field admin)
    - admin_sulu_station, admin_basilan_station / FieldAdmin2025!
    - admin_lanao / Lanao2025!, admin_tawi / Tawi2025!
    - main_admin / MainAdmin2025! (main admin, Maguindanao)
    - rd_ard / RDARD2025!, monitor / Monitor2025! (RD/ARD monitors)
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from authentication.models import AdminRole, AdminUser
from core.models import FieldOffice


FIELD_OFFICES = [
    {'id': 1, 'code': 'cotabato', 'name': 'Cotabato City'},
    {'id': 21, 'code': 'sulu_station', 'name': 'FO - Sulu/Basilan (Sulu Station)'},
    {'id': 22, 'code': 'basilan_station', 'name': 'FO - Sulu/Basilan (Basilan Station)'},
    {'id': 3, 'code': 'lanao', 'name': 'Lanao Del Sur'},
    {'id': 4, 'code': 'tawi', 'name': 'Tawi-Tawi'},
    {'id': 5, 'code': 'maguindanao', 'name': 'Maguindanao'},
    {'id': 99, 'code': 'monitor', 'name': 'RD/ARD Monitoring'},
]

DEMO_ADMINS = [
    {
        'username': 'admin_cotabato',
        'password': 'Cotabato2025!',
        'role': AdminRole.FIELD_ADMIN,
        'office': 1,
        'name': 'Cotabato Field Office Admin',
    },
    {
        'username': 'admin_sulu_station',
        'password': 'FieldAdmin2025!',
        'role': AdminRole.FIELD_ADMIN,
        'office': 21,
        'name': 'Sulu Station Field Office Admin',
    },
    {
        'username': 'admin_basilan_station',
        'password': 'FieldAdmin2025!',
        'role': AdminRole.FIELD_ADMIN,
        'office': 22,
        'name': 'Basilan Station Field Office Admin',
    },
    {
        'username': 'admin_lanao',
        'password': 'Lanao2025!',
        'role': AdminRole.FIELD_ADMIN,
        'office': 3,
        'name': 'Lanao Del Sur Field Office Admin',
    },
    {
        'username': 'admin_tawi',
        'password': 'Tawi2025!',
        'role': AdminRole.FIELD_ADMIN,
        'office': 4,
        'name': 'Tawi-Tawi Field Office Admin',
    },
    {
        'username': 'main_admin',
        'password': 'MainAdmin2025!',
        'role': AdminRole.MAIN_ADMIN,
        'office': 5,
        'name': 'Main Administrator',
    },
    {
        'username': 'rd_ard',
        'password': 'RDARD2025!',
        'role': AdminRole.RD_ARD,
        'office': 99,
        'name': 'RD/ARD Monitor',
    },
    {
        'username': 'monitor',
        'password': 'Monitor2025!',
        'role': AdminRole.RD_ARD,
        'office': 99,
        'name': 'RD/ARD Monitor',
    },
]


def seed_field_offices():
    """Create or update the reference field offices. Returns created count."""
    created = 0
    for office in FIELD_OFFICES:
        _, was_created = FieldOffice.objects.update_or_create(
            id=office['id'],
            defaults={'code': office['code'], 'name': office['name']},
        )
        created += int(was_created)
    return created


class Command(BaseCommand):
    help = 'Seed field offices and demo admin accounts for every role'

    def add_arguments(self, parser):
        parser.add_argument(
            '--force',
            action='store_true',
            help='Reset passwords even if admins already exist',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        force = options['force']
        created_count = 0
        updated_count = 0

        offices_created = seed_field_offices()
        self.stdout.write(self.style.SUCCESS(
            f'Field offices ready ({offices_created} created)'
        ))

        for admin_data in DEMO_ADMINS:
            username = admin_data['username']
            role = admin_data['role']
            office = FieldOffice.objects.get(id=admin_data['office'])

            try:
                user = AdminUser.objects.get(username=username)
                if force:
                    user.set_password(admin_data['password'])
                    user.role = role
                    user.field_office = office
                    user.name = admin_data['name']
                    user.is_active = True
                    user.save()
                    updated_count += 1
                    self.stdout.write(self.style.WARNING(
                        f'  Updated: {username} ({role})'
                    ))
                else:
                    self.stdout.write(self.style.NOTICE(
                        f'  Exists:  {username} ({user.role}), use --force to reset'
                    ))
            except AdminUser.DoesNotExist:
                AdminUser.objects.create_user(
                    username=username,
                    password=admin_data['password'],
                    role=role,
                    field_office=office,
                    name=admin_data['name'],
                )
                created_count += 1
                self.stdout.write(self.style.SUCCESS(
                    f'  Created: {username} ({role})'
                ))

        self.stdout.write('')
        self.stdout.write(self.style.SUCCESS(
            f'Done! Created: {created_count}, Updated: {updated_count}'
        ))
