"""
Management command to repair participant OR numbers of approved groups.

Usage:
    python manage.py reconcile_or_numbers [--group <uuid>]
"""

import uuid

from django.core.management.base import BaseCommand, CommandError

from registrations.models import GroupRegistration
from registrations.services import RegistrationWorkflow


class Command(BaseCommand):
    help = 'Copy each approved group OR number to participants that differ'

    def add_arguments(self, parser):
        parser.add_argument(
            '--group',
            dest='group_id',
            help='Only reconcile this group registration id',
        )

    def handle(self, *args, **options):
        group_id = options.get('group_id')
        if group_id:
            try:
                group_id = uuid.UUID(group_id)
            except ValueError:
                raise CommandError(f'Invalid group id: {group_id}')
            if not GroupRegistration.objects.filter(pk=group_id).exists():
                raise CommandError(f'Group registration {group_id} not found')

        updated = RegistrationWorkflow.reconcile_participant_or_numbers(group_id=group_id)

        if updated:
            self.stdout.write(self.style.WARNING(
                f'Updated OR numbers on {updated} participants'
            ))
        else:
            self.stdout.write(self.style.SUCCESS('All participant OR numbers are consistent'))
