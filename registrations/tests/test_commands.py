from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from authentication.models import AdminUser
from core.models import FieldOffice
from core.tests.factories import make_group, seed_offices
from registrations.models import GroupParticipant, RegistrationStatus


class ReconcileCommandTests(TestCase):

    def setUp(self):
        seed_offices()

    def test_repairs_and_reports(self):
        group = make_group(participants=2, status=RegistrationStatus.APPROVED, or_number='12345678')
        GroupParticipant.objects.filter(group_registration=group).update(or_number='')

        out = StringIO()
        call_command('reconcile_or_numbers', stdout=out)
        self.assertIn('Updated OR numbers on 2 participants', out.getvalue())

        out = StringIO()
        call_command('reconcile_or_numbers', '--group', str(group.pk), stdout=out)
        self.assertIn('consistent', out.getvalue())

    def test_rejects_bad_group_id(self):
        with self.assertRaises(CommandError):
            call_command('reconcile_or_numbers', '--group', 'nope', stdout=StringIO())
        with self.assertRaises(CommandError):
            call_command(
                'reconcile_or_numbers', '--group', '00000000-0000-0000-0000-000000000000', stdout=StringIO()
            )


class SeedAdminsCommandTests(TestCase):

    def test_seeds_offices_and_admins_once(self):
        call_command('seed_admins', stdout=StringIO())
        call_command('seed_admins', stdout=StringIO())

        self.assertEqual(FieldOffice.objects.count(), 7)
        self.assertEqual(AdminUser.objects.count(), 8)
        main = AdminUser.objects.get(username='main_admin')
        self.assertTrue(main.is_main_admin)
        self.assertTrue(main.check_password('MainAdmin2025!'))
