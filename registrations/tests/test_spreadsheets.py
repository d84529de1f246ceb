import io
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase
from openpyxl import Workbook, load_workbook

from core.exceptions import RosterParseError
from registrations.spreadsheets import (
    coerce_age,
    coerce_text,
    generate_roster_template,
    parse_roster_workbook,
    template_filename,
)


def roster_bytes(organization='Cotabato Runners', contact_number='09171234567', participants=None,
                 include_participants_sheet=True, header=('Full Name', 'Age', 'Gender', 'Email Address')):
    """Fill in a copy of the downloadable template."""
    wb = load_workbook(io.BytesIO(generate_roster_template('Cotabato City')))
    org = wb['Organization Info']
    org['B6'] = organization
    org['B7'] = 'Maria Santos'
    org['B8'] = contact_number
    org['B9'] = 'club@example.com'

    if include_participants_sheet:
        sheet = wb['Participants']
        for column, value in zip('ABCD', header):
            sheet[f'{column}3'] = value
        for row in participants or []:
            sheet.append(row)
    else:
        del wb['Participants']

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class CellCoercionTests(SimpleTestCase):

    def test_text(self):
        self.assertEqual(coerce_text(None).value, '')
        self.assertEqual(coerce_text('  Ana  ').value, 'Ana')
        self.assertEqual(coerce_text(True).value, 'true')
        self.assertEqual(coerce_text(25.0).value, '25')
        self.assertEqual(coerce_text(2.5).value, '2.5')
        self.assertEqual(coerce_text(date(2025, 1, 2)).value, '2025-01-02')

    def test_age(self):
        self.assertEqual(coerce_age(25).value, 25)
        self.assertEqual(coerce_age(25.0).value, 25)
        self.assertEqual(coerce_age(' 31 ').value, 31)
        self.assertEqual(coerce_age(Decimal('40')).value, 40)

        for raw in (None, '', True, 25.5, 'abc', date(2000, 1, 1), Decimal('1.5')):
            result = coerce_age(raw)
            self.assertFalse(result.ok, raw)
            self.assertIsNotNone(result.error)


class RosterTemplateTests(SimpleTestCase):

    def test_template_layout(self):
        wb = load_workbook(io.BytesIO(generate_roster_template('Cotabato City')))

        self.assertEqual(wb.sheetnames, ['Organization Info', 'Participants'])
        self.assertEqual(wb['Organization Info']['B3'].value, 'Cotabato City')
        header = [cell.value for cell in wb['Participants'][3]]
        self.assertEqual(header, ['Full Name', 'Age', 'Gender', 'Email Address'])

    def test_filename_replaces_unsafe_characters(self):
        self.assertEqual(
            template_filename('FO - Sulu/Basilan (Sulu Station)'),
            'Funrun_Group_Registration_Template_FO_-_Sulu_Basilan__Sulu_Station_.xlsx'
        )

    def test_blank_template_needs_organization(self):
        with self.assertRaisesMessage(RosterParseError, 'Organization name is required'):
            parse_roster_workbook(generate_roster_template('Cotabato City'))


class RosterParseTests(SimpleTestCase):

    def test_filled_roster(self):
        content = roster_bytes(participants=[
            ['Ana Reyes', 28, 'female', 'ana@example.com'],
            ['Ben Cruz', '35', 'M', 'ben@example.com'],
            ['', 40, 'Male', 'blank@example.com'],
            ['Zero Age', 0, 'Male', 'zero@example.com'],
            ['No Email', 22, 'Male', ''],
            ['Bad Gender', 22, 'other', 'bad@example.com'],
        ])

        roster = parse_roster_workbook(content)

        self.assertEqual(roster.organization_name, 'Cotabato Runners')
        self.assertEqual(roster.contact_person, 'Maria Santos')
        self.assertEqual(roster.contact_number, '09171234567')
        self.assertEqual(roster.contact_email, 'club@example.com')
        self.assertEqual(
            [(p.full_name, p.age, p.gender) for p in roster.participants],
            [('Ana Reyes', 28, 'Female'), ('Ben Cruz', 35, 'Male')]
        )

    def test_example_rows_are_ignored(self):
        with self.assertRaisesMessage(RosterParseError, 'At least one participant is required'):
            parse_roster_workbook(roster_bytes(participants=[]))

    def test_numeric_contact_number_is_kept_as_text(self):
        roster = parse_roster_workbook(roster_bytes(
            contact_number=9171234567,
            participants=[['Ana Reyes', 28, 'Female', 'ana@example.com']],
        ))
        self.assertEqual(roster.contact_number, '9171234567')

    def test_missing_participants_sheet(self):
        with self.assertRaisesMessage(RosterParseError, 'Participants sheet not found'):
            parse_roster_workbook(roster_bytes(include_participants_sheet=False))

    def test_missing_organization_sheet(self):
        wb = Workbook()
        wb.active.title = 'Participants'
        buffer = io.BytesIO()
        wb.save(buffer)

        with self.assertRaisesMessage(RosterParseError, 'Organization Info sheet not found'):
            parse_roster_workbook(buffer.getvalue())

    def test_missing_header_row(self):
        content = roster_bytes(header=('Name', 'Years', 'Sex', 'Mail'))
        with self.assertRaisesMessage(RosterParseError, 'Participant header row not found'):
            parse_roster_workbook(content)

    def test_missing_contact_number(self):
        content = roster_bytes(contact_number='', participants=[['Ana Reyes', 28, 'Female', 'ana@example.com']])
        with self.assertRaisesMessage(RosterParseError, 'Contact number is required'):
            parse_roster_workbook(content)

    def test_invalid_emails_are_listed(self):
        content = roster_bytes(participants=[
            ['Ana Reyes', 28, 'Female', 'ana@example.com'],
            ['Ben Cruz', 35, 'Male', 'ben-at-example'],
            ['Cora Lim', 41, 'Female', 'cora@nowhere'],
        ])
        with self.assertRaises(RosterParseError) as ctx:
            parse_roster_workbook(content)

        self.assertEqual(
            ctx.exception.message,
            'Invalid email addresses found: Ben Cruz (ben-at-example), Cora Lim (cora@nowhere)'
        )

    def test_unreadable_file(self):
        with self.assertRaisesMessage(RosterParseError, 'Failed to read Excel file'):
            parse_roster_workbook(b'not a workbook')
