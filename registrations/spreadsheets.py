"""
Group roster spreadsheet codec.

Generates the blank group registration workbook and parses filled-in
copies back into a ``RosterTemplate``.

Workbook layout:
- "Organization Info": labelled rows (label in column A, value in column B)
- "Participants": header row Full Name | Age | Gender | Email Address,
  followed by one participant per row

Cells are read through ``coerce_text`` / ``coerce_age`` so every raw cell
type maps to an explicit value or a per-cell error.
"""

import io
import logging
import re
import zipfile
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, List, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException

from core.exceptions import RosterParseError
from .models import Gender

logger = logging.getLogger('funrun.registrations')

ORGANIZATION_SHEET = 'Organization Info'
PARTICIPANTS_SHEET = 'Participants'

PARTICIPANT_HEADERS = ['Full Name', 'Age', 'Gender', 'Email Address']

EXAMPLE_PARTICIPANTS = [
    ['John Doe', 25, 'Male', 'john@example.com'],
    ['Jane Smith', 30, 'Female', 'jane@example.com'],
]
EXAMPLE_NAMES = {row[0] for row in EXAMPLE_PARTICIPANTS}

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

GENDER_ALIASES = {
    'male': Gender.MALE,
    'm': Gender.MALE,
    'female': Gender.FEMALE,
    'f': Gender.FEMALE,
}

# Column A label fragment -> RosterTemplate attribute
ORGANIZATION_LABELS = [
    ('organization name', 'organization_name'),
    ('contact person', 'contact_person'),
    ('contact number', 'contact_number'),
    ('contact email', 'contact_email'),
]


# =============================================================================
# CELL COERCION
# =============================================================================

@dataclass(frozen=True)
class CoercedCell:
    """Result of reading one cell: a value, or an error describing why not."""
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def coerce_text(raw) -> CoercedCell:
    """
    Read a cell as text.

    empty -> "", str -> trimmed, bool -> "true"/"false",
    integral float -> integer string, other numbers -> str,
    date/time -> ISO string.
    """
    if raw is None:
        return CoercedCell('')
    if isinstance(raw, str):
        return CoercedCell(raw.strip())
    if isinstance(raw, bool):
        return CoercedCell('true' if raw else 'false')
    if isinstance(raw, float) and raw.is_integer():
        return CoercedCell(str(int(raw)))
    if isinstance(raw, (int, float, Decimal)):
        return CoercedCell(str(raw))
    if isinstance(raw, (datetime, date, time)):
        return CoercedCell(raw.isoformat())
    return CoercedCell(str(raw).strip())


def coerce_age(raw) -> CoercedCell:
    """
    Read a cell as a whole-number age.

    int -> int, integral float -> int, numeric string -> int.
    Empty, boolean, fractional, date and non-numeric cells are errors.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return CoercedCell(error='age is empty')
    if isinstance(raw, bool):
        return CoercedCell(error='age is a boolean')
    if isinstance(raw, (datetime, date, time)):
        return CoercedCell(error='age is a date')
    if isinstance(raw, int):
        return CoercedCell(raw)
    if isinstance(raw, float):
        if raw.is_integer():
            return CoercedCell(int(raw))
        return CoercedCell(error=f'age {raw} is not a whole number')
    if isinstance(raw, Decimal):
        if raw.is_finite() and raw == raw.to_integral_value():
            return CoercedCell(int(raw))
        return CoercedCell(error=f'age {raw} is not a whole number')
    if isinstance(raw, str):
        text = raw.strip()
        if re.fullmatch(r'[+-]?\d+', text):
            return CoercedCell(int(text))
        try:
            number = float(text)
        except ValueError:
            return CoercedCell(error=f'age {text!r} is not a number')
        if number.is_integer():
            return CoercedCell(int(number))
        return CoercedCell(error=f'age {text!r} is not a whole number')
    return CoercedCell(error=f'age has unsupported type {type(raw).__name__}')


# =============================================================================
# ROSTER TYPES
# =============================================================================

@dataclass
class RosterParticipant:
    full_name: str
    age: int
    gender: str
    email: str


@dataclass
class RosterTemplate:
    organization_name: str = ''
    contact_person: str = ''
    contact_number: str = ''
    contact_email: str = ''
    participants: List[RosterParticipant] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


# =============================================================================
# GENERATION
# =============================================================================

def template_filename(field_office_name):
    office = re.sub(r'\s+', '_', field_office_name.strip())
    office = re.sub(r'[^A-Za-z0-9_.-]', '_', office)
    return f"Funrun_Group_Registration_Template_{office}.xlsx"


def generate_roster_template(field_office_name) -> bytes:
    """Build the blank group registration workbook for a field office."""
    wb = Workbook()

    org_sheet = wb.active
    org_sheet.title = ORGANIZATION_SHEET
    org_rows = [
        ['FUNRUN REGISTRATION - GROUP TEMPLATE'],
        [],
        ['Field Office:', field_office_name],
        [],
        ['ORGANIZATION INFORMATION'],
        ['Organization Name:', ''],
        ['Contact Person:', ''],
        ['Contact Number:', ''],
        ['Contact Email:', ''],
        [],
        ['INSTRUCTIONS:'],
        ['1. Fill in the organization information above'],
        ['2. Go to the "Participants" sheet to add participant details'],
        ['3. Save the file and upload it back to the system'],
        ['4. Make sure all required fields are filled'],
    ]
    for row in org_rows:
        org_sheet.append(row)
    org_sheet['A1'].font = Font(bold=True, size=14)
    org_sheet['A5'].font = Font(bold=True)
    org_sheet['A11'].font = Font(bold=True)
    org_sheet.column_dimensions['A'].width = 20
    org_sheet.column_dimensions['B'].width = 30

    participant_sheet = wb.create_sheet(PARTICIPANTS_SHEET)
    participant_sheet.append(['PARTICIPANT LIST'])
    participant_sheet.append([])
    participant_sheet.append(PARTICIPANT_HEADERS)
    for row in EXAMPLE_PARTICIPANTS:
        participant_sheet.append(row)
    participant_sheet['A1'].font = Font(bold=True, size=14)
    for cell in participant_sheet[3]:
        cell.font = Font(bold=True)
    for column, width in zip('ABCD', (25, 10, 15, 30)):
        participant_sheet.column_dimensions[column].width = width

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


# =============================================================================
# PARSING
# =============================================================================

def _padded(row, width=4):
    values = list(row or ())
    if len(values) < width:
        values.extend([None] * (width - len(values)))
    return values


def _read_organization(sheet, roster):
    for row in sheet.iter_rows(values_only=True):
        label_raw, value_raw = _padded(row, 2)[:2]
        label = coerce_text(label_raw).value.lower()
        value = coerce_text(value_raw).value
        if not label or not value:
            continue
        for fragment, attribute in ORGANIZATION_LABELS:
            if fragment in label:
                setattr(roster, attribute, value)
                break


def _find_header_row(rows):
    """Index of the first row whose first four cells name the columns."""
    for index, row in enumerate(rows):
        cells = [coerce_text(v).value.lower() for v in _padded(row)[:4]]
        if (
            'full name' in cells[0]
            and 'age' in cells[1]
            and 'gender' in cells[2]
            and 'email' in cells[3]
        ):
            return index
    return None


def _read_participants(rows, start, row_offset=1):
    participants = []
    invalid_emails = []

    for index in range(start, len(rows)):
        row_number = index + row_offset
        name_raw, age_raw, gender_raw, email_raw = _padded(rows[index])[:4]

        full_name = coerce_text(name_raw).value
        if not full_name or full_name in EXAMPLE_NAMES:
            continue

        age = coerce_age(age_raw)
        if not age.ok:
            logger.info(f"Roster row {row_number} skipped: {age.error}")
            continue
        if age.value <= 0:
            continue

        gender = coerce_text(gender_raw).value
        email = coerce_text(email_raw).value
        if not gender or not email:
            continue

        if not EMAIL_RE.match(email):
            invalid_emails.append(f"{full_name} ({email})")
            continue

        normalized_gender = GENDER_ALIASES.get(gender.lower())
        if normalized_gender is None:
            logger.warning(
                f'Invalid gender "{gender}" for participant "{full_name}" '
                f'(row {row_number}). Skipping.'
            )
            continue

        participants.append(RosterParticipant(
            full_name=full_name,
            age=age.value,
            gender=normalized_gender,
            email=email,
        ))

    return participants, invalid_emails


def parse_roster_workbook(file) -> RosterTemplate:
    """
    Parse an uploaded roster workbook.

    Args:
        file: path, bytes or file-like object holding an .xlsx workbook

    Raises:
        RosterParseError: with a message describing the first problem found
    """
    if isinstance(file, (bytes, bytearray)):
        file = io.BytesIO(file)

    try:
        wb = load_workbook(file, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError, TypeError) as exc:
        logger.warning(f"Unreadable roster workbook: {exc.__class__.__name__}: {exc}")
        raise RosterParseError('Failed to read Excel file')

    try:
        if ORGANIZATION_SHEET not in wb.sheetnames:
            raise RosterParseError(f'{ORGANIZATION_SHEET} sheet not found')

        roster = RosterTemplate()
        _read_organization(wb[ORGANIZATION_SHEET], roster)

        if PARTICIPANTS_SHEET not in wb.sheetnames:
            raise RosterParseError(f'{PARTICIPANTS_SHEET} sheet not found')

        rows = list(wb[PARTICIPANTS_SHEET].iter_rows(values_only=True))
    finally:
        wb.close()

    header_index = _find_header_row(rows)
    if header_index is None:
        raise RosterParseError(
            'Participant header row not found. Please ensure the Participants '
            'sheet has columns: ' + ', '.join(PARTICIPANT_HEADERS)
        )

    participants, invalid_emails = _read_participants(rows, header_index + 1)
    roster.participants = participants

    if not roster.organization_name:
        raise RosterParseError('Organization name is required')
    if not roster.contact_number:
        raise RosterParseError('Contact number is required')
    if invalid_emails:
        raise RosterParseError(
            f"Invalid email addresses found: {', '.join(invalid_emails)}"
        )
    if not roster.participants:
        raise RosterParseError('At least one participant is required')

    logger.info(
        f"Parsed roster for {roster.organization_name!r}: "
        f"{len(roster.participants)} participants"
    )
    return roster
