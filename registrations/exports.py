import csv
import io
from typing import Iterable, List

from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Font

from .services import format_participant_name

INDIVIDUAL_HEADERS = [
    'ID', 'Name', 'Age', 'Gender', 'Contact', 'Address', 'Status', 'Field Office', 'OR Number',
]

GROUP_PARTICIPANT_HEADERS = [
    '#', 'Organization Name', 'Field Office', 'Group Status', 'Contact Number',
    'Participant Name', 'Age', 'Gender', 'OR Number', 'Registered Date',
]

MASTER_LIST_HEADERS = ['ID', 'Name', 'Age', 'Gender', 'Source', 'Agency', 'OR #', 'Remarks']

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _timestamp():
    return int(timezone.now().timestamp() * 1000)


def render_csv(headers: List[str], rows: Iterable[list]) -> bytes:
    """CSV text with a UTF-8 byte order mark so Excel detects the encoding."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(headers)
    for row in rows:
        writer.writerow(['' if value is None else value for value in row])
    return ('\ufeff' + buffer.getvalue()).encode('utf-8')


def individual_rows(registrations):
    for reg in registrations:
        yield [
            str(reg.pk),
            reg.full_name,
            reg.age,
            reg.gender,
            reg.contact_number,
            reg.address,
            reg.status,
            reg.field_office.name if reg.field_office_id else '',
            reg.or_number,
        ]


def group_participant_rows(groups):
    """One row per participant across the given groups, numbered from 1."""
    number = 0
    for group in groups:
        for participant in group.participants.all():
            number += 1
            registered = timezone.localtime(participant.created_at) if participant.created_at else None
            yield [
                number,
                group.agency_name,
                group.field_office.name if group.field_office_id else '',
                group.status,
                group.contact_number,
                participant.full_name,
                participant.age,
                participant.gender,
                participant.or_number or group.or_number,
                registered.strftime('%Y-%m-%d %H:%M:%S') if registered else '',
            ]


def csv_response(filename, content: bytes) -> HttpResponse:
    response = HttpResponse(content, content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def export_individuals_csv(registrations) -> HttpResponse:
    content = render_csv(INDIVIDUAL_HEADERS, individual_rows(registrations))
    return csv_response(f"individual_registrations_{_timestamp()}.csv", content)


def export_group_participants_csv(groups) -> HttpResponse:
    content = render_csv(GROUP_PARTICIPANT_HEADERS, group_participant_rows(groups))
    return csv_response(f"group_participants_{_timestamp()}.csv", content)


def build_master_list_workbook(entries) -> io.BytesIO:
    """Build the participant master list workbook (in-memory)."""
    wb = Workbook()
    ws = wb.active
    ws.title = 'Master List'
    ws.append(MASTER_LIST_HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for index, entry in enumerate(entries, start=1):
        ws.append([
            index,
            format_participant_name(entry['full_name']),
            entry['age'],
            entry['gender'],
            entry['source'],
            entry['agency_name'] or '',
            entry['or_number'] or '',
            entry['status'] or '',
        ])

    for column, width in zip('ABCDEFGH', (8, 35, 8, 10, 12, 35, 12, 12)):
        ws.column_dimensions[column].width = width

    bio = io.BytesIO()
    wb.save(bio)
    bio.seek(0)
    return bio


def export_master_list_xlsx(entries) -> HttpResponse:
    bio = build_master_list_workbook(entries)
    response = HttpResponse(bio.getvalue(), content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="Master_List_{_timestamp()}.xlsx"'
    return response
