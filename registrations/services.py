"""
Registration workflow services.

All registration writes go through ``RegistrationWorkflow``:
- submissions create pending records and store uploaded files
- status transitions validate before any write, then update the record
  and (for groups) cascade the OR number to participants in one
  transaction
- deletions remove participants before the parent and drop stored files
  once the transaction commits

Change events reach the notification fan-out through model signals, not
from here.
"""

import logging
import re
import uuid

from django.db import DatabaseError, transaction
from django.db.models import Count, Q

from core.exceptions import (
    CascadeError,
    InvalidTransition,
    RegistrationNotFound,
    RegistrationValidationError,
    StorageError,
)
from core.models import FieldOffice
from .models import (
    GroupParticipant,
    GroupRegistration,
    IndividualRegistration,
    RegistrationStatus,
    RegistrationType,
    is_valid_or_number,
)

logger = logging.getLogger('funrun.registrations')


class RegistrationWorkflow:
    """
    Lifecycle operations for individual and group registrations.

    ``session`` arguments are optional ``AdminSession`` objects; when given,
    records outside the session's field office scope behave as missing.
    """

    MODELS = {
        RegistrationType.INDIVIDUAL: IndividualRegistration,
        RegistrationType.GROUP: GroupRegistration,
    }

    # =========================================================================
    # LOOKUP
    # =========================================================================

    @classmethod
    def model_for(cls, registration_type):
        try:
            return cls.MODELS[registration_type]
        except KeyError:
            raise RegistrationValidationError(
                f"Invalid registration type: {registration_type}"
            )

    @classmethod
    def get_registration(cls, registration_id, registration_type, session=None, for_update=False):
        model = cls.model_for(registration_type)

        try:
            pk = uuid.UUID(str(registration_id))
        except ValueError:
            raise RegistrationNotFound()

        queryset = model.objects.select_related('field_office')
        if for_update:
            queryset = queryset.select_for_update()

        record = queryset.filter(pk=pk).first()
        if record is None:
            raise RegistrationNotFound()

        if session is not None and not session.can_access_office(record.field_office_id):
            raise RegistrationNotFound()

        return record

    # =========================================================================
    # STATUS TRANSITIONS
    # =========================================================================

    @staticmethod
    def validate_transition(target_status, or_number=None):
        """
        Check a requested transition before touching the database.

        Returns:
            str: the OR number to store ('' for rejections)
        """
        if target_status not in RegistrationStatus.TERMINAL_STATES:
            raise RegistrationValidationError(
                "Status must be 'approved' or 'rejected'."
            )

        if isinstance(or_number, str):
            or_number = or_number.strip()

        if target_status == RegistrationStatus.APPROVED:
            if not is_valid_or_number(or_number):
                raise RegistrationValidationError(
                    'Invalid OR Number. Must be exactly 8 digits.'
                )
            return or_number

        if or_number:
            raise RegistrationValidationError(
                'OR Number can only be set when approving a registration.'
            )
        return ''

    @classmethod
    def transition(cls, registration_id, target_status, registration_type, or_number=None, session=None):
        """
        Approve or reject a pending registration.

        Approving a group also writes the OR number to every participant
        inside the same transaction; if that fails nothing is saved.

        Raises:
            RegistrationValidationError: bad target status or OR number
            RegistrationNotFound: unknown id or outside the session scope
            InvalidTransition: the record is no longer pending
            CascadeError: participant update failed (parent rolled back)
        """
        or_number = cls.validate_transition(target_status, or_number)
        cls.model_for(registration_type)

        with transaction.atomic():
            record = cls.get_registration(
                registration_id, registration_type, session=session, for_update=True
            )

            if not record.is_pending:
                raise InvalidTransition(
                    f"Registration is already {record.status}."
                )

            record.status = target_status
            record.or_number = or_number
            record.save(update_fields=['status', 'or_number', 'updated_at'])

            if registration_type == RegistrationType.GROUP and target_status == RegistrationStatus.APPROVED:
                cls._cascade_or_number(record, or_number)

        logger.info(
            f"Registration {record.pk} ({registration_type}) -> {target_status}"
            + (f" by {session.subject}" if session is not None else '')
        )
        return record

    @classmethod
    def _cascade_or_number(cls, group, or_number):
        try:
            updated = cls._write_participant_or_numbers(group.pk, or_number)
        except DatabaseError as exc:
            logger.exception(f"OR number cascade failed for group {group.pk}")
            raise CascadeError(
                'Failed to apply OR number to group participants; no changes were saved.'
            ) from exc
        logger.info(f"Applied OR number to {updated} participants of group {group.pk}")
        return updated

    @staticmethod
    def _write_participant_or_numbers(group_id, or_number):
        return GroupParticipant.objects.filter(
            group_registration_id=group_id
        ).update(or_number=or_number)

    @classmethod
    def reconcile_participant_or_numbers(cls, group_id=None):
        """
        Re-apply each approved group's OR number to participants that differ.

        Safe to run repeatedly; returns the number of participants updated.
        """
        groups = GroupRegistration.objects.filter(
            status=RegistrationStatus.APPROVED
        ).exclude(or_number='')
        if group_id is not None:
            groups = groups.filter(pk=group_id)

        updated = 0
        with transaction.atomic():
            for group_pk, or_number in groups.values_list('pk', 'or_number'):
                fixed = GroupParticipant.objects.filter(
                    group_registration_id=group_pk
                ).exclude(or_number=or_number).update(or_number=or_number)
                if fixed:
                    logger.warning(
                        f"Reconciled {fixed} participant OR numbers for group {group_pk}"
                    )
                updated += fixed
        return updated

    # =========================================================================
    # DELETION
    # =========================================================================

    @classmethod
    def delete(cls, registration_id, registration_type, session=None):
        """
        Permanently delete a registration and its stored files.

        Group participants are deleted first, then the parent, in one
        transaction. Files are removed only after the commit.
        """
        with transaction.atomic():
            record = cls.get_registration(
                registration_id, registration_type, session=session, for_update=True
            )
            stored = list(cls._stored_files(record))

            participants_deleted = 0
            if registration_type == RegistrationType.GROUP:
                participants_deleted, _ = GroupParticipant.objects.filter(
                    group_registration=record
                ).delete()

            record_pk = record.pk
            record.delete()
            transaction.on_commit(lambda: cls._remove_files(stored))

        logger.info(
            f"Deleted {registration_type} registration {record_pk} "
            f"({participants_deleted} participants)"
        )
        return participants_deleted

    @staticmethod
    def _stored_files(record):
        for field_name in ('receipt', 'excel_file'):
            field_file = getattr(record, field_name, None)
            if field_file:
                yield (field_file.storage, field_file.name)

    @staticmethod
    def _remove_files(stored):
        for storage, name in stored:
            try:
                storage.delete(name)
            except OSError:
                logger.exception(f"Failed to remove stored file {name}")

    # =========================================================================
    # SUBMISSIONS
    # =========================================================================

    @staticmethod
    def resolve_field_office(value):
        office = FieldOffice.resolve(value)
        if office is None or office.code == FieldOffice.MONITORING_CODE:
            raise RegistrationValidationError('Invalid field office')
        return office

    @staticmethod
    def _store_file(record, field_name, upload):
        field_file = getattr(record, field_name)
        try:
            field_file.save(upload.name, upload, save=False)
        except OSError as exc:
            logger.exception(f"Failed to store {field_name} upload {upload.name!r}")
            raise StorageError() from exc
        return (field_file.storage, field_file.name)

    @classmethod
    def submit_individual(cls, *, field_office, receipt, **fields):
        """
        Create a pending individual registration with its receipt.

        ``fields``: full_name, age, gender, contact_number, email, address
        """
        office = field_office if isinstance(field_office, FieldOffice) else cls.resolve_field_office(field_office)
        record = IndividualRegistration(
            field_office=office,
            status=RegistrationStatus.PENDING,
            **fields
        )

        stored = [cls._store_file(record, 'receipt', receipt)]
        try:
            with transaction.atomic():
                record.save()
        except Exception:
            cls._remove_files(stored)
            raise

        logger.info(f"Individual registration {record.pk} submitted for office {office.pk}")
        return record

    @classmethod
    def submit_group(cls, *, field_office, participants, receipt, excel_file=None, **fields):
        """
        Create a pending group registration and its participants.

        ``participants``: iterable of dicts with full_name, age, gender, email
        ``fields``: agency_name, contact_person, contact_number, contact_email
        """
        participants = list(participants)
        if not participants:
            raise RegistrationValidationError('At least one participant is required')

        office = field_office if isinstance(field_office, FieldOffice) else cls.resolve_field_office(field_office)
        group = GroupRegistration(
            field_office=office,
            status=RegistrationStatus.PENDING,
            **fields
        )

        stored = [cls._store_file(group, 'receipt', receipt)]
        try:
            if excel_file is not None:
                stored.append(cls._store_file(group, 'excel_file', excel_file))

            with transaction.atomic():
                group.save()
                GroupParticipant.objects.bulk_create([
                    GroupParticipant(
                        group_registration=group,
                        full_name=p['full_name'],
                        age=p['age'],
                        gender=p['gender'],
                        email=p.get('email', ''),
                    )
                    for p in participants
                ])
        except Exception:
            cls._remove_files(stored)
            raise

        logger.info(
            f"Group registration {group.pk} submitted for office {office.pk} "
            f"with {len(participants)} participants"
        )
        return group


# =============================================================================
# STATISTICS
# =============================================================================

def _status_counts(queryset):
    return queryset.aggregate(
        total=Count('pk'),
        pending=Count('pk', filter=Q(status=RegistrationStatus.PENDING)),
        approved=Count('pk', filter=Q(status=RegistrationStatus.APPROVED)),
        rejected=Count('pk', filter=Q(status=RegistrationStatus.REJECTED)),
    )


def registration_statistics(field_office_id=None):
    """
    Counts by status for individual and group registrations.

    ``totals.participants`` is individual registrations plus group
    participants.
    """
    individuals = IndividualRegistration.objects.all()
    groups = GroupRegistration.objects.all()
    participants = GroupParticipant.objects.all()

    if field_office_id is not None:
        individuals = individuals.filter(field_office_id=field_office_id)
        groups = groups.filter(field_office_id=field_office_id)
        participants = participants.filter(group_registration__field_office_id=field_office_id)

    individual = _status_counts(individuals)
    group = _status_counts(groups)
    group['participants'] = participants.count()

    return {
        'individual': individual,
        'group': group,
        'totals': {
            'registrations': individual['total'] + group['total'],
            'participants': individual['total'] + group['participants'],
            'pending': individual['pending'] + group['pending'],
            'approved': individual['approved'] + group['approved'],
            'rejected': individual['rejected'] + group['rejected'],
        },
    }


def office_breakdown():
    """Per field office statistics for the main admin and RD/ARD views."""
    breakdown = []
    for office in FieldOffice.objects.exclude(code=FieldOffice.MONITORING_CODE).order_by('id'):
        stats = registration_statistics(office.pk)
        breakdown.append({
            'field_office_id': office.pk,
            'code': office.code,
            'name': office.name,
            **stats,
        })
    return breakdown


# =============================================================================
# MASTER LIST
# =============================================================================

def format_participant_name(name):
    """
    Normalise a name for the master list, surname first in capitals.

    "Doe, john a" -> "JOHN A. DOE"; "John Michael Doe" -> "DOE JOHN MICHAEL"
    """
    cleaned = re.sub(r'^[\d.\s]+', '', name or '').strip()
    if not cleaned:
        return ''

    if ',' in cleaned:
        surname, _, first_middle = (part.strip() for part in cleaned.partition(','))
        if surname and first_middle:
            parts = []
            for part in first_middle.split(' '):
                formatted = part.upper()
                if len(formatted) == 1:
                    formatted += '.'
                parts.append(formatted)
            return f"{' '.join(parts)} {surname.upper()}"

    parts = cleaned.split()
    if len(parts) == 1:
        return cleaned.upper()
    surname = parts.pop()
    return f"{surname} {' '.join(parts)}".upper()


def extract_surname(name):
    cleaned = re.sub(r'^[\d.\s]+', '', name or '').strip()
    if ',' in cleaned:
        return cleaned.split(',')[0].strip().upper()
    parts = cleaned.split()
    if not parts:
        return ''
    return parts[-1].upper()


def participant_master_list(field_office_id=None, source=None, search=None, descending=False):
    """
    Every runner: individual registrations plus group participants.

    Args:
        field_office_id: restrict to one field office
        source: 'individual' or 'group'
        search: case-insensitive substring of the name
        descending: sort surnames Z-A instead of A-Z
    """
    entries = []

    if source in (None, RegistrationType.INDIVIDUAL):
        individuals = IndividualRegistration.objects.all()
        if field_office_id is not None:
            individuals = individuals.filter(field_office_id=field_office_id)
        if search:
            individuals = individuals.filter(full_name__icontains=search)
        for row in individuals.values('pk', 'full_name', 'age', 'gender', 'status', 'or_number', 'field_office_id'):
            entries.append({
                'id': str(row['pk']),
                'full_name': row['full_name'],
                'age': row['age'],
                'gender': row['gender'],
                'source': RegistrationType.INDIVIDUAL,
                'agency_name': '',
                'or_number': row['or_number'],
                'status': row['status'],
                'field_office_id': row['field_office_id'],
            })

    if source in (None, RegistrationType.GROUP):
        members = GroupParticipant.objects.select_related('group_registration')
        if field_office_id is not None:
            members = members.filter(group_registration__field_office_id=field_office_id)
        if search:
            members = members.filter(full_name__icontains=search)
        for member in members:
            group = member.group_registration
            entries.append({
                'id': str(member.pk),
                'full_name': member.full_name,
                'age': member.age,
                'gender': member.gender,
                'source': RegistrationType.GROUP,
                'agency_name': group.agency_name,
                'or_number': member.or_number,
                'status': group.status,
                'field_office_id': group.field_office_id,
            })

    entries.sort(key=lambda e: extract_surname(e['full_name']), reverse=descending)
    return entries
