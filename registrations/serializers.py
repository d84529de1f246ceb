"""
Serializers for registrations.
"""

import json

from rest_framework import serializers

from .models import (
    Gender,
    GroupParticipant,
    GroupRegistration,
    IndividualRegistration,
    RegistrationStatus,
)
from .spreadsheets import EMAIL_RE, GENDER_ALIASES
from .validators import validate_receipt_file, validate_spreadsheet_file


def _absolute_url(serializer, url):
    if not url:
        return None
    request = serializer.context.get('request')
    return request.build_absolute_uri(url) if request else url


class GenderField(serializers.CharField):
    """Accepts male/female/m/f in any case; stores 'Male' or 'Female'."""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        gender = GENDER_ALIASES.get(value.strip().lower())
        if gender is None:
            raise serializers.ValidationError(
                f"Gender must be one of: {Gender.MALE}, {Gender.FEMALE}."
            )
        return gender


# =============================================================================
# READ SERIALIZERS
# =============================================================================

class RegistrationBaseSerializer(serializers.ModelSerializer):
    field_office_id = serializers.IntegerField(read_only=True)
    field_office_name = serializers.CharField(source='field_office.name', read_only=True)
    or_number = serializers.SerializerMethodField()
    receipt_url = serializers.SerializerMethodField()

    def get_or_number(self, obj):
        return obj.or_number or None

    def get_receipt_url(self, obj):
        return _absolute_url(self, obj.receipt_url)


class IndividualRegistrationSerializer(RegistrationBaseSerializer):

    class Meta:
        model = IndividualRegistration
        fields = [
            'id',
            'full_name',
            'age',
            'gender',
            'contact_number',
            'email',
            'address',
            'field_office_id',
            'field_office_name',
            'receipt_url',
            'status',
            'or_number',
            'submitted_at',
        ]
        read_only_fields = fields


class GroupParticipantSerializer(serializers.ModelSerializer):
    or_number = serializers.SerializerMethodField()

    class Meta:
        model = GroupParticipant
        fields = ['id', 'full_name', 'age', 'gender', 'email', 'or_number', 'created_at']
        read_only_fields = fields

    def get_or_number(self, obj):
        return obj.or_number or None


class GroupRegistrationSerializer(RegistrationBaseSerializer):
    participant_count = serializers.SerializerMethodField()
    excel_file_url = serializers.SerializerMethodField()

    class Meta:
        model = GroupRegistration
        fields = [
            'id',
            'agency_name',
            'contact_person',
            'contact_number',
            'contact_email',
            'field_office_id',
            'field_office_name',
            'excel_file_url',
            'receipt_url',
            'status',
            'or_number',
            'participant_count',
            'submitted_at',
        ]
        read_only_fields = fields

    def get_participant_count(self, obj):
        count = getattr(obj, 'participant_count', None)
        if count is None:
            count = obj.participants.count()
        return count

    def get_excel_file_url(self, obj):
        return _absolute_url(self, obj.excel_file_url)


class GroupRegistrationDetailSerializer(GroupRegistrationSerializer):
    participants = GroupParticipantSerializer(many=True, read_only=True)

    class Meta(GroupRegistrationSerializer.Meta):
        fields = GroupRegistrationSerializer.Meta.fields + ['participants']
        read_only_fields = fields


# =============================================================================
# SUBMISSION SERIALIZERS
# =============================================================================

class IndividualSubmitSerializer(serializers.Serializer):
    """Public individual registration form (multipart)."""

    full_name = serializers.CharField(max_length=255)
    age = serializers.IntegerField(min_value=1, max_value=120)
    gender = GenderField(max_length=10)
    contact_number = serializers.CharField(max_length=30)
    email = serializers.EmailField(max_length=254)
    address = serializers.CharField()
    field_office = serializers.CharField(max_length=50)
    receipt = serializers.FileField(validators=[validate_receipt_file])


class ParticipantInputSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    age = serializers.IntegerField(min_value=1, max_value=120)
    gender = GenderField(max_length=10)
    email = serializers.CharField(max_length=254)

    def validate_email(self, value):
        value = value.strip()
        if not EMAIL_RE.match(value):
            raise serializers.ValidationError(f"Invalid email address: {value}")
        return value


class RosterField(serializers.Field):
    """
    Participant list given as a JSON array, or a JSON string of one
    (multipart forms send the roster as a string).
    """

    default_error_messages = {
        'invalid_json': 'Participants must be a JSON list.',
        'not_a_list': 'Participants must be a list.',
        'empty': 'At least one participant is required',
    }

    def to_internal_value(self, data):
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                self.fail('invalid_json')

        if not isinstance(data, list):
            self.fail('not_a_list')
        if not data:
            self.fail('empty')

        serializer = ParticipantInputSerializer(data=data, many=True)
        if not serializer.is_valid():
            # A list of per-row dicts, or a dict keyed by row index on newer DRF
            errors_by_row = serializer.errors
            if isinstance(errors_by_row, dict):
                rows = sorted(errors_by_row.items())
            else:
                rows = enumerate(errors_by_row)
            for index, errors in rows:
                if errors:
                    field, messages = next(iter(errors.items()))
                    raise serializers.ValidationError(
                        f"Participant {index + 1}: {field} - {messages[0]}"
                    )
        return serializer.validated_data

    def to_representation(self, value):
        return value


class GroupSubmitSerializer(serializers.Serializer):
    """Public group registration form (multipart)."""

    agency_name = serializers.CharField(max_length=255)
    contact_person = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    contact_number = serializers.CharField(max_length=30)
    contact_email = serializers.EmailField(max_length=254, required=False, allow_blank=True, default='')
    field_office = serializers.CharField(max_length=50)
    participants = RosterField()
    receipt = serializers.FileField(validators=[validate_receipt_file])
    excel_file = serializers.FileField(required=False, validators=[validate_spreadsheet_file])


class RosterUploadSerializer(serializers.Serializer):
    file = serializers.FileField(validators=[validate_spreadsheet_file])


# =============================================================================
# ADMIN ACTIONS
# =============================================================================

class StatusTransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[RegistrationStatus.APPROVED, RegistrationStatus.REJECTED]
    )
    or_number = serializers.CharField(
        max_length=32,
        required=False,
        allow_blank=True,
        allow_null=True,
        trim_whitespace=True,
    )
