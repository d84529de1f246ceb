"""
Upload validation for receipts and roster spreadsheets.
"""

from django.conf import settings
from rest_framework import serializers


class UploadKind:
    """Upload categories with their allowed MIME types."""
    RECEIPT = 'receipt'
    SPREADSHEET = 'spreadsheet'

    ALLOWED_MIME_TYPES = {
        RECEIPT: [
            'application/pdf',
            'image/jpeg',
            'image/png',
        ],
        SPREADSHEET: [
            'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
            'application/vnd.ms-excel',
        ],
    }

    @classmethod
    def max_size(cls, kind):
        if kind == cls.RECEIPT:
            return settings.RECEIPT_MAX_UPLOAD_SIZE
        return settings.ROSTER_MAX_UPLOAD_SIZE


def check_upload(file, kind):
    """
    Validate MIME type and size of an uploaded file.

    Returns:
        tuple: (is_valid, error_message)
    """
    mime_type = (getattr(file, 'content_type', '') or '').split(';')[0].strip().lower()
    if mime_type not in UploadKind.ALLOWED_MIME_TYPES[kind]:
        return (False, f"File type not allowed: {mime_type or 'unknown'}")

    max_size = UploadKind.max_size(kind)
    if file.size > max_size:
        return (False, f"File size exceeds maximum allowed ({max_size // (1024 * 1024)} MB)")

    return (True, None)


def validate_receipt_file(file):
    is_valid, error = check_upload(file, UploadKind.RECEIPT)
    if not is_valid:
        raise serializers.ValidationError(error)
    return file


def validate_spreadsheet_file(file):
    is_valid, error = check_upload(file, UploadKind.SPREADSHEET)
    if not is_valid:
        raise serializers.ValidationError(error)
    return file
