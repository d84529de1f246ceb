"""
Core models for the Funrun backend.

Contains:
- BaseModel: abstract model with UUID primary key and timestamps
- FieldOffice: static reference data for the regional field offices
"""

import uuid
from django.db import models


class BaseModel(models.Model):
    """
    Abstract base model providing UUID primary key and timestamps.

    Registration records use UUIDs so ids in URLs do not reveal record
    counts or submission order.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier (UUID v4)"
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when record was created"
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when record was last updated"
    )

    class Meta:
        abstract = True
        ordering = ['-created_at']


class FieldOffice(models.Model):
    """
    A regional administrative unit with its own registration oversight.

    Ids are fixed and match the reference list seeded by
    ``manage.py seed_admins``; they are not auto-incremented.
    """

    # Home office of RD/ARD monitors; takes no registrations
    MONITORING_CODE = 'monitor'

    id = models.PositiveIntegerField(
        primary_key=True,
        help_text="Stable field office number"
    )

    code = models.SlugField(
        max_length=50,
        unique=True,
        help_text="Short code used by registration forms (e.g. 'cotabato')"
    )

    name = models.CharField(
        max_length=150,
        help_text="Display name"
    )

    class Meta:
        db_table = 'field_offices'
        verbose_name = 'Field Office'
        verbose_name_plural = 'Field Offices'
        ordering = ['id']

    def __str__(self):
        return self.name

    @classmethod
    def resolve(cls, value):
        """
        Look up a field office by code or numeric id.

        Returns None when nothing matches.
        """
        if value is None or value == '':
            return None
        text = str(value).strip()
        office = cls.objects.filter(code=text).first()
        if office is None and text.isdigit():
            office = cls.objects.filter(id=int(text)).first()
        return office
