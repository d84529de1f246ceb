"""
Publish registration row changes to the change feed.

Events are published after the surrounding transaction commits, so a
rolled-back transition or submission never produces an event.
"""

import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from core.feed import REGISTRATIONS_CHANNEL, ChangeEvent, ChangeType, get_change_feed
from .models import GroupRegistration, IndividualRegistration

logger = logging.getLogger('funrun.registrations')


def registration_row(instance):
    """Flat dict of a registration as carried in change events."""
    row = {
        'id': str(instance.pk),
        'field_office_id': instance.field_office_id,
        'status': instance.status,
        'or_number': instance.or_number,
        'submitted_at': instance.submitted_at.isoformat() if instance.submitted_at else None,
    }
    if isinstance(instance, IndividualRegistration):
        row.update({
            'full_name': instance.full_name,
            'age': instance.age,
            'gender': instance.gender,
        })
    else:
        row.update({
            'agency_name': instance.agency_name,
            'contact_person': instance.contact_person,
        })
    return row


def _publish(event):
    def send():
        get_change_feed().publish(REGISTRATIONS_CHANNEL, event.event_type, event)
    transaction.on_commit(send)


@receiver(post_save, sender=IndividualRegistration)
@receiver(post_save, sender=GroupRegistration)
def publish_registration_saved(sender, instance, created, **kwargs):
    new = registration_row(instance)

    if created:
        event = ChangeEvent(table=sender._meta.db_table, event_type=ChangeType.INSERT, new=new)
    else:
        old = dict(new)
        old['status'] = getattr(instance, '_loaded_status', instance.status)
        event = ChangeEvent(table=sender._meta.db_table, event_type=ChangeType.UPDATE, new=new, old=old)

    # Later saves in the same request compare against this state
    instance._loaded_status = instance.status
    _publish(event)


@receiver(post_delete, sender=IndividualRegistration)
@receiver(post_delete, sender=GroupRegistration)
def publish_registration_deleted(sender, instance, **kwargs):
    event = ChangeEvent(
        table=sender._meta.db_table,
        event_type=ChangeType.DELETE,
        old=registration_row(instance),
    )
    _publish(event)
