"""
Owner-scoped access to medical records.

Every function takes the owning user first and only ever touches rows
belonging to that user; a record owned by someone else is reported as
missing, never as forbidden.  Validation failures raise DRF's
``ValidationError`` and missing records raise :class:`RecordNotFound`,
so views can let both propagate to the exception handler.  Database
errors are not caught here.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.db.models import F, Q

from records.exceptions import RecordNotFound
from records.models import MedicalRecord
from records.serializers.records import MedicalRecordInputSerializer

logger = logging.getLogger(__name__)

# Newest first; undated records sort after every dated one
RECORD_ORDERING = (F('date').desc(nulls_last=True), '-id')


def _validated(data) -> dict:
    s = MedicalRecordInputSerializer(data=data)
    s.is_valid(raise_exception=True)
    return s.validated_data


def owned_records(owner):
    return MedicalRecord.objects.filter(owner=owner)


def create_record(owner, data) -> MedicalRecord:
    fields = _validated(data)
    record = MedicalRecord.objects.create(owner=owner, **fields)
    logger.info('record %s created by user %s', record.id, owner.pk)
    return record


def get_record(owner, record_id) -> MedicalRecord:
    record = owned_records(owner).filter(id=record_id).first()
    if record is None:
        raise RecordNotFound()
    return record


def update_record(owner, record_id, data) -> MedicalRecord:
    """Replace every editable field of one record.

    ``id`` and ``owner`` never change.  Optional fields missing from
    ``data`` are cleared.
    """
    fields = _validated(data)
    with transaction.atomic():
        record = owned_records(owner).select_for_update().filter(id=record_id).first()
        if record is None:
            raise RecordNotFound()
        for name, value in fields.items():
            setattr(record, name, value)
        record.save()
    logger.info('record %s updated by user %s', record.id, owner.pk)
    return record


def delete_record(owner, record_id) -> None:
    deleted, _ = owned_records(owner).filter(id=record_id).delete()
    if not deleted:
        raise RecordNotFound()
    logger.info('record %s deleted by user %s', record_id, owner.pk)


def list_records(owner, search: Optional[str] = None) -> list[MedicalRecord]:
    qs = owned_records(owner)
    if search and search.strip():
        qs = qs.filter(Q(patient_name__icontains=search) | Q(notes__icontains=search))
    return list(qs.order_by(*RECORD_ORDERING))


def snapshot(owner) -> list[MedicalRecord]:
    """All of ``owner``'s records, in list order."""
    return list_records(owner)
