"""
Medical record CRUD views.

Every handler works on the authenticated user's own records only.  A
record id that exists but belongs to another user answers 404, exactly
like an id that does not exist.  Validation and not-found errors raised
by the record service propagate to the unified exception handler.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import MedicalRecord
from ..serializers.records import RecordListQuerySerializer
from ..services.audit import log_action
from ..services.records import create_record, delete_record, get_record, list_records, update_record


def _serialize(record: MedicalRecord) -> dict:
    return {
        'id': record.id,
        'patient_name': record.patient_name,
        'age': record.age,
        'blood_pressure': record.blood_pressure,
        'cholesterol': record.cholesterol,
        'notes': record.notes,
        'date': record.date.isoformat() if record.date else None,
        'created_at': record.created_at.isoformat() if record.created_at else None,
        'updated_at': record.updated_at.isoformat() if record.updated_at else None,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def records_list(request):
    """List the caller's records (``?search=`` filters) or create one."""
    if request.method == 'GET':
        q = RecordListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        records = list_records(request.user, search=q.validated_data.get('search'))
        return Response([_serialize(r) for r in records])
    # POST
    record = create_record(request.user, request.data)
    log_action(user=request.user, action='record_create', object_type='medical_record', object_id=record.id)
    return Response({'ok': True, 'id': record.id}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def record_detail(request, pk: int):
    user = request.user
    if request.method == 'GET':
        return Response(_serialize(get_record(user, pk)))
    if request.method == 'PUT':
        record = update_record(user, pk, request.data)
        log_action(user=user, action='record_update', object_type='medical_record', object_id=record.id)
        return Response({'ok': True, 'record': _serialize(record)})
    # DELETE
    delete_record(user, pk)
    log_action(user=user, action='record_delete', object_type='medical_record', object_id=pk)
    return Response({'ok': True})
