import html
from collections.abc import Mapping

import bleach
from rest_framework import serializers

OPTIONAL_FIELDS = ('blood_pressure', 'cholesterol', 'notes', 'date')


def _clean(v):
    # bleach escapes entities in what it keeps; store plain text
    return html.unescape(bleach.clean((v or '').strip(), tags=[], strip=True)).strip()


class MedicalRecordInputSerializer(serializers.Serializer):
    """Validates a full record payload for create and update.

    Updates replace every field, so omitted optional fields come back as
    ``None`` and clear whatever was stored before.
    """
    patient_name = serializers.CharField(max_length=255)
    age = serializers.IntegerField(min_value=1)
    blood_pressure = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    cholesterol = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    date = serializers.DateField(
        required=False,
        allow_null=True,
        input_formats=['iso-8601', '%Y-%m-%dT%H:%M:%S.%fZ', '%Y-%m-%dT%H:%M:%SZ'],
    )

    def to_internal_value(self, data):
        # Forms and the SPA send '' for untouched inputs
        if isinstance(data, Mapping):
            data = {k: (None if k in OPTIONAL_FIELDS and v == '' else v) for k, v in data.items()}
        return super().to_internal_value(data)

    def validate_patient_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('patient name is required')
        return v

    def validate_blood_pressure(self, v):
        return (v or '').strip() or None

    def validate_notes(self, v):
        return _clean(v) or None

    def validate(self, attrs):
        for field in OPTIONAL_FIELDS:
            attrs.setdefault(field, None)
        return attrs


class RecordListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=255)
