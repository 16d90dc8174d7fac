"""
Django admin registrations for the records app.

Lets superusers inspect records and the audit trail at ``/admin/``.
"""

from django.contrib import admin

from .models import MedicalRecord, AuditEvent


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient_name', 'age', 'blood_pressure', 'cholesterol', 'date', 'owner')
    list_filter = ('date',)
    search_fields = ('patient_name', 'notes', 'owner__username')
    raw_id_fields = ('owner',)


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
    search_fields = ('user__username',)
    readonly_fields = ('user', 'action', 'object_type', 'object_id', 'detail', 'created_at')
