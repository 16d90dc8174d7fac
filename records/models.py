"""
Database models for the medtrack backend.

A :class:`MedicalRecord` belongs to exactly one Django user (its owner)
and is only ever read or written through that owner.  Users themselves
are Django's stock ``auth.User``; registration only needs a username and
a password.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models


class MedicalRecord(models.Model):
    """One patient measurement entry recorded by a user.

    ``blood_pressure`` is kept exactly as entered (``"<systolic>/<diastolic>"``);
    it is parsed on demand by the analysis service and may be malformed.
    Optional fields are stored as NULL rather than the empty string.
    """
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='medical_records'
    )
    patient_name = models.CharField(max_length=255)
    age = models.PositiveIntegerField()
    blood_pressure = models.CharField(max_length=32, null=True, blank=True)
    cholesterol = models.IntegerField(null=True, blank=True, help_text="mg/dL")
    notes = models.TextField(null=True, blank=True)
    # Only used for ordering and display
    date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['owner', 'date'], name='record_owner_date_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.patient_name} (#{self.id})"


class AuditEvent(models.Model):
    """Append-only trail of authentication attempts and record mutations."""
    ACTION_CHOICES = (
        ("register", "register"),
        ("login", "login"),
        ("record_create", "record_create"),
        ("record_update", "record_update"),
        ("record_delete", "record_delete"),
    )
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64, choices=ACTION_CHOICES)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.BigIntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
