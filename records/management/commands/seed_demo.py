# records/management/commands/seed_demo.py
import datetime

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from records.models import MedicalRecord

User = get_user_model()

DEMO_RECORDS = [
    {"patient_name": "Alice Carter", "age": 54, "blood_pressure": "150/95", "cholesterol": 240,
     "notes": "Follow up on statin dosage", "date": datetime.date(2024, 3, 2)},
    {"patient_name": "Ben Ortiz", "age": 37, "blood_pressure": "118/76", "cholesterol": 180,
     "notes": None, "date": datetime.date(2024, 2, 14)},
    {"patient_name": "Chloe Nguyen", "age": 61, "blood_pressure": "132/94", "cholesterol": None,
     "notes": "Borderline diastolic", "date": datetime.date(2024, 1, 20)},
    {"patient_name": "David Kim", "age": 45, "blood_pressure": None, "cholesterol": 205,
     "notes": "BP cuff unavailable", "date": None},
]


class Command(BaseCommand):
    help = "Ensure a demo user exists and owns a small set of sample records (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--username", default="demo")
        parser.add_argument("--password", default="demo123")

    def handle(self, *args, **opts):
        with transaction.atomic():
            user, created = User.objects.get_or_create(username=opts["username"])
            if created or not user.check_password(opts["password"]):
                user.set_password(opts["password"])
                user.is_active = True
                user.save(update_fields=["password", "is_active"])
            added = 0
            for data in DEMO_RECORDS:
                _, made = MedicalRecord.objects.get_or_create(
                    owner=user, patient_name=data["patient_name"], defaults=data,
                )
                added += int(made)
        self.stdout.write(self.style.SUCCESS(f"ok: {user.username} ({'created' if created else 'existing'})"))
        self.stdout.write(self.style.SUCCESS(f"{added} demo records added."))
