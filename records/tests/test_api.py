"""
Integration tests for the records API.

These tests exercise record CRUD, owner isolation, dashboard statistics
and the risk analysis view through DRF's APIClient.

To run the tests:

```
pytest -q records/tests
```
"""

import datetime

from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from django.contrib.auth import get_user_model

from ..models import MedicalRecord

User = get_user_model()


class RecordsAPITests(APITestCase):
    def setUp(self) -> None:
        self.alice = User.objects.create_user(username="alice", password="alicepass")
        self.bob = User.objects.create_user(username="bob", password="bobpass1")
        self.high = MedicalRecord.objects.create(
            owner=self.alice,
            patient_name="Harold High",
            age=50,
            blood_pressure="150/95",
            cholesterol=210,
            notes="needs follow-up",
            date=datetime.date(2024, 1, 2),
        )
        self.normal = MedicalRecord.objects.create(
            owner=self.alice,
            patient_name="Nora Normal",
            age=30,
            blood_pressure="118/76",
            cholesterol=170,
            date=datetime.date(2024, 1, 1),
        )
        self.bobs = MedicalRecord.objects.create(
            owner=self.bob,
            patient_name="Bob's Patient",
            age=70,
            cholesterol=300,
        )

    def authenticate(self, user) -> APIClient:
        """Return an authenticated APIClient for the given user."""
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def test_requests_without_credentials_are_unauthorized(self):
        client = APIClient()
        for url in ("/api/records", f"/api/records/{self.high.id}", "/api/dashboard/stats", "/api/analysis", "/api/export/csv"):
            response = client.get(url)
            self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED, url)
            self.assertEqual(response.data["error"]["code"], "unauthorized")

    def test_list_returns_only_own_records_newest_first(self):
        client = self.authenticate(self.alice)
        response = client.get("/api/records")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [r["id"] for r in response.data]
        self.assertEqual(ids, [self.high.id, self.normal.id])
        self.assertNotIn(self.bobs.id, ids)

    def test_list_search(self):
        client = self.authenticate(self.alice)
        response = client.get("/api/records", {"search": "FOLLOW"})
        self.assertEqual([r["id"] for r in response.data], [self.high.id])

    def test_create_record(self):
        client = self.authenticate(self.alice)
        response = client.post(
            "/api/records",
            {"patient_name": "New Patient", "age": 44, "blood_pressure": "130/85", "date": "2024-03-01"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["ok"])
        record = MedicalRecord.objects.get(id=response.data["id"])
        self.assertEqual(record.owner, self.alice)
        self.assertEqual(record.date, datetime.date(2024, 3, 1))
        self.assertIsNone(record.cholesterol)
        self.assertIsNone(record.notes)

    def test_create_requires_name_and_age(self):
        client = self.authenticate(self.alice)
        response = client.post("/api/records", {"patient_name": "", "age": 0}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["ok"])
        self.assertEqual(response.data["error"]["code"], "validation_error")
        self.assertIn("patient_name", response.data["error"]["message"])
        self.assertIn("age", response.data["error"]["message"])

    def test_get_record(self):
        client = self.authenticate(self.alice)
        response = client.get(f"/api/records/{self.high.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["patient_name"], "Harold High")
        self.assertEqual(body["blood_pressure"], "150/95")
        self.assertEqual(body["date"], "2024-01-02")

    def test_other_users_record_is_not_found(self):
        client = self.authenticate(self.alice)
        for method in ("get", "delete"):
            response = getattr(client, method)(f"/api/records/{self.bobs.id}")
            self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
            self.assertEqual(response.data["error"]["code"], "not_found")
        response = client.put(
            f"/api/records/{self.bobs.id}", {"patient_name": "Mine now", "age": 1}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.bobs.refresh_from_db()
        self.assertEqual(self.bobs.patient_name, "Bob's Patient")

    def test_update_record_is_full_replacement(self):
        client = self.authenticate(self.alice)
        response = client.put(
            f"/api/records/{self.high.id}",
            {"patient_name": "Harold High", "age": 51, "cholesterol": 199},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["ok"])
        self.high.refresh_from_db()
        self.assertEqual(self.high.age, 51)
        self.assertEqual(self.high.cholesterol, 199)
        self.assertIsNone(self.high.blood_pressure)
        self.assertIsNone(self.high.notes)
        self.assertIsNone(self.high.date)
        self.assertEqual(self.high.owner, self.alice)

    def test_update_validation_error(self):
        client = self.authenticate(self.alice)
        response = client.put(f"/api/records/{self.high.id}", {"age": 51}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_unknown_record_is_not_found(self):
        client = self.authenticate(self.alice)
        response = client.put("/api/records/987654", {"patient_name": "X", "age": 5}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_record(self):
        client = self.authenticate(self.alice)
        response = client.delete(f"/api/records/{self.normal.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(MedicalRecord.objects.filter(id=self.normal.id).exists())
        response = client.get(f"/api/records/{self.normal.id}")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_dashboard_stats(self):
        client = self.authenticate(self.alice)
        response = client.get("/api/dashboard/stats")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            "total_records": 2,
            "avg_age": 40,
            "avg_cholesterol": 190,
            "high_cholesterol_count": 1,
            "high_bp_count": 1,
        })

    def test_dashboard_stats_for_user_without_records(self):
        carol = User.objects.create_user(username="carol", password="carolpass")
        response = self.authenticate(carol).get("/api/dashboard/stats")
        self.assertEqual(response.data["total_records"], 0)
        self.assertIsNone(response.data["avg_age"])
        self.assertIsNone(response.data["avg_cholesterol"])
        self.assertEqual(response.data["high_cholesterol_count"], 0)
        self.assertEqual(response.data["high_bp_count"], 0)

    def test_analysis(self):
        client = self.authenticate(self.alice)
        response = client.get("/api/analysis")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["stats"], {
            "avg_age": 40.0,
            "avg_chol": 190.0,
            "min_chol": 170,
            "max_chol": 210,
            "total_count": 2,
        })
        self.assertEqual(len(body["risks"]), 1)
        risk = body["risks"][0]
        self.assertEqual(risk["id"], self.high.id)
        self.assertEqual(risk["date"], "2024-01-02")
        self.assertEqual(risk["flags"], ["High Cholesterol", "High Systolic BP", "High Diastolic BP"])

    def test_record_mutations_are_audited(self):
        client = self.authenticate(self.alice)
        rid = client.post("/api/records", {"patient_name": "Audit Me", "age": 20}, format="json").data["id"]
        client.delete(f"/api/records/{rid}")
        actions = list(self.alice.auditevent_set.order_by("id").values_list("action", "object_id"))
        self.assertEqual(actions, [("record_create", rid), ("record_delete", rid)])
