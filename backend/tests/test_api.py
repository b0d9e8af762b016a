"""
API endpoint tests – verifies all REST endpoints return the
{success, data, message} envelope and map failures to the right status.
"""

from unittest import mock

import pytest
from openai import OpenAIError
from sqlalchemy.exc import OperationalError

from rxanalysis.database import db
from rxanalysis.models.models import AuditLog


class TestHealthEndpoint:
    def test_health_check(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "ok"
        assert data["service"] == "rxanalysis"
        assert data["mode"] == "demo"


# ════════════════════════════════════════════
# ANALYSIS
# ════════════════════════════════════════════

class TestAnalyzeEndpoint:
    def test_analyze_demo(self, client):
        resp = client.post("/api/prescriptions/analyze", json={
            "imageBase64": "data:image/png;base64,iVBORw0KGgo=",
        })
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert body["message"] == "Prescription analyzed successfully"
        assert body["data"]["medications"][0]["name"] == "Metformin"
        assert body["data"]["patientInfo"]["name"] == "John Doe"

    def test_missing_image(self, client):
        resp = client.post("/api/prescriptions/analyze", json={})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["success"] is False
        assert body["error"] == "validation"

    def test_no_body(self, client):
        resp = client.post("/api/prescriptions/analyze")
        assert resp.status_code == 400

    def test_garbage_image(self, client):
        resp = client.post("/api/prescriptions/analyze", json={"imageBase64": "not an image!"})
        assert resp.status_code == 400

    def test_provider_failure_is_500(self, live_client, fake_openai):
        fake_openai.chat.completions.create.side_effect = OpenAIError("Rate limit reached")
        resp = live_client.post("/api/prescriptions/analyze", json={"imageBase64": "QUJD"})
        assert resp.status_code == 500
        body = resp.get_json()
        assert body["error"] == "provider"
        assert body["message"] == "Failed to analyze prescription: Rate limit reached"


# ════════════════════════════════════════════
# INTERACTIONS & MEDICATION INFO
# ════════════════════════════════════════════

class TestInteractionsEndpoint:
    def test_demo_report(self, client):
        resp = client.post("/api/prescriptions/check-interactions", json={
            "medications": ["Metformin", "Ibuprofen"],
        })
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["interactions"][0]["severity"] == "Moderate"
        assert set(data["interactions"][0]["drugs"]) == {"Metformin", "Ibuprofen"}
        assert data["generalPrecautions"]

    def test_missing_list(self, client):
        resp = client.post("/api/prescriptions/check-interactions", json={"medications": []})
        assert resp.status_code == 400
        assert "required" in resp.get_json()["message"]

    def test_single_medication_is_400_not_500(self, client):
        resp = client.post("/api/prescriptions/check-interactions", json={"medications": ["Metformin"]})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "validation"
        assert "At least two medications" in body["message"]

    def test_provider_failure_is_500(self, live_client, fake_openai):
        fake_openai.chat.completions.create.side_effect = OpenAIError("timeout")
        resp = live_client.post("/api/prescriptions/check-interactions", json={
            "medications": ["A", "B"],
        })
        assert resp.status_code == 500
        assert resp.get_json()["message"] == "Failed to check drug interactions: timeout"


class TestMedicationInfoEndpoint:
    def test_metformin(self, client):
        resp = client.post("/api/prescriptions/medication-info", json={"medicationName": "metformin 850"})
        assert resp.status_code == 200
        assert resp.get_json()["data"]["name"] == "Metformin"

    def test_generic(self, client):
        resp = client.post("/api/prescriptions/medication-info", json={"medicationName": "Lisinopril"})
        data = resp.get_json()["data"]
        assert data["name"] == "Lisinopril"
        assert data["category"] == "Prescription Medication"

    def test_missing_name(self, client):
        resp = client.post("/api/prescriptions/medication-info", json={})
        assert resp.status_code == 400


class TestParseTextEndpoint:
    def test_parse(self, client):
        resp = client.post("/api/prescriptions/parse-text", json={
            "text": "Dr. Jane Smith\nName: John Doe\nAmoxicillin 500mg three times a day for 7 days",
        })
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["doctorInfo"]["name"] == "Dr. Jane Smith"
        assert data["medications"][0]["name"] == "Amoxicillin"

    def test_empty_text(self, client):
        resp = client.post("/api/prescriptions/parse-text", json={"text": "  "})
        assert resp.status_code == 400

    def test_too_long(self, client):
        resp = client.post("/api/prescriptions/parse-text", json={"text": "a" * 15001})
        assert resp.status_code == 400


# ════════════════════════════════════════════
# RECORDS
# ════════════════════════════════════════════

class TestPrescriptionRecords:
    def _create(self, client, **overrides):
        body = {"userId": 42, "imageUrl": "https://x/y.jpg"}
        body.update(overrides)
        return client.post("/api/prescriptions", json=body)

    def test_create(self, client):
        resp = self._create(client, orderId=3)
        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["status"] == "PENDING"
        assert data["userId"] == 42
        assert data["orderId"] == 3

    def test_create_trailing_slash(self, client):
        resp = client.post("/api/prescriptions/", json={"userId": 1, "imageUrl": "u"})
        assert resp.status_code == 201

    def test_create_missing_fields(self, client):
        assert client.post("/api/prescriptions", json={"imageUrl": "u"}).status_code == 400
        assert client.post("/api/prescriptions", json={"userId": 1}).status_code == 400

    def test_analyze_then_store(self, client):
        analysis = client.post("/api/prescriptions/analyze", json={"imageBase64": "QUJD"}).get_json()["data"]
        created = self._create(client, aiAnalysis=analysis).get_json()["data"]

        resp = client.get(f"/api/prescriptions/detail/{created['id']}")
        assert resp.status_code == 200
        assert resp.get_json()["data"]["aiAnalysis"] == analysis

    def test_detail_not_found(self, client):
        resp = client.get("/api/prescriptions/detail/999")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "not_found"

    def test_detail_bad_id(self, client):
        assert client.get("/api/prescriptions/detail/abc").status_code == 400

    def test_user_history(self, client):
        self._create(client)
        self._create(client)
        self._create(client, userId=43)
        resp = client.get("/api/prescriptions/user/42")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["count"] == 2
        assert len(body["data"]) == 2
        assert body["data"][0]["id"] > body["data"][1]["id"]

    def test_user_history_bad_id(self, client):
        assert client.get("/api/prescriptions/user/abc").status_code == 400

    def test_review_queue(self, client):
        first = self._create(client).get_json()["data"]
        self._create(client)
        client.put(f"/api/prescriptions/{first['id']}/status", json={"isVerified": False})

        resp = client.get("/api/prescriptions?status=pending")
        body = resp.get_json()
        assert resp.status_code == 200
        assert body["total"] == 1
        assert body["page"] == 1

        assert client.get("/api/prescriptions?status=bogus").status_code == 400

    def test_verify(self, client):
        created = self._create(client).get_json()["data"]
        resp = client.put(f"/api/prescriptions/{created['id']}/status", json={
            "isVerified": True, "verifiedBy": 7, "verificationNotes": "ok",
        })
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["data"]["status"] == "VERIFIED"
        assert body["data"]["verifiedBy"] == 7
        assert body["data"]["verificationNotes"] == "ok"
        assert body["message"] == "Prescription status updated to VERIFIED"

    def test_reject(self, client):
        created = self._create(client).get_json()["data"]
        resp = client.put(f"/api/prescriptions/{created['id']}/status", json={"isVerified": False})
        assert resp.get_json()["data"]["status"] == "REJECTED"

    def test_status_requires_is_verified(self, client):
        created = self._create(client).get_json()["data"]
        resp = client.put(f"/api/prescriptions/{created['id']}/status", json={"verifiedBy": 7})
        assert resp.status_code == 400
        resp = client.put(f"/api/prescriptions/{created['id']}/status", json={"isVerified": "yes"})
        assert resp.status_code == 400

    def test_status_not_found(self, client):
        resp = client.put("/api/prescriptions/999/status", json={"isVerified": True})
        assert resp.status_code == 404

    @pytest.mark.parametrize("image_url", [{"u": 1}, ["u"], 5, "   "])
    def test_create_rejects_non_string_image_url(self, client, image_url):
        resp = self._create(client, imageUrl=image_url)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "validation"

    @pytest.mark.parametrize("overrides", [
        {"userId": 10**20},
        {"userId": -1},
        {"orderId": 2**63},
    ])
    def test_create_rejects_out_of_range_ids(self, client, overrides):
        resp = self._create(client, **overrides)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "validation"

    def test_status_rejects_out_of_range_reviewer(self, client):
        created = self._create(client).get_json()["data"]
        resp = client.put(f"/api/prescriptions/{created['id']}/status", json={
            "isVerified": True, "verifiedBy": 10**30,
        })
        assert resp.status_code == 400

    @pytest.mark.parametrize("path", [
        "/api/prescriptions/detail/9999999999999999999999999",
        "/api/prescriptions/user/9999999999999999999999999",
    ])
    def test_lookup_rejects_out_of_range_ids(self, client, path):
        resp = client.get(path)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "validation"

    def test_out_of_range_status_update(self, client):
        resp = client.put("/api/prescriptions/9999999999999999999999999/status", json={"isVerified": True})
        assert resp.status_code == 400

    def test_storage_failure_hides_sql(self, client):
        failure = OperationalError(
            "INSERT INTO prescriptions (user_id, image_url) VALUES (?, ?)",
            (42, "John Doe"),
            Exception("database is locked"),
        )
        with mock.patch.object(db.session, "commit", side_effect=failure):
            resp = self._create(client)
        assert resp.status_code == 500
        body = resp.get_json()
        assert body["error"] == "persistence"
        assert body["message"] == "Failed to create prescription"
        text = resp.get_data(as_text=True)
        assert "SQL" not in text
        assert "parameters" not in text
        assert "John Doe" not in text


# ════════════════════════════════════════════
# AUDIT TRAIL
# ════════════════════════════════════════════

class TestAuditLog:
    def test_requests_are_audited_without_image(self, client):
        client.post("/api/prescriptions/analyze", json={"imageBase64": "QUJD"})
        entry = AuditLog.query.filter_by(endpoint="/api/prescriptions/analyze").first()
        assert entry is not None
        assert entry.status_code == 200
        assert "QUJD" not in entry.request_body
        assert "<redacted>" in entry.request_body

    def test_health_not_audited(self, client):
        client.get("/api/health")
        assert AuditLog.query.filter_by(endpoint="/api/health").count() == 0

    def test_patient_details_are_not_audited(self, client):
        analysis = client.post("/api/prescriptions/analyze", json={"imageBase64": "QUJD"}).get_json()["data"]
        assert analysis["patientInfo"]["name"] == "John Doe"
        client.post("/api/prescriptions", json={
            "userId": 42, "imageUrl": "https://x/y.jpg", "aiAnalysis": analysis,
        })

        entries = AuditLog.query.all()
        assert len(entries) == 2
        for entry in entries:
            assert "John Doe" not in (entry.request_body or "")
            assert "John Doe" not in (entry.response_summary or "")

        created = AuditLog.query.filter_by(endpoint="/api/prescriptions", method="POST").one()
        assert "https://x/y.jpg" in created.request_body
        assert "Prescription created successfully" in created.response_summary

    def test_non_patient_responses_kept(self, client):
        client.post("/api/prescriptions/check-interactions", json={"medications": ["Metformin", "Ibuprofen"]})
        entry = AuditLog.query.filter_by(endpoint="/api/prescriptions/check-interactions").one()
        assert "Metformin" in entry.response_summary
