"""
API smoke tests using FastAPI TestClient
"""
import pytest

import storage
from conftest import FakeResponse
from submission import LOCAL_MESSAGE


@pytest.fixture(autouse=True)
def clean_storage(empty_storage):
    yield


class TestHealth:
    def test_root_and_health(self, client):
        assert client.get("/").status_code == 200
        assert client.get("/health").json() == {"status": "healthy"}


class TestPatientsEndpoints:
    """GET /api/patients, /api/patients/all, /api/cached-patients"""

    def test_fetch_page_caches_response(self, client, make_upstream, use_upstream, patients_payload):
        upstream, session = make_upstream(FakeResponse(200, patients_payload))
        use_upstream(upstream)

        resp = client.get("/api/patients?page=1&limit=20")
        assert resp.status_code == 200
        assert len(resp.json()["data"]) == 8
        assert session.calls[0]["url"].endswith("/patients?page=1&limit=20")

        cached = client.get("/api/cached-patients")
        assert cached.status_code == 200
        assert cached.json() == resp.json()

    def test_fetch_all_starts_at_first_page_of_twenty(self, client, make_upstream, use_upstream, patients_payload):
        upstream, session = make_upstream(FakeResponse(200, patients_payload))
        use_upstream(upstream)
        assert client.get("/api/patients/all").status_code == 200
        assert session.calls[0]["url"].endswith("/patients?page=1&limit=20")

    def test_fetch_all_flattens_pages_into_cache(self, client, make_upstream, use_upstream, two_page_upstream):
        upstream, session = make_upstream(*two_page_upstream)
        use_upstream(upstream)

        resp = client.get("/api/patients/all")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["data"]) == 8
        assert data["pagination"]["hasNext"] is False
        assert len(session.calls) == 2
        assert session.calls[1]["url"].endswith("/patients?page=2&limit=20")
        assert storage.get_cached_patients() == data

    def test_cached_patients_404_before_fetch(self, client):
        resp = client.get("/api/cached-patients")
        assert resp.status_code == 404

    def test_upstream_failure_is_502(self, client, make_upstream, use_upstream):
        upstream, _ = make_upstream(FakeResponse(500), FakeResponse(500), FakeResponse(500))
        use_upstream(upstream)
        resp = client.get("/api/patients")
        assert resp.status_code == 502
        assert resp.json()["detail"]["error"] == "Failed to fetch patients"
        assert storage.get_cached_patients() is None

    def test_unconfigured_upstream_is_502(self, client):
        resp = client.get("/api/patients/all")
        assert resp.status_code == 502
        assert "API_BASE_URL" in resp.json()["detail"]["message"]

    def test_limit_validation(self, client):
        assert client.get("/api/patients?limit=0").status_code == 422
        assert client.get("/api/patients?page=0").status_code == 422


class TestRiskAssessmentEndpoint:
    """GET /api/risk-assessment"""

    def test_scores_cached_batch(self, client, seeded_data):
        resp = client.get("/api/risk-assessment")
        assert resp.status_code == 200
        data = resp.json()

        assert data["stats"] == {"totalPatients": 8, "highRiskCount": 3, "feverCount": 4, "dataIssueCount": 4}
        assert data["assessment"]["high_risk_patients"] == ["DEMO001", "DEMO004", "DEMO008"]
        assert [p["patient_id"] for p in data["alerts"]["dataQuality"]] == ["DEMO002", "DEMO005", "DEMO006", "DEMO007"]

        first = data["patients"]["items"][0]
        assert first["patient_id"] == "DEMO001"
        assert first["riskScore"] == {"bloodPressure": 4, "temperature": 2, "age": 2, "total": 8}
        assert first["isHighRisk"] is True
        assert data["duplicatePatientIds"] == []

    def test_search_and_pagination_narrow_listing_only(self, client, seeded_data):
        data = client.get("/api/risk-assessment?search=maria").json()
        assert [p["patient_id"] for p in data["patients"]["items"]] == ["DEMO004"]
        assert data["stats"]["totalPatients"] == 8

        page2 = client.get("/api/risk-assessment?page=2&page_size=5").json()["patients"]
        assert page2["total"] == 8
        assert len(page2["items"]) == 3
        assert page2["hasPrevious"] is True

    def test_fetches_when_cache_is_empty(self, client, make_upstream, use_upstream, patients_payload):
        upstream, session = make_upstream(FakeResponse(200, patients_payload))
        use_upstream(upstream)
        resp = client.get("/api/risk-assessment")
        assert resp.status_code == 200
        assert len(session.calls) == 1
        assert storage.get_cached_patients() is not None

    def test_empty_cache_scores_every_upstream_page(self, client, make_upstream, use_upstream, two_page_upstream):
        upstream, session = make_upstream(*two_page_upstream)
        use_upstream(upstream)
        data = client.get("/api/risk-assessment").json()
        assert len(session.calls) == 2
        assert data["stats"]["totalPatients"] == 8
        assert data["assessment"]["data_quality_issues"] == ["DEMO002", "DEMO005", "DEMO006", "DEMO007"]

    def test_rows_carry_blood_pressure_category(self, client, seeded_data):
        items = client.get("/api/risk-assessment?page_size=20").json()["patients"]["items"]
        categories = {p["patient_id"]: p["bloodPressureCategory"] for p in items}
        assert categories["DEMO001"] == "Stage 2"
        assert categories["DEMO003"] == "Normal"
        assert categories["DEMO004"] == "Stage 1"
        assert categories["DEMO006"] == "Elevated"
        assert categories["DEMO002"] is None
        assert categories["DEMO005"] is None

    def test_duplicate_ids_are_reported_not_rejected(self, client, patients_payload):
        patients_payload["data"].append(dict(patients_payload["data"][0]))
        storage.set_cached_patients(patients_payload)
        data = client.get("/api/risk-assessment").json()
        assert data["duplicatePatientIds"] == ["DEMO001"]
        assert data["assessment"]["high_risk_patients"] == ["DEMO001", "DEMO004", "DEMO008", "DEMO001"]

    def test_out_of_schema_record_is_surfaced(self, client, patients_payload):
        patients_payload["data"].append({"name": "No id"})
        storage.set_cached_patients(patients_payload)
        resp = client.get("/api/risk-assessment")
        assert resp.status_code == 500
        assert resp.json()["detail"]["error"] == "Failed to score patients"


class TestSubmitAssessmentEndpoint:
    """POST /api/submit-assessment and GET /api/submission-history"""

    RESULTS = {"high_risk_patients": ["DEMO001"], "fever_patients": [], "data_quality_issues": ["DEMO002"]}

    def test_local_fallback_without_upstream(self, client):
        resp = client.post("/api/submit-assessment", json=self.RESULTS)
        assert resp.status_code == 200
        assert resp.json()["message"] == LOCAL_MESSAGE

        history = client.get("/api/submission-history").json()
        assert len(history) == 1
        assert history[0]["results"]["breakdown"]["high_risk"]["submitted"] == 1

    def test_request_validation(self, client):
        resp = client.post("/api/submit-assessment", json={"high_risk_patients": ["P1"]})
        assert resp.status_code == 422

    def test_submission_history_starts_empty(self, client):
        assert client.get("/api/submission-history").json() == []
