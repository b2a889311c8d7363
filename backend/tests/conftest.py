"""
Shared pytest fixtures for the patient risk assessment tests.
"""
import pytest
import requests
from fastapi.testclient import TestClient

import storage
from main import app, get_upstream_client
from seed import sample_response, seed_data
from upstream import UpstreamClient


class FakeResponse:
    """Just enough of requests.Response for the upstream client."""

    def __init__(self, status_code=200, payload=None, reason="OK"):
        self.status_code = status_code
        self._payload = payload
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeSession:
    """Replays queued responses (or raises queued exceptions) and records calls."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "headers": headers, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def sleeps():
    """Collects backoff delays instead of sleeping."""
    return []


@pytest.fixture
def make_upstream(sleeps):
    """Build an UpstreamClient over a FakeSession replaying the given outcomes."""
    def _make(*outcomes, retries=3):
        session = FakeSession(*outcomes)
        client = UpstreamClient(
            "https://upstream.test/api/",
            api_key="test-key",
            retries=retries,
            timeout=5,
            session=session,
            sleep=sleeps.append,
        )
        return client, session
    return _make


@pytest.fixture
def network_error():
    return requests.exceptions.ConnectionError("connection refused")


@pytest.fixture
def empty_storage():
    storage.reset_storage()
    yield
    storage.reset_storage()


@pytest.fixture
def seeded_data():
    """Sample batch cached, submission history empty."""
    seed_data()
    yield
    storage.reset_storage()


@pytest.fixture
def client(monkeypatch):
    """FastAPI TestClient with no upstream configured and demo mode off."""
    monkeypatch.delenv("DEMO_MODE", raising=False)
    app.dependency_overrides[get_upstream_client] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_upstream():
    """Route the app's upstream dependency to a given UpstreamClient."""
    def _use(upstream_client):
        app.dependency_overrides[get_upstream_client] = lambda: upstream_client
    return _use


@pytest.fixture
def patients_payload():
    return sample_response(1, 20)


def raw_patient(**overrides):
    """A clean raw record; override fields to garble them."""
    record = {
        "patient_id": "P100",
        "name": "Fixture, Pat",
        "age": 50,
        "gender": "F",
        "blood_pressure": "110/70",
        "temperature": 98.6,
        "visit_date": "2024-02-01",
        "diagnosis": "Checkup",
        "medications": "None",
    }
    record.update(overrides)
    return record


@pytest.fixture
def two_page_upstream():
    """The sample batch served as two upstream pages (5 + 3 records)."""
    return (
        FakeResponse(200, sample_response(1, 5)),
        FakeResponse(200, sample_response(2, 5)),
    )
