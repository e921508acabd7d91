"""HTTP surface of the kiosk check-in flow, backed by the in-memory store."""
import base64

import pytest
from fastapi.testclient import TestClient

from eduface.api.checkin import get_orchestrator
from eduface.main import app

FRAME_URL = "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8\xff\xe0live-frame").decode()


@pytest.fixture
def client(orchestrator):
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    # no context manager: the lifespan would try to reach MongoDB
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_claimed_check_in_flow(client, store):
    started = client.post("/api/checkin/sessions", json={"admission_number": "ADM001"})
    assert started.status_code == 201
    session = started.json()
    assert session["mode"] == "claimed"
    assert session["state"] == "CAPTURING"

    response = client.post(f"/api/checkin/sessions/{session['handle']}/frames", json={"image": FRAME_URL})

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "SUCCESS"
    assert body["severity"] == "success"
    assert body["student_name"] == "Alex"
    assert body["subject_code"] == "CS101"
    assert len(store.records) == 1

    again = client.post(f"/api/checkin/sessions/{session['handle']}/frames", json={"image": FRAME_URL})
    assert again.status_code == 409


def test_already_checked_in_is_a_notice(client):
    for _ in range(2):
        handle = client.post("/api/checkin/sessions", json={"admission_number": "ADM001"}).json()["handle"]
        body = client.post(f"/api/checkin/sessions/{handle}/frames", json={"image": FRAME_URL}).json()
    assert body["reason"] == "AlreadyCheckedIn"
    assert body["severity"] == "notice"


def test_unknown_claim_is_reported_on_start(client):
    session = client.post("/api/checkin/sessions", json={"admission_number": "ADM999"}).json()
    assert session["state"] == "FAILED"
    assert session["outcome"]["reason"] == "ClaimNotFound"
    assert session["outcome"]["severity"] == "error"


def test_open_mode_session(client):
    session = client.post("/api/checkin/sessions", json={}).json()
    assert session["mode"] == "open"


def test_invalid_image_is_rejected(client, oracle):
    handle = client.post("/api/checkin/sessions", json={}).json()["handle"]
    response = client.post(f"/api/checkin/sessions/{handle}/frames", json={"image": "data:text/plain;base64,aGk="})
    assert response.status_code == 400
    assert oracle.calls == []


def test_unknown_handle_is_404(client):
    assert client.post("/api/checkin/sessions/missing/frames", json={"image": FRAME_URL}).status_code == 404
    assert client.delete("/api/checkin/sessions/missing").status_code == 404
    assert client.get("/api/checkin/sessions/missing").status_code == 404


def test_cancel(client, store):
    handle = client.post("/api/checkin/sessions", json={"admission_number": "ADM001"}).json()["handle"]

    response = client.delete(f"/api/checkin/sessions/{handle}")

    assert response.status_code == 200
    assert response.json()["state"] == "CANCELLED"
    assert client.get(f"/api/checkin/sessions/{handle}").status_code == 404
    assert store.records == []


def test_dashboard_requires_successful_session(client):
    handle = client.post("/api/checkin/sessions", json={}).json()["handle"]
    assert client.get(f"/api/checkin/sessions/{handle}/dashboard").status_code == 409


def test_active_session_banner(client):
    body = client.get("/api/checkin/active-session").json()
    # the only configured subject doubles as the fallback session
    assert body["active"] is True
    assert body["subject"]["code"] == "CS101"


def test_staff_routes_require_authentication(client):
    assert client.get("/api/students/").status_code == 401
    assert client.get("/api/dashboard/stats").status_code == 401
