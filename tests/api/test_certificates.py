from __future__ import annotations

from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient

from lms.models.profile import Profile
from lms.repos.memory import memory_db
from tests.conftest import auth, seed_level, seed_module


def _profile(available_at: datetime | None, **overrides) -> Profile:
    fields = {
        "id": "learner-1",
        "email": "ada@example.com",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "test_completed": True,
        "certificate_available_at": available_at,
    }
    fields.update(overrides)
    profile = Profile(**fields)
    memory_db.profiles[profile.id] = profile
    return profile


def test_issue_certificate(client: TestClient, token: str) -> None:
    _profile(datetime.now(UTC) - timedelta(days=1))

    resp = client.post("/users/learner-1/issue-certificate", headers=auth(token))

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["certificateUrl"] == "certificate-learner-1.pdf"
    assert body["issuedAt"]


def test_issue_certificate_twice(client: TestClient, token: str) -> None:
    _profile(datetime.now(UTC) - timedelta(days=1))
    client.post("/users/learner-1/issue-certificate", headers=auth(token))

    resp = client.post("/users/learner-1/issue-certificate", headers=auth(token))

    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "Certificate already issued"


def test_issue_certificate_not_yet_available(client: TestClient, token: str) -> None:
    available = datetime.now(UTC) + timedelta(days=3)
    _profile(available)

    resp = client.post("/users/learner-1/issue-certificate", headers=auth(token))

    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["error"] == "Certificate not yet available"
    assert datetime.fromisoformat(detail["availableAt"]) == available


def test_issue_certificate_for_someone_else(client: TestClient, token: str) -> None:
    _profile(datetime.now(UTC), id="learner-2")
    resp = client.post("/users/learner-2/issue-certificate", headers=auth(token))
    assert resp.status_code == 403


def test_issue_certificate_without_profile(client: TestClient, token: str) -> None:
    resp = client.post("/users/learner-1/issue-certificate", headers=auth(token))
    assert resp.status_code == 404


def test_certificate_data_shape(client: TestClient, token: str) -> None:
    _profile(None)
    module = seed_module("Mod")
    seed_level(module, "Lvl")
    client.post(f"/modules/{module.id}/enroll", headers=auth(token))

    resp = client.get("/certificate-data", headers=auth(token))

    assert resp.status_code == 200
    body = resp.json()
    assert body["user"] == {
        "id": "learner-1",
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "role": "learner",
    }
    (mod,) = body["modules"]
    assert mod["title"] == "Mod"
    assert mod["averageScore"] == 0
    assert mod["levels"][0]["subTopics"] == []
    assert mod["levels"][0]["levelTest"] is None
