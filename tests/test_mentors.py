"""Tests for approver endpoints"""
import re

from fastapi.testclient import TestClient


def _apply(client: TestClient, headers, reason: str = "Medical appointment") -> str:
    return client.post("/student/apply", json={"reason": reason}, headers=headers.student).json()["id"]


def test_list_pending_requests(client: TestClient, headers):
    first = _apply(client, headers)
    second = _apply(client, headers, "Dentist visit")
    client.post(f"/mentor/requests/{first}/reject", headers=headers.mentor)

    response = client.get("/mentor/requests", headers=headers.mentor)
    assert response.status_code == 200
    data = response.json()
    assert [p["id"] for p in data["items"]] == [second]
    assert data["pending_count"] == 1

    other = client.get("/mentor/requests", headers=headers.other_mentor).json()
    assert other["items"] == []


def test_approve(client: TestClient, headers):
    pass_id = _apply(client, headers)

    response = client.post(f"/mentor/requests/{pass_id}/approve", headers=headers.mentor)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "APPROVED"
    assert data["token_active"] is True
    assert data["decided_at"] is not None
    assert data["token_issued_at"] is not None
    assert "token" not in data

    passes = client.get("/student/passes", headers=headers.student).json()["items"]
    assert re.fullmatch(r"[0-9A-Z]{10}", passes[0]["redemption"]["token"])


def test_reject(client: TestClient, headers):
    pass_id = _apply(client, headers)

    response = client.post(f"/mentor/requests/{pass_id}/reject", headers=headers.mentor)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "REJECTED"
    assert data["token_active"] is False
    assert data["token_issued_at"] is None


def test_decide_by_other_mentor(client: TestClient, headers, admin_headers):
    pass_id = _apply(client, headers)

    response = client.post(f"/mentor/requests/{pass_id}/approve", headers=headers.other_mentor)
    assert response.status_code == 403
    assert response.json()["error"] == "unauthorized"

    status = client.get(f"/passes/{pass_id}", headers=admin_headers).json()["status"]
    assert status == "PENDING"


def test_decide_twice(client: TestClient, headers):
    pass_id = _apply(client, headers)
    client.post(f"/mentor/requests/{pass_id}/approve", headers=headers.mentor)

    response = client.post(f"/mentor/requests/{pass_id}/reject", headers=headers.mentor)
    assert response.status_code == 409
    assert response.json()["error"] == "invalid_transition"


def test_decide_unknown_pass(client: TestClient, headers):
    response = client.post("/mentor/requests/no-such-pass/approve", headers=headers.mentor)
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_decide_requires_approver_role(client: TestClient, headers):
    pass_id = _apply(client, headers)

    response = client.post(f"/mentor/requests/{pass_id}/approve", headers=headers.student)
    assert response.status_code == 403
