"""Tests for admin history endpoints"""
from fastapi.testclient import TestClient


def test_list_passes(client: TestClient, headers, admin_headers, users):
    first = client.post("/student/apply", json={"reason": "Medical appointment"}, headers=headers.student).json()["id"]
    client.post("/student/apply", json={"reason": "Dentist visit"}, headers=headers.student)
    client.post(f"/mentor/requests/{first}/approve", headers=headers.mentor)

    response = client.get("/passes", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["pending_count"] == 1

    approved = client.get("/passes?status=approved", headers=admin_headers).json()
    assert [p["id"] for p in approved["items"]] == [first]

    by_student = client.get(f"/passes?student_id={users.student.id}", headers=admin_headers).json()
    assert by_student["total"] == 2


def test_list_passes_bad_status(client: TestClient, admin_headers, users):
    response = client.get("/passes?status=expired", headers=admin_headers)
    assert response.status_code == 400


def test_list_passes_requires_admin(client: TestClient, headers):
    assert client.get("/passes").status_code == 401
    assert client.get("/passes", headers=headers.mentor).status_code == 403
    assert client.get("/passes", headers={"X-Admin-Key": "wrong"}).status_code == 403


def test_get_pass(client: TestClient, headers, admin_headers):
    pass_id = client.post("/student/apply", json={"reason": "Medical appointment"}, headers=headers.student).json()["id"]

    response = client.get(f"/passes/{pass_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["id"] == pass_id
    assert "token" not in response.json()


def test_get_pass_not_found(client: TestClient, admin_headers, users):
    response = client.get("/passes/no-such-pass", headers=admin_headers)
    assert response.status_code == 404
