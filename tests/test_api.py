from __future__ import annotations

import pytest

from src.hrms.hrms.main import create_app

from tests.fakes import PASSWORD


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, user_id: int):
    return client.post("/api/auth/login", json={"email": f"user{user_id}@example.com", "password": PASSWORD})


def test_login_and_me(client):
    resp = _login(client, 3)
    assert resp.status_code == 200
    assert resp.get_json()["role"] == "employee"

    resp = client.get("/api/me")
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["user_id"] == 3
    assert "leave.request" in body["permissions"]
    assert "password_hash" not in body


def test_bad_login_is_401(client):
    resp = client.post("/api/auth/login", json={"email": "user3@example.com", "password": "nope"})
    assert resp.status_code == 401


def test_login_requires_json_body(client):
    resp = client.post("/api/auth/login", data="not json", content_type="text/plain")
    assert resp.status_code == 400


def test_routes_require_session(client):
    assert client.get("/api/me").status_code == 401

    _login(client, 3)
    client.post("/api/auth/logout")
    assert client.get("/api/me").status_code == 401


def test_employee_cannot_reach_payroll(client):
    _login(client, 3)

    assert client.get("/api/payroll").status_code == 403
    assert client.get("/api/users").status_code == 403


def test_admin_is_not_master_admin(client):
    _login(client, 2)

    assert client.get("/api/users").status_code == 200
    assert client.get("/api/payroll").status_code == 403


def test_missing_user_is_404(client):
    _login(client, 1)

    resp = client.get("/api/users/99")
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "User not found"


def test_employee_reads_only_own_profile(client):
    _login(client, 3)

    assert client.get("/api/users/3").status_code == 200
    assert client.get("/api/users/2").status_code == 403


def test_double_check_in_is_rejected(client):
    _login(client, 3)

    assert client.post("/api/attendance/check-in", json={}).status_code == 201
    resp = client.post("/api/attendance/check-in", json={})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Already checked in today"


def test_leave_request_and_approval_flow(client):
    _login(client, 3)
    resp = client.post(
        "/api/leaves",
        json={"start_date": "2024-03-08", "end_date": "2024-03-12", "reason": "Family trip"},
    )
    assert resp.status_code == 201
    leave_id = resp.get_json()["leave_id"]

    assert client.post(f"/api/leaves/{leave_id}/approve").status_code == 403

    _login(client, 2)
    assert [lv["leave_id"] for lv in client.get("/api/leaves/pending").get_json()] == [leave_id]

    resp = client.post(f"/api/leaves/{leave_id}/approve", json={"admin_note": "enjoy"})
    assert resp.status_code == 200
    assert resp.get_json()["attendance_records"] == 3


def test_master_admin_sees_effective_permissions_of_others(client):
    _login(client, 1)

    resp = client.get("/api/permissions/effective/3")
    body = resp.get_json()
    assert resp.status_code == 200
    assert "customers.create" in body["permissions"]
    assert body["approval_limits"]["leave"] is False

    _login(client, 3)
    assert client.get("/api/permissions/effective/1").status_code == 403


def test_payroll_calculate_without_user_id_is_400(client):
    _login(client, 1)

    resp = client.post("/api/payroll/calculate", json={"month": 1, "year": 2024})

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "User id must be an integer"


def test_payroll_process_with_bad_user_ids_is_400(client):
    _login(client, 1)

    assert client.post("/api/payroll/process", json={"month": 1, "year": 2024, "user_ids": ["abc"]}).status_code == 400
    assert client.post("/api/payroll/process", json={"month": 1, "year": 2024, "user_ids": 3}).status_code == 400


def test_summary_with_out_of_range_year_is_400(client):
    _login(client, 3)

    resp = client.get("/api/attendance/summary?month=1&year=0")

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Year must be between 1 and 9999"
