from __future__ import annotations

from datetime import time, timedelta

import pytest

from src.shiftdesk.shiftdesk.common.datetime_utils import next_week_bounds
from src.shiftdesk.shiftdesk.main import create_app

WEEK_START, WEEK_END = next_week_bounds()
WEEK = {"week_start_date": WEEK_START.isoformat(), "week_end_date": WEEK_END.isoformat()}
ORIGIN = "https://shifts.example.test"


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(app):
    c = app.test_client()
    with c.session_transaction() as s:
        s["user_id"] = 100
        s["role"] = "admin"
        s["business_id"] = 10
    return c


def _weekly_token(admin, employee_id=1):
    resp = admin.post("/api/tokens", json={"employee_id": employee_id, "kind": "weekly", **WEEK})
    assert resp.status_code == 201
    return resp.get_json()["token"]


def _shift(day_offset=1, start="09:00", end="13:00"):
    return {"date": (WEEK_START + timedelta(days=day_offset)).isoformat(), "start_time": start, "end_time": end}


def test_admin_endpoints_need_an_admin_session(client, app):
    assert client.post("/api/tokens/bulk", json=WEEK).status_code == 401

    staff = app.test_client()
    with staff.session_transaction() as s:
        s["user_id"] = 1
        s["role"] = "employee"
        s["business_id"] = 10
    assert staff.post("/api/tokens/bulk", json=WEEK).status_code == 403


def test_bulk_generation_returns_links(admin):
    resp = admin.post("/api/tokens/bulk", json=WEEK)

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["total_employees"] == 2
    assert body["successful_tokens"] == 2
    assert body["errors"] == []
    assert [t["employee_name"] for t in body["tokens"]] == ["Alice Nguyen", "Bao Tran"]
    assert all(t["url"].startswith(f"{ORIGIN}/weekly-shift-submission/") for t in body["tokens"])


def test_registration_token_link(admin):
    resp = admin.post("/api/tokens", json={"employee_id": 2, "kind": "registration"})

    body = resp.get_json()
    assert resp.status_code == 201
    assert body["url"] == f"{ORIGIN}/register-employee?token={body['token']}"


def test_issue_rejects_other_tenants_and_unknown_kinds(admin):
    assert admin.post("/api/tokens", json={"employee_id": 4}).status_code == 400
    assert admin.post("/api/tokens", json={"employee_id": 1, "kind": "forever"}).status_code == 400
    assert admin.post("/api/tokens", data="not json").status_code == 400


def test_bulk_generation_rejects_non_numeric_employee_ids(admin):
    resp = admin.post("/api/tokens/bulk", json={**WEEK, "employee_ids": ["abc"]})

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "employee_ids must be a list of numbers"


def test_shift_token_ttl_is_bounded(admin):
    too_long = admin.post("/api/tokens", json={"employee_id": 1, "kind": "shift", "ttl_hours": 10**12})
    negative = admin.post("/api/tokens", json={"employee_id": 1, "kind": "shift", "ttl_hours": -(10**12)})
    ok = admin.post("/api/tokens", json={"employee_id": 1, "kind": "shift", "ttl_hours": 48})

    assert too_long.status_code == 400
    assert negative.status_code == 400
    assert ok.status_code == 201


def test_token_lookup(client, admin):
    token = _weekly_token(admin)

    resp = client.get(f"/api/tokens/{token}")
    assert resp.status_code == 200
    assert resp.get_json()["employee"]["first_name"] == "Alice"

    missing = client.get("/api/tokens/does-not-exist")
    assert missing.status_code == 401
    assert missing.get_json()["error"] == "not_found"


def test_token_qr_code(client, admin):
    token = _weekly_token(admin)

    resp = client.get(f"/api/tokens/{token}/qr.png")

    assert resp.status_code == 200
    assert resp.mimetype == "image/png"


def test_weekly_submission_flow(client, admin):
    token = _weekly_token(admin)

    status = client.post("/api/submissions/status", json={"token": token}).get_json()
    assert status["canSubmit"] is True
    assert status["weekStart"] == WEEK_START.isoformat()

    resp = client.post(
        "/api/submissions/weekly",
        json={"token": token, **WEEK, "shifts": [_shift(1), _shift(3, "17:00", "22:00")], "notes": "no sundays"},
    )
    assert resp.status_code == 201
    assert len(resp.get_json()["submission"]["shifts"]) == 2

    again = client.post("/api/submissions/weekly", json={"token": token, **WEEK, "shifts": [_shift(2)]})
    assert again.status_code == 401
    assert again.get_json()["error"] == "used"

    fresh = _weekly_token(admin)
    blocked = client.post("/api/submissions/weekly", json={"token": fresh, **WEEK, "shifts": [_shift(2)]})
    assert blocked.status_code == 409
    assert blocked.get_json()["error"] == "already_submitted"

    overview = admin.get("/api/submissions", query_string=WEEK).get_json()
    assert [r["has_submitted"] for r in overview["submissions"]] == [True, False]


def test_weekly_submission_rejects_bad_payloads(client, admin):
    token = _weekly_token(admin)

    assert client.post("/api/submissions/weekly", json={"token": token, **WEEK, "shifts": "x"}).status_code == 400
    bad_slot = client.post("/api/submissions/weekly", json={"token": token, **WEEK, "shifts": [{"date": "soon"}]})
    assert bad_slot.status_code == 400
    assert client.post("/api/submissions/status", json={}).status_code == 400


def test_shift_request(client, admin):
    resp = admin.post("/api/tokens", json={"employee_id": 2, "kind": "shift"})
    token = resp.get_json()["token"]

    created = client.post("/api/shift-requests", json={"token": token, "shift": _shift(2)})

    assert created.status_code == 201
    assert created.get_json()["request"]["status"] == "pending"
    assert client.post("/api/shift-requests", json={"token": token, "shift": _shift(3)}).status_code == 401


def test_publish_blocks_further_submissions(client, admin, schedules_repo):
    schedules_repo.add(
        business_id=10,
        branch_id=1,
        shift_date=WEEK_START + timedelta(days=2),
        start_time=time(9, 0),
        end_time=time(17, 0),
        employee_id=2,
    )
    token = _weekly_token(admin)

    resp = admin.post("/api/schedules/publish", json=WEEK)
    assert resp.get_json()["published"] == 1

    status = client.post("/api/submissions/status", json={"token": token}).get_json()
    assert status["blockReason"] == "schedule_published"


def test_assignment_conflict_and_override(admin, schedules_repo, manager_code):
    day = WEEK_START + timedelta(days=1)
    morning = schedules_repo.add(
        business_id=10, branch_id=1, shift_date=day, start_time=time(8, 0), end_time=time(12, 0), employee_id=1
    )
    evening = schedules_repo.add(business_id=10, branch_id=1, shift_date=day, start_time=time(18, 0), end_time=time(22, 0))

    check = admin.get(
        "/api/schedules/conflicts",
        query_string={"employee_id": 1, "branch_id": 1, "date": day.isoformat(), "start_time": "18:00", "end_time": "22:00"},
    ).get_json()
    assert check["hasConflict"] is True
    assert check["conflict"]["conflictingShifts"][0]["id"] == morning.shift_id

    conflict = admin.post(f"/api/schedules/{evening.shift_id}/assign", json={"employee_id": 1})
    assert conflict.status_code == 409
    assert conflict.get_json()["conflict"]["currentShiftTime"] == "18:00-22:00"

    wrong = admin.post(f"/api/schedules/{evening.shift_id}/assign", json={"employee_id": 1, "manager_code": "0000"})
    assert wrong.status_code == 403

    ok = admin.post(f"/api/schedules/{evening.shift_id}/assign", json={"employee_id": 1, "manager_code": manager_code})
    assert ok.status_code == 200
    assert ok.get_json()["shift"]["employee_id"] == 1


def test_bulk_schedule_creation(admin):
    resp = admin.post(
        "/api/schedules/bulk",
        json={
            "branch_id": 2,
            "start_date": WEEK_START.isoformat(),
            "end_date": WEEK_END.isoformat(),
            "start_time": "09:00",
            "end_time": "17:00",
            "weekdays": [1, 2, 3, 4, 5],
        },
    )

    assert resp.status_code == 201
    assert len(resp.get_json()["created"]) == 5
    assert admin.post("/api/schedules/bulk", json={"branch_id": 2, "weekdays": [9]}).status_code == 400


def test_permanent_link_lists_upcoming_shifts(client, admin, schedules_repo):
    schedules_repo.add(
        business_id=10,
        branch_id=1,
        shift_date=WEEK_START + timedelta(days=1),
        start_time=time(8, 0),
        end_time=time(12, 0),
        employee_id=1,
    )
    token = admin.post("/api/tokens", json={"employee_id": 1, "kind": "permanent"}).get_json()["token"]

    resp = client.get(f"/api/tokens/{token}/shifts")

    assert resp.status_code == 200
    assert len(resp.get_json()["shifts"]) == 1


def test_shift_request_accepts_form_field_names(client, admin):
    token = admin.post("/api/tokens", json={"employee_id": 1, "kind": "shift"}).get_json()["token"]
    day = (WEEK_START + timedelta(days=4)).isoformat()

    resp = client.post(
        "/api/shift-requests",
        json={"token": token, "shiftDate": day, "startTime": "10:00", "endTime": "14:00", "branchPreference": "Harbor"},
    )

    assert resp.status_code == 201
    assert resp.get_json()["request"]["branch_preference"] == "Harbor"


def test_weekly_link_lists_open_shifts_of_its_week(client, admin, schedules_repo):
    open_shift = schedules_repo.add(
        business_id=10, branch_id=2, shift_date=WEEK_START + timedelta(days=2), start_time=time(9, 0), end_time=time(15, 0)
    )
    schedules_repo.add(
        business_id=10,
        branch_id=1,
        shift_date=WEEK_START + timedelta(days=2),
        start_time=time(8, 0),
        end_time=time(12, 0),
        employee_id=2,
    )
    schedules_repo.add(
        business_id=10, branch_id=1, shift_date=WEEK_END + timedelta(days=1), start_time=time(9, 0), end_time=time(15, 0)
    )
    schedules_repo.add(
        business_id=20, branch_id=3, shift_date=WEEK_START + timedelta(days=2), start_time=time(9, 0), end_time=time(15, 0)
    )
    token = _weekly_token(admin)

    resp = client.get(f"/api/tokens/{token}/available-shifts")

    assert resp.status_code == 200
    assert [s["id"] for s in resp.get_json()["shifts"]] == [open_shift.shift_id]

    shift_token = admin.post("/api/tokens", json={"employee_id": 1, "kind": "shift"}).get_json()["token"]
    assert client.get(f"/api/tokens/{shift_token}/available-shifts").status_code == 400
