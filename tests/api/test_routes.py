import pytest
from datetime import date, timedelta

from fastapi.testclient import TestClient

from shiftroster.api.deps import get_audit_sink, get_db, get_notifier
from shiftroster.core.security import get_password_hash
from shiftroster.db.models import Role, ShiftType, Users
from shiftroster.main import app

from conftest import RecordingAuditSink, RecordingNotifier, add_availability, add_employee, add_limit


def _future_monday() -> date:
    # far enough ahead that substitution deadlines have not passed
    today = date.today() + timedelta(days=14)
    return today - timedelta(days=today.weekday())


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(db_session, notifier):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_audit_sink] = lambda: RecordingAuditSink()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _login_employee(db, client, username, primary_role, secondary_role=None):
    user = Users(username=username, password_hash=get_password_hash("secret"), is_active=True)
    db.add(user)
    db.commit()
    emp = add_employee(db, username.title(), primary_role, secondary_role=secondary_role, user_id=user.id)
    response = client.post("/api/v1/auth/login", json={"username": username, "password": "secret"})
    token = response.json()["access_token"]
    return emp, {"Authorization": f"Bearer {token}"}


@pytest.fixture
def staff(db_session, client):
    admin, admin_headers = _login_employee(db_session, client, "boss", Role.ADMIN)
    luca, luca_headers = _login_employee(db_session, client, "luca", Role.COOK)
    sofia, sofia_headers = _login_employee(db_session, client, "sofia", Role.COOK)
    anna, anna_headers = _login_employee(db_session, client, "anna", Role.FLOOR)
    return {
        "admin": (admin, admin_headers),
        "luca": (luca, luca_headers),
        "sofia": (sofia, sofia_headers),
        "anna": (anna, anna_headers),
    }


class TestAuth:

    def test_login_bad_password(self, db_session, client):
        _login_employee(db_session, client, "luca", Role.COOK)
        response = client.post("/api/v1/auth/login", json={"username": "luca", "password": "nope"})
        assert response.status_code == 401

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestScheduleRoutes:

    def test_generate_requires_admin(self, client, staff):
        _, headers = staff["luca"]
        response = client.post("/api/v1/schedules/generate", json={"week_start": "2025-01-20"}, headers=headers)
        assert response.status_code == 403

    def test_missing_week_start(self, client, staff):
        _, headers = staff["admin"]
        response = client.post("/api/v1/schedules/generate", json={}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidInput"

    def test_malformed_week_start(self, client, staff):
        _, headers = staff["admin"]
        response = client.post("/api/v1/schedules/generate", json={"week_start": "20/01/2025"}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidInput"

    def test_generate_reports_gaps(self, db_session, client, staff):
        luca, _ = staff["luca"]
        _, headers = staff["admin"]
        monday = date(2025, 1, 20)
        add_availability(db_session, luca.id, monday, 0, ShiftType.LUNCH)
        add_limit(db_session, 0, ShiftType.LUNCH, Role.COOK, 2, 3)

        # any day of the week is accepted and normalized to its Monday
        response = client.post("/api/v1/schedules/generate", json={"week_start": "2025-01-22"}, headers=headers)

        assert response.status_code == 201
        body = response.json()
        assert body["week_start"] == "2025-01-20"
        assert body["shifts_generated"] == 1
        assert body["gaps"] == [{
            "day_of_week": 0, "shift_type": "LUNCH", "role": "COOK",
            "required": 2, "filled": 1, "deficit": 1,
            "excluded": {"unavailable": 1, "weekly_cap": 0, "double_booked": 0},
        }]

    def test_read_schedule_gaps_and_coverage(self, db_session, client, staff):
        luca, luca_headers = staff["luca"]
        _, headers = staff["admin"]
        monday = date(2025, 1, 20)
        add_availability(db_session, luca.id, monday, 0, ShiftType.LUNCH)
        add_limit(db_session, 0, ShiftType.LUNCH, Role.COOK, 2, 3)
        client.post("/api/v1/schedules/generate", json={"week_start": "2025-01-20"}, headers=headers)

        schedule = client.get("/api/v1/schedules/2025-01-20", headers=luca_headers).json()
        assert [s["employee_id"] for s in schedule["shifts"]] == [luca.id]
        assert schedule["shifts"][0]["start_time"] == "11:30:00"

        gaps = client.get("/api/v1/schedules/2025-01-20/gaps", headers=headers).json()
        assert [g["deficit"] for g in gaps] == [1]

        coverage = client.get("/api/v1/schedules/2025-01-20/coverage", headers=headers).json()
        assert coverage["total_required"] == 2
        assert coverage["coverage_percentage"] == 50.0

    def test_staffing_input_reports(self, db_session, client, staff):
        luca, luca_headers = staff["luca"]
        sofia, _ = staff["sofia"]
        anna, _ = staff["anna"]
        _, headers = staff["admin"]
        add_availability(db_session, luca.id, date(2025, 1, 20), 0, ShiftType.LUNCH)

        assert client.get("/api/v1/schedules/2025-01-20/missing-availability", headers=luca_headers).status_code == 403
        report = client.get("/api/v1/schedules/2025-01-22/missing-availability", headers=headers).json()
        assert report["week_start"] == "2025-01-20"
        assert [m["employee_id"] for m in report["missing"]] == [sofia.id, anna.id]

        add_limit(db_session, 0, ShiftType.LUNCH, Role.COOK, 1, 1)
        client.post("/api/v1/schedules/generate", json={"week_start": "2025-01-20"}, headers=headers)
        rows = client.get("/api/v1/schedules/2025-01-20/employee-coverage", headers=headers).json()
        assert rows[0] == {
            "employee_id": luca.id, "name": "Luca", "primary_role": "COOK",
            "available": 1, "assigned": 1, "utilization": 100.0,
        }

    def test_missing_schedule_is_404(self, client, staff):
        _, headers = staff["luca"]
        response = client.get("/api/v1/schedules/2030-01-07", headers=headers)

        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"


class TestSubstitutionRoutes:

    def _generate(self, db_session, client, staff, monday):
        luca, _ = staff["luca"]
        _, admin_headers = staff["admin"]
        add_availability(db_session, luca.id, monday, 0, ShiftType.DINNER)
        add_limit(db_session, 0, ShiftType.DINNER, Role.COOK, 1, 1)
        client.post("/api/v1/schedules/generate", json={"week_start": monday.isoformat()}, headers=admin_headers)
        schedule = client.get(f"/api/v1/schedules/{monday.isoformat()}", headers=admin_headers).json()
        return schedule["shifts"][0]["id"]

    def test_full_flow(self, db_session, client, staff, notifier):
        monday = _future_monday()
        shift_id = self._generate(db_session, client, staff, monday)
        _, luca_headers = staff["luca"]
        sofia, sofia_headers = staff["sofia"]

        created = client.post("/api/v1/substitutions", json={"shift_id": shift_id}, headers=luca_headers)
        assert created.status_code == 201
        request_id = created.json()["id"]

        open_requests = client.get("/api/v1/substitutions/open", headers=sofia_headers).json()
        assert [r["id"] for r in open_requests] == [request_id]

        applied = client.post(f"/api/v1/substitutions/{request_id}/apply", headers=sofia_headers)
        assert applied.json()["status"] == "APPLIED"

        approved = client.post(f"/api/v1/substitutions/{request_id}/approve", json={"note": "ok"}, headers=luca_headers)
        assert approved.status_code == 200
        assert approved.json()["status"] == "APPROVED"

        schedule = client.get(f"/api/v1/schedules/{monday.isoformat()}", headers=luca_headers).json()
        assert schedule["shifts"][0]["employee_id"] == sofia.id
        assert schedule["shifts"][0]["status"] == "SUBSTITUTED"
        assert "SUBSTITUTION_APPROVED" in notifier.events()

    def test_errors_mapped(self, db_session, client, staff):
        monday = _future_monday()
        shift_id = self._generate(db_session, client, staff, monday)
        _, luca_headers = staff["luca"]
        _, anna_headers = staff["anna"]

        forbidden = client.post("/api/v1/substitutions", json={"shift_id": shift_id}, headers=anna_headers)
        assert forbidden.status_code == 403
        assert forbidden.json()["error"] == "Forbidden"

        request_id = client.post("/api/v1/substitutions", json={"shift_id": shift_id}, headers=luca_headers).json()["id"]
        duplicate = client.post("/api/v1/substitutions", json={"shift_id": shift_id}, headers=luca_headers)
        assert duplicate.status_code == 409
        assert duplicate.json()["error"] == "Conflict"

        invalid = client.post(f"/api/v1/substitutions/{request_id}/approve", headers=luca_headers)
        assert invalid.status_code == 409
        assert invalid.json()["error"] == "InvalidState"

        missing = client.post("/api/v1/substitutions/9999/cancel", headers=luca_headers)
        assert missing.status_code == 404

    def test_own_requests_listing(self, db_session, client, staff):
        monday = _future_monday()
        shift_id = self._generate(db_session, client, staff, monday)
        _, luca_headers = staff["luca"]

        client.post("/api/v1/substitutions", json={"shift_id": shift_id}, headers=luca_headers)
        mine = client.get("/api/v1/substitutions", headers=luca_headers).json()
        assert len(mine) == 1
        assert mine[0]["status"] == "PENDING"


class TestSupportingRoutes:

    def test_availability_roundtrip(self, client, staff):
        _, headers = staff["luca"]
        payload = {
            "week_start": "2025-01-22",
            "slots": [
                {"day_of_week": 0, "shift_type": "DINNER", "is_available": True},
                {"day_of_week": 0, "shift_type": "LUNCH", "is_available": False},
            ],
        }
        saved = client.put("/api/v1/availability", json=payload, headers=headers)
        assert saved.status_code == 200
        assert [(e["shift_type"], e["week_start"]) for e in saved.json()] == [
            ("LUNCH", "2025-01-20"), ("DINNER", "2025-01-20"),
        ]

        payload["slots"] = [{"day_of_week": 0, "shift_type": "LUNCH", "is_available": True}]
        client.put("/api/v1/availability", json=payload, headers=headers)

        entries = client.get("/api/v1/availability", params={"week_start": "2025-01-20"}, headers=headers).json()
        assert len(entries) == 2
        assert all(e["is_available"] for e in entries)

    def test_availability_of_others_is_admin_only(self, client, staff):
        anna, _ = staff["anna"]
        _, luca_headers = staff["luca"]
        response = client.get(
            "/api/v1/availability", params={"week_start": "2025-01-20", "employee_id": anna.id}, headers=luca_headers
        )
        assert response.status_code == 403

    def test_time_off_approval(self, client, staff):
        _, luca_headers = staff["luca"]
        _, admin_headers = staff["admin"]

        created = client.post(
            "/api/v1/time-off",
            json={"kind": "LEAVE", "start_date": "2025-01-20", "end_date": "2025-01-21"},
            headers=luca_headers,
        )
        assert created.status_code == 201
        period_id = created.json()["id"]
        assert created.json()["status"] == "PENDING"

        assert client.patch(f"/api/v1/time-off/{period_id}/approve", headers=luca_headers).status_code == 403
        approved = client.patch(f"/api/v1/time-off/{period_id}/approve", headers=admin_headers)
        assert approved.json()["status"] == "APPROVED"

        again = client.patch(f"/api/v1/time-off/{period_id}/reject", headers=admin_headers)
        assert again.status_code == 409

    def test_time_off_dates_validated(self, client, staff):
        _, headers = staff["luca"]
        response = client.post(
            "/api/v1/time-off",
            json={"kind": "ABSENCE", "start_date": "2025-01-22", "end_date": "2025-01-20"},
            headers=headers,
        )
        assert response.status_code == 422

    def test_staffing_limits_upsert(self, client, staff):
        _, headers = staff["admin"]
        limit = {"day_of_week": 4, "shift_type": "DINNER", "role": "PIZZA_MAKER", "min_staff": 1, "max_staff": 2}

        client.put("/api/v1/staffing-limits", json=[limit], headers=headers)
        limit["min_staff"] = 2
        client.put("/api/v1/staffing-limits", json=[limit], headers=headers)

        limits = client.get("/api/v1/staffing-limits", headers=headers).json()
        assert len(limits) == 1
        assert limits[0]["min_staff"] == 2

    def test_staffing_limit_bounds_validated(self, client, staff):
        _, headers = staff["admin"]
        bad = {"day_of_week": 0, "shift_type": "LUNCH", "role": "COOK", "min_staff": 3, "max_staff": 1}
        assert client.put("/api/v1/staffing-limits", json=[bad], headers=headers).status_code == 422

    def test_start_time_targets(self, client, staff):
        _, headers = staff["admin"]
        target = {"shift_type": "DINNER", "role": "DELIVERY", "start_time": "18:30:00", "target_count": 2}

        created = client.post("/api/v1/start-time-targets", json=target, headers=headers)
        assert created.status_code == 201
        assert client.post("/api/v1/start-time-targets", json=target, headers=headers).status_code == 409

        updated = client.put(
            f"/api/v1/start-time-targets/{created.json()['id']}", json={"priority": 3}, headers=headers
        )
        assert updated.json()["priority"] == 3
        assert updated.json()["start_time"] == "18:30:00"

    def test_start_time_target_moved_onto_existing_is_409(self, client, staff):
        _, headers = staff["admin"]
        target = {"shift_type": "DINNER", "role": "DELIVERY", "start_time": "18:30:00"}
        client.post("/api/v1/start-time-targets", json=target, headers=headers)
        other = client.post(
            "/api/v1/start-time-targets", json={**target, "start_time": "19:00:00"}, headers=headers
        ).json()

        response = client.put(
            f"/api/v1/start-time-targets/{other['id']}", json={"start_time": "18:30:00"}, headers=headers
        )
        assert response.status_code == 409

        targets = client.get("/api/v1/start-time-targets", headers=headers).json()
        assert sorted(t["start_time"] for t in targets) == ["18:30:00", "19:00:00"]
        # moving a target onto its own start time is not a clash
        same = client.put(
            f"/api/v1/start-time-targets/{other['id']}", json={"start_time": "19:00:00"}, headers=headers
        )
        assert same.status_code == 200

    def test_staffing_limits_repeated_key_is_409(self, client, staff):
        _, headers = staff["admin"]
        limit = {"day_of_week": 4, "shift_type": "DINNER", "role": "PIZZA_MAKER", "min_staff": 1, "max_staff": 2}

        response = client.put(
            "/api/v1/staffing-limits", json=[limit, {**limit, "max_staff": 3}], headers=headers
        )
        assert response.status_code == 409
        assert client.get("/api/v1/staffing-limits", headers=headers).json() == []

    def test_worked_hours_only_for_own_shift(self, db_session, client, staff):
        luca, luca_headers = staff["luca"]
        _, sofia_headers = staff["sofia"]
        _, admin_headers = staff["admin"]
        add_availability(db_session, luca.id, date(2025, 1, 20), 0, ShiftType.LUNCH)
        add_limit(db_session, 0, ShiftType.LUNCH, Role.COOK, 1, 1)
        client.post("/api/v1/schedules/generate", json={"week_start": "2025-01-20"}, headers=admin_headers)
        shift_id = client.get("/api/v1/schedules/2025-01-20", headers=luca_headers).json()["shifts"][0]["id"]

        assert client.post("/api/v1/worked-hours", json={"shift_id": shift_id, "hours": "2.5"},
                           headers=sofia_headers).status_code == 403
        assert client.post("/api/v1/worked-hours", json={"shift_id": shift_id, "hours": "2.5"},
                           headers=luca_headers).status_code == 201
        assert client.post("/api/v1/worked-hours", json={"shift_id": shift_id, "hours": "2.5"},
                           headers=luca_headers).status_code == 409

        records = client.get("/api/v1/worked-hours", headers=luca_headers).json()
        assert len(records) == 1
