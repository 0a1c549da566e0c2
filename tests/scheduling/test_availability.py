import pytest
from datetime import date, timedelta

from shiftroster.core.errors import InvalidInput, InvalidWeekStart
from shiftroster.db.models.employees import Role
from shiftroster.db.models.shifts import ShiftType
from shiftroster.services.scheduling.types import AvailabilityEntry, Employee, TimeOffPeriod
from shiftroster.services.scheduling.availability import (
    ensure_monday,
    is_available,
    is_on_time_off,
    normalize_week_start,
    resolve_availability,
)

from conftest import get_test_monday


class TestNormalizeWeekStart:

    def test_monday_string_unchanged(self):
        assert normalize_week_start("2025-01-20") == date(2025, 1, 20)

    def test_midweek_string_moves_to_monday(self):
        assert normalize_week_start("2025-01-23") == date(2025, 1, 20)

    def test_sunday_belongs_to_preceding_monday(self):
        assert normalize_week_start(date(2025, 1, 26)) == date(2025, 1, 20)

    def test_missing_raises(self):
        with pytest.raises(InvalidInput):
            normalize_week_start(None)

    def test_blank_raises(self):
        with pytest.raises(InvalidInput):
            normalize_week_start("  ")

    def test_malformed_raises(self):
        with pytest.raises(InvalidInput):
            normalize_week_start("next monday")


class TestEnsureMonday:

    def test_accepts_monday(self):
        ensure_monday(get_test_monday())

    def test_rejects_other_days(self):
        with pytest.raises(InvalidWeekStart):
            ensure_monday(get_test_monday() + timedelta(days=1))

    def test_invalid_week_start_is_invalid_input(self):
        assert issubclass(InvalidWeekStart, InvalidInput)


class TestIsOnTimeOff:

    def test_endpoints_are_inclusive(self):
        monday = get_test_monday()
        periods = [TimeOffPeriod(employee_id=1, start_date=monday, end_date=monday + timedelta(days=2))]

        assert is_on_time_off(1, monday, periods) is True
        assert is_on_time_off(1, monday + timedelta(days=2), periods) is True
        assert is_on_time_off(1, monday + timedelta(days=3), periods) is False

    def test_other_employee_not_affected(self):
        monday = get_test_monday()
        periods = [TimeOffPeriod(employee_id=1, start_date=monday, end_date=monday)]
        assert is_on_time_off(2, monday, periods) is False


class TestResolveAvailability:

    def test_missing_entry_means_unavailable(self):
        emp = Employee(id=1, name="Luca", primary_role=Role.COOK)
        matrix = resolve_availability(get_test_monday(), [emp], [], [])

        assert matrix[1][0][ShiftType.LUNCH] is False
        assert matrix[1][6][ShiftType.DINNER] is False

    def test_matrix_is_fully_populated(self):
        emp = Employee(id=1, name="Luca", primary_role=Role.COOK)
        matrix = resolve_availability(get_test_monday(), [emp], [], [])

        assert sorted(matrix[1].keys()) == list(range(7))
        for day in range(7):
            assert set(matrix[1][day].keys()) == {ShiftType.LUNCH, ShiftType.DINNER}

    def test_entry_value_is_used(self):
        emp = Employee(id=1, name="Luca", primary_role=Role.COOK)
        entries = [
            AvailabilityEntry(employee_id=1, day_of_week=0, shift_type=ShiftType.DINNER, is_available=True),
            AvailabilityEntry(employee_id=1, day_of_week=0, shift_type=ShiftType.LUNCH, is_available=False),
        ]
        matrix = resolve_availability(get_test_monday(), [emp], entries, [])

        assert matrix[1][0][ShiftType.DINNER] is True
        assert matrix[1][0][ShiftType.LUNCH] is False

    def test_approved_absence_overrides_availability(self):
        monday = get_test_monday()
        emp = Employee(id=1, name="Luca", primary_role=Role.COOK)
        entries = [
            AvailabilityEntry(employee_id=1, day_of_week=0, shift_type=ShiftType.DINNER, is_available=True),
            AvailabilityEntry(employee_id=1, day_of_week=1, shift_type=ShiftType.DINNER, is_available=True),
        ]
        absences = [TimeOffPeriod(employee_id=1, start_date=monday, end_date=monday)]
        matrix = resolve_availability(monday, [emp], entries, absences)

        assert matrix[1][0][ShiftType.DINNER] is False
        assert matrix[1][1][ShiftType.DINNER] is True

    def test_inactive_employee_excluded(self):
        emp = Employee(id=1, name="Luca", primary_role=Role.COOK, is_active=False)
        matrix = resolve_availability(get_test_monday(), [emp], [], [])
        assert 1 not in matrix

    def test_admin_only_employee_excluded(self):
        admin = Employee(id=1, name="Boss", primary_role=Role.ADMIN)
        matrix = resolve_availability(get_test_monday(), [admin], [], [])
        assert 1 not in matrix

    def test_admin_with_working_role_included(self):
        emp = Employee(id=1, name="Owner", primary_role=Role.ADMIN, secondary_role=Role.PIZZA_MAKER)
        matrix = resolve_availability(get_test_monday(), [emp], [], [])
        assert 1 in matrix

    def test_non_monday_raises(self):
        with pytest.raises(InvalidWeekStart):
            resolve_availability(get_test_monday() + timedelta(days=2), [], [], [])

    def test_is_available_unknown_employee_is_false(self):
        assert is_available({}, 99, 0, ShiftType.LUNCH) is False
