"""
Availability resolution.
Builds the effective employee x day x shift availability matrix for a week.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Union

from shiftroster.core.errors import InvalidInput, InvalidWeekStart
from shiftroster.db.models.shifts import ShiftType

from .types import (
    AvailabilityEntry,
    DAYS,
    Employee,
    SHIFT_ORDER,
    TimeOffPeriod,
)

AvailabilityMatrix = dict[int, dict[int, dict[ShiftType, bool]]]


def normalize_week_start(value: Optional[Union[str, date]]) -> date:
    """
    Parse a week reference and return the Monday of its week.

    Accepts a date or an ISO "YYYY-MM-DD" string. Any day of the week is
    accepted and moved back to that week's Monday.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidInput("week_start is required")

    if isinstance(value, datetime):
        value = value.date()
    elif isinstance(value, str):
        try:
            value = date.fromisoformat(value.strip())
        except ValueError:
            raise InvalidInput(f"week_start must be an ISO date (YYYY-MM-DD), got {value!r}")
    elif not isinstance(value, date):
        raise InvalidInput(f"week_start must be a date, got {type(value).__name__}")

    return value - timedelta(days=value.weekday())


def ensure_monday(week_start: date) -> None:
    if week_start.weekday() != 0:
        raise InvalidWeekStart(
            f"week_start must be a Monday, got {week_start} ({week_start.strftime('%A')})"
        )


def is_on_time_off(employee_id: int, day: date, time_off_periods: list[TimeOffPeriod]) -> bool:
    """Check if employee has approved time off covering a calendar day."""
    return any(p.employee_id == employee_id and p.covers(day) for p in time_off_periods)


def resolve_availability(
    week_start: date,
    employees: list[Employee],
    entries: list[AvailabilityEntry],
    time_off_periods: list[TimeOffPeriod],
) -> AvailabilityMatrix:
    """
    Compute available[employee_id][day_of_week][shift_type] for the week.

    - starts from the employee's own entry, a missing entry counts as unavailable
    - approved time off forces every shift on a covered day to unavailable
    - inactive and ADMIN-only employees are left out of the matrix

    Raises:
        InvalidWeekStart: if week_start is not a Monday
    """
    ensure_monday(week_start)

    raw: dict[tuple[int, int, ShiftType], bool] = {
        (e.employee_id, e.day_of_week, e.shift_type): e.is_available for e in entries
    }

    matrix: AvailabilityMatrix = {}
    for emp in employees:
        if not emp.is_schedulable:
            continue

        days: dict[int, dict[ShiftType, bool]] = {}
        for day in DAYS:
            off = is_on_time_off(emp.id, week_start + timedelta(days=day), time_off_periods)
            days[day] = {
                shift_type: (not off) and raw.get((emp.id, day, shift_type), False)
                for shift_type in SHIFT_ORDER
            }
        matrix[emp.id] = days

    return matrix


def is_available(matrix: AvailabilityMatrix, employee_id: int, day_of_week: int, shift_type: ShiftType) -> bool:
    return matrix.get(employee_id, {}).get(day_of_week, {}).get(shift_type, False)
