"""
Coverage queries over a persisted schedule, plus the availability
submission report for a week.
"""

from collections import Counter
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from shiftroster.core.errors import NotFound
from shiftroster.db.models.schedules import Schedules
from shiftroster.db.models.shifts import Shifts

from .availability import AvailabilityMatrix, ensure_monday, is_available, is_on_time_off, resolve_availability
from .constraints import ConstraintStore, SlotKey, find_gaps
from .data_loader import load_schedule_context
from .types import (
    DAYS,
    EXCLUDED_DOUBLE_BOOKED,
    EXCLUDED_UNAVAILABLE,
    EXCLUDED_WEEKLY_CAP,
    ROLE_ORDER,
    SHIFT_ORDER,
    Employee,
    Gap,
    ShiftAssignment,
)


def get_schedule(db: Session, week_start: date) -> Schedules:
    ensure_monday(week_start)
    schedule = db.execute(
        select(Schedules).where(Schedules.week_start == week_start)
    ).scalar_one_or_none()
    if schedule is None:
        raise NotFound(f"No schedule for week {week_start}")
    return schedule


def list_schedule_shifts(db: Session, schedule_id: int) -> list[Shifts]:
    """Shifts of a schedule in canonical order (day, LUNCH before DINNER, role order, employee)."""
    rows = db.execute(select(Shifts).where(Shifts.schedule_id == schedule_id)).scalars().all()
    return sorted(
        rows,
        key=lambda s: (s.day_of_week, SHIFT_ORDER.index(s.shift_type), ROLE_ORDER.index(s.role), s.employee_id),
    )


def _as_assignments(shifts: list[Shifts]) -> list[ShiftAssignment]:
    return [
        ShiftAssignment(
            employee_id=s.employee_id,
            day_of_week=s.day_of_week,
            shift_type=s.shift_type,
            role=s.role,
            start_time=s.start_time,
            end_time=s.end_time,
        )
        for s in shifts
    ]


def _persisted_exclusions(
    store: ConstraintStore,
    employees: list[Employee],
    matrix: AvailabilityMatrix,
    shifts: list[Shifts],
) -> dict[SlotKey, dict[str, int]]:
    """
    Per demanded slot, why each qualified employee who is not on it is left out.

    Same reasons and precedence as the solver's candidate pool, judged against
    the week as persisted: weekly load is the employee's final shift count.
    """
    load = Counter(s.employee_id for s in shifts)
    held = {(s.employee_id, s.day_of_week, s.shift_type): s.role for s in shifts}

    excluded = {}
    for day, shift_type, role in store.demanded_slots():
        reasons: Counter = Counter()
        for emp in employees:
            if not emp.is_schedulable or not emp.can_work_role(role):
                continue
            held_role = held.get((emp.id, day, shift_type))
            if held_role == role:
                continue
            if not is_available(matrix, emp.id, day, shift_type):
                reasons[EXCLUDED_UNAVAILABLE] += 1
            elif emp.max_shifts_per_week is not None and load[emp.id] >= emp.max_shifts_per_week:
                reasons[EXCLUDED_WEEKLY_CAP] += 1
            elif held_role is not None:
                reasons[EXCLUDED_DOUBLE_BOOKED] += 1
        excluded[(day, shift_type, role)] = {
            EXCLUDED_UNAVAILABLE: reasons[EXCLUDED_UNAVAILABLE],
            EXCLUDED_WEEKLY_CAP: reasons[EXCLUDED_WEEKLY_CAP],
            EXCLUDED_DOUBLE_BOOKED: reasons[EXCLUDED_DOUBLE_BOOKED],
        }
    return excluded


def get_schedule_gaps(db: Session, week_start: date) -> list[Gap]:
    """Recompute gaps from the persisted shifts, including any substitutions since generation."""
    schedule = get_schedule(db, week_start)
    context = load_schedule_context(db, week_start)
    store = ConstraintStore(context.staffing_limits, context.start_time_targets)
    matrix = resolve_availability(
        week_start, context.employees, context.availability_entries, context.time_off_periods
    )
    shifts = list_schedule_shifts(db, schedule.id)
    excluded = _persisted_exclusions(store, sorted(context.employees, key=lambda e: e.id), matrix, shifts)
    return find_gaps(store, _as_assignments(shifts), excluded)


def _percentage(part: int, whole: int) -> float:
    if whole <= 0:
        return 100.0
    return round(100.0 * part / whole, 1)


def get_coverage_stats(db: Session, week_start: date) -> dict:
    """
    Assignment coverage for a persisted week.

    Returns:
        {
            'week_start': date,
            'slots': [{day_of_week, shift_type, role, required, assigned, available, percentage}],
            'total_required': int,
            'total_assigned': int,
            'total_available': int,
            'coverage_percentage': float,
            'availability_percentage': float,
        }
    """
    schedule = get_schedule(db, week_start)
    context = load_schedule_context(db, week_start)
    store = ConstraintStore(context.staffing_limits, context.start_time_targets)
    matrix = resolve_availability(
        week_start, context.employees, context.availability_entries, context.time_off_periods
    )
    employees = {e.id: e for e in context.employees}
    assigned = Counter((s.day_of_week, s.shift_type, s.role) for s in list_schedule_shifts(db, schedule.id))

    slots = []
    total_required = total_assigned = total_available = 0
    for day, shift_type, role in store.demanded_slots():
        required, _ = store.limit_for(day, shift_type, role)
        count = assigned.get((day, shift_type, role), 0)
        available = sum(
            1 for emp_id, days in matrix.items()
            if days[day][shift_type] and employees[emp_id].can_work_role(role)
        )
        slots.append({
            "day_of_week": day,
            "shift_type": shift_type,
            "role": role,
            "required": required,
            "assigned": count,
            "available": available,
            "percentage": _percentage(min(count, required), required),
        })
        total_required += required
        # assignments above the minimum do not count towards coverage
        total_assigned += min(count, required)
        total_available += min(available, required)

    return {
        "week_start": week_start,
        "slots": slots,
        "total_required": total_required,
        "total_assigned": total_assigned,
        "total_available": total_available,
        "coverage_percentage": _percentage(total_assigned, total_required),
        "availability_percentage": _percentage(total_available, total_required),
    }


def get_missing_availability(db: Session, week_start: date) -> dict:
    """
    Schedulable employees who have not marked a single shift available for the week.

    The resolver treats all of them as unavailable everywhere. Employees on
    approved time off for the whole week are not reported as missing.
    """
    context = load_schedule_context(db, week_start)
    employees = [e for e in context.employees if e.is_schedulable]
    submitted = {a.employee_id for a in context.availability_entries if a.is_available}

    missing = []
    for emp in employees:
        if emp.id in submitted:
            continue
        week_off = all(
            is_on_time_off(emp.id, week_start + timedelta(days=day), context.time_off_periods) for day in DAYS
        )
        if not week_off:
            missing.append({"employee_id": emp.id, "name": emp.name, "primary_role": emp.primary_role})

    with_availability = sum(1 for e in employees if e.id in submitted)
    return {
        "week_start": week_start,
        "missing": missing,
        "total_employees": len(employees),
        "employees_with_availability": with_availability,
        "completion_percentage": round(100.0 * with_availability / len(employees), 1) if employees else 0.0,
    }


def get_employee_coverage(db: Session, week_start: date) -> list[dict]:
    """
    Per employee: shifts marked available (after time off) vs shifts held in the persisted week.
    Sorted by utilization, highest first, then employee id.
    """
    schedule = get_schedule(db, week_start)
    context = load_schedule_context(db, week_start)
    matrix = resolve_availability(
        week_start, context.employees, context.availability_entries, context.time_off_periods
    )
    assigned = Counter(s.employee_id for s in list_schedule_shifts(db, schedule.id))

    rows = []
    for emp in context.employees:
        if emp.id not in matrix:
            continue
        available = sum(1 for day in DAYS for is_free in matrix[emp.id][day].values() if is_free)
        count = assigned.get(emp.id, 0)
        rows.append({
            "employee_id": emp.id,
            "name": emp.name,
            "primary_role": emp.primary_role,
            "available": available,
            "assigned": count,
            "utilization": round(100.0 * count / available, 1) if available else 0.0,
        })

    rows.sort(key=lambda r: (-r["utilization"], r["employee_id"]))
    return rows
