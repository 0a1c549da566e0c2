"""
Data loader for scheduling service.
Fetches all relevant data from the database and converts to internal types.
"""

from datetime import date, timedelta
from sqlalchemy import select, and_
from sqlalchemy.orm import Session

from shiftroster.db.models.employees import Employees
from shiftroster.db.models.availability_entries import AvailabilityEntries
from shiftroster.db.models.time_off_periods import TimeOffPeriods, TimeOffStatus
from shiftroster.db.models.staffing_limits import StaffingLimits
from shiftroster.db.models.start_time_targets import StartTimeTargets

from .availability import ensure_monday
from .types import (
    Employee,
    AvailabilityEntry,
    TimeOffPeriod,
    StaffingLimit,
    StartTimeTarget,
    ScheduleContext,
)


def load_employees(db: Session) -> list[Employee]:
    """Load active employees ordered by id."""
    stmt = select(Employees).where(Employees.is_active == True).order_by(Employees.id)
    rows = db.execute(stmt).scalars().all()

    return [
        Employee(
            id=e.id,
            name=e.name,
            primary_role=e.primary_role,
            secondary_role=e.secondary_role,
            is_active=e.is_active,
            max_shifts_per_week=e.max_shifts_per_week,
        )
        for e in rows
    ]


def load_availability_entries(db: Session, employee_ids: list[int], week_start: date) -> list[AvailabilityEntry]:
    """Load availability entries for a set of employees in one week."""
    if not employee_ids:
        return []

    stmt = select(AvailabilityEntries).where(
        and_(
            AvailabilityEntries.employee_id.in_(employee_ids),
            AvailabilityEntries.week_start == week_start,
        )
    )
    rows = db.execute(stmt).scalars().all()

    return [
        AvailabilityEntry(
            employee_id=r.employee_id,
            day_of_week=r.day_of_week,
            shift_type=r.shift_type,
            is_available=r.is_available,
        )
        for r in rows
    ]


def load_time_off_periods(db: Session, employee_ids: list[int], week_start: date) -> list[TimeOffPeriod]:
    """Load approved time off that overlaps the schedule week (inclusive dates)."""
    if not employee_ids:
        return []

    week_end = week_start + timedelta(days=6)
    stmt = select(TimeOffPeriods).where(
        and_(
            TimeOffPeriods.employee_id.in_(employee_ids),
            TimeOffPeriods.status == TimeOffStatus.APPROVED,
            TimeOffPeriods.start_date <= week_end,
            TimeOffPeriods.end_date >= week_start,
        )
    )
    rows = db.execute(stmt).scalars().all()

    return [
        TimeOffPeriod(
            employee_id=r.employee_id,
            start_date=r.start_date,
            end_date=r.end_date,
        )
        for r in rows
    ]


def load_staffing_limits(db: Session) -> list[StaffingLimit]:
    rows = db.execute(select(StaffingLimits)).scalars().all()

    return [
        StaffingLimit(
            day_of_week=r.day_of_week,
            shift_type=r.shift_type,
            role=r.role,
            min_staff=r.min_staff,
            max_staff=r.max_staff,
        )
        for r in rows
    ]


def load_start_time_targets(db: Session) -> list[StartTimeTarget]:
    """Load active start-time targets."""
    stmt = select(StartTimeTargets).where(StartTimeTargets.is_active == True)
    rows = db.execute(stmt).scalars().all()

    return [
        StartTimeTarget(
            shift_type=r.shift_type,
            role=r.role,
            start_time=r.start_time,
            target_count=r.target_count,
            priority=r.priority,
        )
        for r in rows
    ]


def load_schedule_context(db: Session, week_start: date) -> ScheduleContext:
    """
    Load all data needed to generate a schedule for a week.

    returns ScheduleContext for the given week
    """
    ensure_monday(week_start)

    employees = load_employees(db)
    employee_ids = [e.id for e in employees]

    return ScheduleContext(
        week_start=week_start,
        employees=employees,
        availability_entries=load_availability_entries(db, employee_ids, week_start),
        time_off_periods=load_time_off_periods(db, employee_ids, week_start),
        staffing_limits=load_staffing_limits(db),
        start_time_targets=load_start_time_targets(db),
    )
