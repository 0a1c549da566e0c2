"""
Schedule persistence.
Replaces a week's schedule wholesale inside one transaction.
"""

import logging
import threading
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shiftroster.core.errors import Conflict
from shiftroster.db.models.schedules import Schedules
from shiftroster.db.models.shifts import Shifts, ShiftStatus
from shiftroster.db.models.substitution_requests import SubstitutionRequests
from shiftroster.db.models.worked_hours import WorkedHours

from .availability import ensure_monday
from .types import ShiftAssignment

logger = logging.getLogger(__name__)

# fixed pool of locks; a week always maps to the same one, so regeneration of
# that week is serialized inside this process
WEEK_LOCK_STRIPES = 64
_week_locks: tuple[threading.Lock, ...] = tuple(threading.Lock() for _ in range(WEEK_LOCK_STRIPES))


def _lock_for(week_start: date) -> threading.Lock:
    return _week_locks[week_start.toordinal() % WEEK_LOCK_STRIPES]


def _replace_week(
    db: Session,
    week_start: date,
    assignments: list[ShiftAssignment],
    generated_by: Optional[int],
) -> int:
    schedule = db.execute(
        select(Schedules).where(Schedules.week_start == week_start).with_for_update()
    ).scalar_one_or_none()

    if schedule is None:
        schedule = Schedules(week_start=week_start, generated_by_employee_id=generated_by)
        db.add(schedule)
        db.flush()  # a concurrent first insert fails here on the week_start unique constraint
    else:
        shift_ids = db.execute(
            select(Shifts.id).where(Shifts.schedule_id == schedule.id)
        ).scalars().all()
        if shift_ids:
            db.execute(
                delete(WorkedHours).where(WorkedHours.shift_id.in_(shift_ids)),
                execution_options={"synchronize_session": "fetch"},
            )
            db.execute(
                delete(SubstitutionRequests).where(SubstitutionRequests.shift_id.in_(shift_ids)),
                execution_options={"synchronize_session": "fetch"},
            )
            db.execute(
                delete(Shifts).where(Shifts.schedule_id == schedule.id),
                execution_options={"synchronize_session": "fetch"},
            )
        schedule.generated_at = datetime.now(timezone.utc)
        schedule.generated_by_employee_id = generated_by

    db.add_all([
        Shifts(
            schedule_id=schedule.id,
            day_of_week=a.day_of_week,
            shift_type=a.shift_type,
            role=a.role,
            employee_id=a.employee_id,
            start_time=a.start_time,
            end_time=a.end_time,
            status=ShiftStatus.ASSIGNED,
        )
        for a in assignments
    ])
    db.flush()
    db.expire(schedule, ["shifts"])
    return schedule.id


def save_schedule(
    db: Session,
    week_start: date,
    assignments: list[ShiftAssignment],
    generated_by: Optional[int] = None,
) -> int:
    """
    Atomically replace the schedule for a week.

    Deletes the week's shifts along with their substitution requests and
    worked-hours rows, then inserts the new assignments. An existing
    Schedule row is reused so its id stays stable.

    Returns:
        the schedule id

    Raises:
        InvalidWeekStart: if week_start is not a Monday
        Conflict: if a concurrent writer keeps winning the unique constraint
    """
    ensure_monday(week_start)

    with _lock_for(week_start):
        for attempt in (1, 2):
            try:
                schedule_id = _replace_week(db, week_start, assignments, generated_by)
                db.commit()
                return schedule_id
            except IntegrityError as e:
                db.rollback()
                if attempt == 2:
                    raise Conflict(f"Could not save schedule for week {week_start}: {e.orig}")
                logger.warning(f"Schedule insert for week {week_start} collided, retrying against existing row")
            except SQLAlchemyError:
                db.rollback()
                raise
