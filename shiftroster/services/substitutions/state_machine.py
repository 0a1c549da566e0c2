"""
Substitution request lifecycle.

    PENDING --apply--> APPLIED --approve--> APPROVED
       |                  |
       +--reject/cancel---+--> REJECTED / CANCELLED

APPROVED, REJECTED and CANCELLED are terminal. Every precondition is checked
before anything is written; approval runs in one transaction under a row
lock on the shift so only one request can ever win it.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import select, delete, and_
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from shiftroster.core.config import settings
from shiftroster.core.errors import Conflict, DeadlinePassed, Forbidden, InvalidState, NotFound, RosterError
from shiftroster.db.models.employees import Employees
from shiftroster.db.models.shifts import Shifts, ShiftStatus
from shiftroster.db.models.substitution_requests import (
    LIVE_STATUSES,
    SubstitutionRequests,
    SubstitutionStatus,
)
from shiftroster.db.models.time_off_periods import TimeOffPeriods, TimeOffStatus
from shiftroster.db.models.worked_hours import WorkedHours
from shiftroster.services.audit import BaseAuditSink, record_safely
from shiftroster.services.notifications import BaseNotifier, notify_safely

logger = logging.getLogger(__name__)

SIBLING_REJECTION_NOTE = "Another substitution was approved"


@dataclass(frozen=True)
class Actor:
    """The employee performing a transition."""
    employee_id: int
    is_admin: bool = False


def compute_deadline(shift_date: date, start_time: time, hours: Optional[int] = None) -> datetime:
    """Latest moment a substitution can be requested, applied for or approved."""
    if hours is None:
        hours = settings.SUBSTITUTION_DEADLINE_HOURS
    return datetime.combine(shift_date, start_time) - timedelta(hours=hours)


def get_shift_date(shift: Shifts) -> date:
    return shift.schedule.week_start + timedelta(days=shift.day_of_week)


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()


def _get_request(db: Session, request_id: int) -> SubstitutionRequests:
    req = db.get(SubstitutionRequests, request_id)
    if req is None:
        raise NotFound(f"Substitution request {request_id} not found")
    return req


def _get_shift(db: Session, shift_id: int) -> Shifts:
    shift = db.get(Shifts, shift_id)
    if shift is None:
        raise NotFound(f"Shift {shift_id} not found")
    return shift


def _get_employee(db: Session, employee_id: int) -> Employees:
    emp = db.get(Employees, employee_id)
    if emp is None:
        raise NotFound(f"Employee {employee_id} not found")
    return emp


def _check_deadline(req: SubstitutionRequests, now: datetime):
    if now >= req.deadline:
        raise DeadlinePassed(f"Substitution deadline passed at {req.deadline.isoformat()}")


def _holds_same_service(db: Session, employee_id: int, shift: Shifts) -> bool:
    """True if the employee already works the shift's (day, shift_type) in that schedule."""
    stmt = select(Shifts.id).where(
        and_(
            Shifts.schedule_id == shift.schedule_id,
            Shifts.day_of_week == shift.day_of_week,
            Shifts.shift_type == shift.shift_type,
            Shifts.employee_id == employee_id,
        )
    )
    return db.execute(stmt).first() is not None


def _has_time_off_on(db: Session, employee_id: int, day: date) -> bool:
    stmt = select(TimeOffPeriods.id).where(
        and_(
            TimeOffPeriods.employee_id == employee_id,
            TimeOffPeriods.status == TimeOffStatus.APPROVED,
            TimeOffPeriods.start_date <= day,
            TimeOffPeriods.end_date >= day,
        )
    )
    return db.execute(stmt).first() is not None


def _lock_shift(db: Session, shift_id: int) -> Shifts:
    """SELECT ... FOR UPDATE on the shift, overwriting whatever the session already holds."""
    return db.execute(
        select(Shifts)
        .where(Shifts.id == shift_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one()


def _live_request_ids(db: Session, shift_id: int) -> list[int]:
    stmt = select(SubstitutionRequests.id).where(
        and_(
            SubstitutionRequests.shift_id == shift_id,
            SubstitutionRequests.status.in_(LIVE_STATUSES),
        )
    )
    return list(db.execute(stmt).scalars().all())


def _commit(db: Session, action: str):
    try:
        db.commit()
    except (IntegrityError, OperationalError) as e:
        db.rollback()
        raise Conflict(f"Concurrent update while trying to {action}: {e.orig}")


def request_substitution(
    db: Session,
    actor: Actor,
    shift_id: int,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
    notifier: Optional[BaseNotifier] = None,
    audit: Optional[BaseAuditSink] = None,
) -> SubstitutionRequests:
    """
    Open a PENDING request for a shift the actor currently holds.
    A shift has at most one live (PENDING or APPLIED) request at a time.

    Raises:
        NotFound: unknown shift
        Forbidden: actor does not hold the shift
        DeadlinePassed: the shift starts within SUBSTITUTION_DEADLINE_HOURS
        Conflict: the shift already has a live request
    """
    now = _now(now)
    shift = _get_shift(db, shift_id)

    if shift.employee_id != actor.employee_id:
        raise Forbidden("Only the employee holding the shift can request a substitution")

    deadline = compute_deadline(get_shift_date(shift), shift.start_time)
    if now >= deadline:
        raise DeadlinePassed(f"Substitution deadline passed at {deadline.isoformat()}")

    try:
        # the shift lock serializes concurrent requests for the same shift
        shift = _lock_shift(db, shift_id)
        if shift.employee_id != actor.employee_id:
            raise Forbidden("Only the employee holding the shift can request a substitution")
        live = _live_request_ids(db, shift.id)
        if live:
            raise Conflict(f"Shift {shift.id} already has an open substitution request ({live[0]})")

        req = SubstitutionRequests(
            shift_id=shift.id,
            requester_id=actor.employee_id,
            status=SubstitutionStatus.PENDING,
            deadline=deadline,
            request_note=note,
        )
        db.add(req)
        db.commit()
    except RosterError:
        db.rollback()
        raise
    except (IntegrityError, OperationalError) as e:
        db.rollback()
        raise Conflict(f"Concurrent update while trying to request a substitution: {e.orig}")
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(f"Substitution {req.id} requested by employee {actor.employee_id} for shift {shift.id}")

    colleagues = db.execute(
        select(Employees.id).where(
            and_(
                Employees.is_active == True,
                Employees.id != actor.employee_id,
                (Employees.primary_role == shift.role) | (Employees.secondary_role == shift.role),
            )
        )
    ).scalars().all()
    notify_safely(
        notifier,
        "SUBSTITUTION_REQUESTED",
        list(colleagues),
        f"{shift.role.value} {shift.shift_type.value} shift on {get_shift_date(shift)} needs a substitute",
    )
    record_safely(
        audit,
        action="SUBSTITUTION_REQUESTED",
        actor_id=actor.employee_id,
        description=f"Requested substitution for shift {shift.id}",
        metadata={"request_id": req.id, "shift_id": shift.id},
    )
    return req


def apply_for_substitution(
    db: Session,
    actor: Actor,
    request_id: int,
    now: Optional[datetime] = None,
    notifier: Optional[BaseNotifier] = None,
    audit: Optional[BaseAuditSink] = None,
) -> SubstitutionRequests:
    """Volunteer as the substitute: PENDING -> APPLIED. The shift itself is unchanged."""
    now = _now(now)
    req = _get_request(db, request_id)
    shift = _get_shift(db, req.shift_id)

    if req.status != SubstitutionStatus.PENDING:
        raise InvalidState(f"Cannot apply to a request in status {req.status.value}")
    if actor.employee_id in (req.requester_id, shift.employee_id):
        raise Forbidden("You cannot apply to substitute your own shift")

    applicant = _get_employee(db, actor.employee_id)
    if not applicant.is_active:
        raise Forbidden("Inactive employees cannot apply for substitutions")
    if shift.role not in applicant.roles:
        raise Forbidden(f"Applicant does not hold the {shift.role.value} role")

    _check_deadline(req, now)

    shift_date = get_shift_date(shift)
    if _holds_same_service(db, applicant.id, shift):
        raise Conflict(f"Applicant already works {shift.shift_type.value} on {shift_date}")
    if _has_time_off_on(db, applicant.id, shift_date):
        raise Conflict(f"Applicant has approved time off on {shift_date}")

    req.substitute_id = applicant.id
    req.status = SubstitutionStatus.APPLIED
    _commit(db, "apply for a substitution")
    logger.info(f"Substitution {req.id}: employee {applicant.id} applied")

    notify_safely(
        notifier,
        "SUBSTITUTION_APPLIED",
        [req.requester_id],
        f"{applicant.name} applied to cover your shift on {shift_date}",
    )
    record_safely(
        audit,
        action="SUBSTITUTION_APPLIED",
        actor_id=actor.employee_id,
        description=f"Applied to substitution {req.id}",
        metadata={"request_id": req.id, "shift_id": shift.id},
    )
    return req


def approve_substitution(
    db: Session,
    actor: Actor,
    request_id: int,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
    notifier: Optional[BaseNotifier] = None,
    audit: Optional[BaseAuditSink] = None,
) -> SubstitutionRequests:
    """
    APPLIED -> APPROVED, in one transaction:
    - the shift moves to the substitute and becomes SUBSTITUTED
    - every other live request for the shift is rejected
    - the original holder's worked hours for the shift are deleted

    Allowed for the shift holder, the requester or an admin.
    """
    now = _now(now)
    req = _get_request(db, request_id)
    shift = _get_shift(db, req.shift_id)

    if not (actor.is_admin or actor.employee_id in (req.requester_id, shift.employee_id)):
        raise Forbidden("Only the shift holder, the requester or an admin can approve")
    if req.status != SubstitutionStatus.APPLIED or req.substitute_id is None:
        raise InvalidState(f"Cannot approve a request in status {req.status.value}")
    _check_deadline(req, now)

    rejected: list[tuple[SubstitutionRequests, Optional[int]]] = []  # (request, former substitute)
    try:
        # lock the shift, then re-read the request under that lock
        shift = _lock_shift(db, req.shift_id)
        db.refresh(req, with_for_update=True)
        if req.status != SubstitutionStatus.APPLIED or req.substitute_id is None:
            raise InvalidState(f"Request {req.id} changed to {req.status.value} before approval")
        if shift.employee_id != req.requester_id:
            raise Conflict(f"Shift {shift.id} no longer belongs to the requester")

        substitute_id = req.substitute_id
        if _holds_same_service(db, substitute_id, shift):
            raise Conflict("Substitute already works this service")

        original_holder = shift.employee_id
        shift.employee_id = substitute_id
        shift.status = ShiftStatus.SUBSTITUTED

        req.status = SubstitutionStatus.APPROVED
        req.approver_id = actor.employee_id
        req.response_note = note

        siblings = db.execute(
            select(SubstitutionRequests).where(
                and_(
                    SubstitutionRequests.shift_id == shift.id,
                    SubstitutionRequests.id != req.id,
                    SubstitutionRequests.status.in_(LIVE_STATUSES),
                )
            )
        ).scalars().all()
        for sibling in siblings:
            rejected.append((sibling, sibling.substitute_id))
            sibling.status = SubstitutionStatus.REJECTED
            sibling.approver_id = actor.employee_id
            sibling.response_note = SIBLING_REJECTION_NOTE
            sibling.substitute_id = None

        db.execute(
            delete(WorkedHours).where(
                and_(WorkedHours.shift_id == shift.id, WorkedHours.employee_id == original_holder)
            ),
            execution_options={"synchronize_session": "fetch"},
        )
        db.commit()
    except RosterError:
        db.rollback()
        raise
    except (IntegrityError, OperationalError) as e:
        db.rollback()
        raise Conflict(f"Concurrent update while approving substitution {request_id}: {e.orig}")
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(
        f"Substitution {req.id} approved by employee {actor.employee_id}: "
        f"shift {shift.id} -> employee {substitute_id}, {len(rejected)} competing requests rejected"
    )

    notify_safely(
        notifier,
        "SUBSTITUTION_APPROVED",
        [req.requester_id, substitute_id],
        f"Substitution for shift {shift.id} on {get_shift_date(shift)} approved",
    )
    for sibling, former_substitute in rejected:
        notify_safely(
            notifier,
            "SUBSTITUTION_REJECTED",
            [sibling.requester_id, former_substitute],
            SIBLING_REJECTION_NOTE,
        )
    record_safely(
        audit,
        action="SUBSTITUTION_APPROVED",
        actor_id=actor.employee_id,
        description=f"Approved substitution {req.id} for shift {shift.id}",
        metadata={
            "request_id": req.id,
            "shift_id": shift.id,
            "from_employee_id": original_holder,
            "to_employee_id": substitute_id,
            "rejected_request_ids": [s.id for s, _ in rejected],
        },
    )
    return req


def reject_substitution(
    db: Session,
    actor: Actor,
    request_id: int,
    note: Optional[str] = None,
    notifier: Optional[BaseNotifier] = None,
    audit: Optional[BaseAuditSink] = None,
) -> SubstitutionRequests:
    """Any live state -> REJECTED. Shift holder or admin only."""
    req = _get_request(db, request_id)
    shift = _get_shift(db, req.shift_id)

    if not (actor.is_admin or actor.employee_id == shift.employee_id):
        raise Forbidden("Only the shift holder or an admin can reject")
    if not req.is_live:
        raise InvalidState(f"Cannot reject a request in status {req.status.value}")

    former_substitute = req.substitute_id
    req.status = SubstitutionStatus.REJECTED
    req.approver_id = actor.employee_id
    req.response_note = note
    req.substitute_id = None
    _commit(db, "reject a substitution")
    logger.info(f"Substitution {req.id} rejected by employee {actor.employee_id}")

    notify_safely(
        notifier,
        "SUBSTITUTION_REJECTED",
        [req.requester_id, former_substitute],
        note or f"Substitution for shift {shift.id} was rejected",
    )
    record_safely(
        audit,
        action="SUBSTITUTION_REJECTED",
        actor_id=actor.employee_id,
        description=f"Rejected substitution {req.id}",
        metadata={"request_id": req.id, "shift_id": shift.id},
    )
    return req


def cancel_substitution(
    db: Session,
    actor: Actor,
    request_id: int,
    notifier: Optional[BaseNotifier] = None,
    audit: Optional[BaseAuditSink] = None,
) -> SubstitutionRequests:
    """PENDING or APPLIED -> CANCELLED. Original requester only."""
    req = _get_request(db, request_id)

    if actor.employee_id != req.requester_id:
        raise Forbidden("Only the requester can cancel a substitution request")
    if not req.is_live:
        raise InvalidState(f"Cannot cancel a request in status {req.status.value}")

    req.status = SubstitutionStatus.CANCELLED
    _commit(db, "cancel a substitution")
    logger.info(f"Substitution {req.id} cancelled by requester {actor.employee_id}")

    if req.substitute_id is not None:
        notify_safely(
            notifier,
            "SUBSTITUTION_CANCELLED",
            [req.substitute_id],
            f"Substitution request {req.id} was cancelled by the requester",
        )
    record_safely(
        audit,
        action="SUBSTITUTION_CANCELLED",
        actor_id=actor.employee_id,
        description=f"Cancelled substitution {req.id}",
        metadata={"request_id": req.id},
    )
    return req


def list_own_requests(db: Session, actor: Actor) -> list[SubstitutionRequests]:
    """Requests the actor opened or volunteered for, newest first."""
    stmt = select(SubstitutionRequests).where(
        (SubstitutionRequests.requester_id == actor.employee_id)
        | (SubstitutionRequests.substitute_id == actor.employee_id)
    ).order_by(SubstitutionRequests.id.desc())
    return list(db.execute(stmt).scalars().all())


def list_open_requests(db: Session, actor: Actor, now: Optional[datetime] = None) -> list[SubstitutionRequests]:
    """
    PENDING requests still before their deadline that the actor could apply to.
    Admins see every open request.
    """
    now = _now(now)
    stmt = (
        select(SubstitutionRequests)
        .join(Shifts, Shifts.id == SubstitutionRequests.shift_id)
        .where(
            and_(
                SubstitutionRequests.status == SubstitutionStatus.PENDING,
                SubstitutionRequests.deadline > now,
            )
        )
        .order_by(SubstitutionRequests.deadline, SubstitutionRequests.id)
    )
    if actor.is_admin:
        return list(db.execute(stmt).scalars().all())

    employee = _get_employee(db, actor.employee_id)
    stmt = stmt.where(
        and_(
            SubstitutionRequests.requester_id != actor.employee_id,
            Shifts.role.in_(list(employee.roles)),
        )
    )
    return list(db.execute(stmt).scalars().all())
