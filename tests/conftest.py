import pytest
from datetime import date, time
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shiftroster.db.database import Base
import shiftroster.db.models  # noqa: F401  registers tables
from shiftroster.db.models import (
    AvailabilityEntries,
    Employees,
    Role,
    ShiftType,
    StaffingLimits,
    StartTimeTargets,
    TimeOffKind,
    TimeOffPeriods,
    TimeOffStatus,
)
from shiftroster.services.audit import BaseAuditSink
from shiftroster.services.notifications import BaseNotifier
from shiftroster.services.scheduling.types import (
    AvailabilityEntry,
    Employee,
    ScheduleContext,
    StaffingLimit,
)


def get_test_monday() -> date:
    # returns a fixed Monday for deterministic tests
    return date(2025, 1, 20)


def available_everywhere(employee_ids: list[int], is_available: bool = True) -> list[AvailabilityEntry]:
    """Availability entries for every day and shift of the week."""
    return [
        AvailabilityEntry(employee_id=emp_id, day_of_week=day, shift_type=shift_type, is_available=is_available)
        for emp_id in employee_ids
        for day in range(7)
        for shift_type in ShiftType
    ]


def make_context(employees, limits, entries=None, time_off=None, targets=None, week_start=None) -> ScheduleContext:
    if entries is None:
        entries = available_everywhere([e.id for e in employees])
    return ScheduleContext(
        week_start=week_start or get_test_monday(),
        employees=employees,
        availability_entries=entries,
        time_off_periods=time_off or [],
        staffing_limits=limits,
        start_time_targets=targets or [],
    )


@pytest.fixture
def kitchen_staff() -> list[Employee]:
    # two cooks, one pizza maker who also cooks, one floor-only
    return [
        Employee(id=1, name="Luca", primary_role=Role.COOK),
        Employee(id=2, name="Marco", primary_role=Role.PIZZA_MAKER, secondary_role=Role.COOK),
        Employee(id=3, name="Sofia", primary_role=Role.COOK),
        Employee(id=4, name="Anna", primary_role=Role.FLOOR),
    ]


@pytest.fixture
def monday_lunch_cook_limit() -> StaffingLimit:
    return StaffingLimit(day_of_week=0, shift_type=ShiftType.LUNCH, role=Role.COOK, min_staff=2, max_staff=3)


class RecordingNotifier(BaseNotifier):
    def __init__(self):
        self.sent: list[tuple[str, list[int], str]] = []

    def notify(self, event, recipient_ids, message):
        self.sent.append((event, recipient_ids, message))

    def events(self) -> list[str]:
        return [event for event, _, _ in self.sent]


class FailingNotifier(BaseNotifier):
    def notify(self, event, recipient_ids, message):
        raise RuntimeError("gateway down")


class RecordingAuditSink(BaseAuditSink):
    def __init__(self):
        self.entries: list[dict] = []

    def record(self, action, actor_id, description, metadata=None):
        self.entries.append({"action": action, "actor_id": actor_id, "description": description, "metadata": metadata})


class FailingAuditSink(BaseAuditSink):
    def record(self, action, actor_id, description, metadata=None):
        raise RuntimeError("audit store unavailable")


@pytest.fixture
def db_session():
    # in-memory SQLite shared across threads so TestClient requests see the same data
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def add_employee(
    db,
    name: str,
    primary_role: Role,
    secondary_role: Optional[Role] = None,
    max_shifts_per_week: Optional[int] = None,
    is_active: bool = True,
    user_id: Optional[int] = None,
) -> Employees:
    emp = Employees(
        name=name,
        primary_role=primary_role,
        secondary_role=secondary_role,
        max_shifts_per_week=max_shifts_per_week,
        is_active=is_active,
        user_id=user_id,
    )
    db.add(emp)
    db.commit()
    return emp


def add_availability(db, employee_id: int, week_start: date, day: int, shift_type: ShiftType, is_available: bool = True):
    db.add(AvailabilityEntries(
        employee_id=employee_id,
        week_start=week_start,
        day_of_week=day,
        shift_type=shift_type,
        is_available=is_available,
    ))
    db.commit()


def add_limit(db, day: int, shift_type: ShiftType, role: Role, min_staff: int, max_staff: Optional[int] = None):
    db.add(StaffingLimits(day_of_week=day, shift_type=shift_type, role=role, min_staff=min_staff, max_staff=max_staff))
    db.commit()


def add_target(db, shift_type: ShiftType, role: Role, start: time, target_count: int, priority: int = 0):
    db.add(StartTimeTargets(shift_type=shift_type, role=role, start_time=start, target_count=target_count, priority=priority))
    db.commit()


def add_time_off(db, employee_id: int, start: date, end: date, status: TimeOffStatus = TimeOffStatus.APPROVED,
                 kind: TimeOffKind = TimeOffKind.ABSENCE):
    db.add(TimeOffPeriods(employee_id=employee_id, kind=kind, start_date=start, end_date=end, status=status))
    db.commit()
