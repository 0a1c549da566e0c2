"""
Internal data types for scheduling logic.
decoupled from SQLAlchemy models for cleaner logic.
"""

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from typing import Optional

from shiftroster.db.models.employees import Role, SCHEDULABLE_ROLES
from shiftroster.db.models.shifts import ShiftType


# Default service windows (start, end) used when a role has no start-time targets
DEFAULT_SHIFT_WINDOWS: dict[ShiftType, tuple[time, time]] = {
    ShiftType.LUNCH: (time(11, 30), time(14, 0)),
    ShiftType.DINNER: (time(18, 0), time(22, 0)),
}

SHIFT_ORDER: tuple[ShiftType, ...] = tuple(ShiftType)
ROLE_ORDER: tuple[Role, ...] = SCHEDULABLE_ROLES
DAYS: tuple[int, ...] = tuple(range(7))

# exclusion reasons counted per slot
EXCLUDED_UNAVAILABLE = "unavailable"
EXCLUDED_WEEKLY_CAP = "weekly_cap"
EXCLUDED_DOUBLE_BOOKED = "double_booked"


@dataclass
class Employee:
    id: int
    name: str
    primary_role: Role
    secondary_role: Optional[Role] = None
    is_active: bool = True
    max_shifts_per_week: Optional[int] = None  # None = no cap

    @property
    def roles(self) -> set[Role]:
        return {r for r in (self.primary_role, self.secondary_role) if r is not None}

    @property
    def is_schedulable(self) -> bool:
        """Active and holding at least one role other than ADMIN."""
        return self.is_active and any(r != Role.ADMIN for r in self.roles)

    def can_work_role(self, role: Role) -> bool:
        return role in self.roles


@dataclass
class AvailabilityEntry:
    employee_id: int
    day_of_week: int  # 0-6
    shift_type: ShiftType
    is_available: bool


@dataclass
class TimeOffPeriod:
    """An approved absence or leave; both dates inclusive."""
    employee_id: int
    start_date: date
    end_date: date

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass
class StaffingLimit:
    day_of_week: int
    shift_type: ShiftType
    role: Role
    min_staff: int = 0
    max_staff: Optional[int] = None  # None = unbounded


@dataclass
class StartTimeTarget:
    shift_type: ShiftType
    role: Role
    start_time: time
    target_count: int
    priority: int = 0


@dataclass
class ShiftAssignment:
    """A single engine decision: one employee in one slot."""
    employee_id: int
    day_of_week: int
    shift_type: ShiftType
    role: Role
    start_time: time
    end_time: time

    def shift_date(self, week_start: date) -> date:
        return week_start + timedelta(days=self.day_of_week)


@dataclass
class Gap:
    """A slot left below its minimum headcount."""
    day_of_week: int
    shift_type: ShiftType
    role: Role
    required: int
    filled: int
    excluded: dict[str, int] = field(default_factory=dict)

    @property
    def deficit(self) -> int:
        return self.required - self.filled

    def to_dict(self) -> dict:
        return {
            "day_of_week": self.day_of_week,
            "shift_type": self.shift_type.value,
            "role": self.role.value,
            "required": self.required,
            "filled": self.filled,
            "deficit": self.deficit,
            "excluded": dict(self.excluded),
        }


@dataclass
class ScheduleContext:
    """All data needed to generate a schedule for one week."""
    week_start: date  # Monday
    employees: list[Employee]
    availability_entries: list[AvailabilityEntry]
    time_off_periods: list[TimeOffPeriod]
    staffing_limits: list[StaffingLimit]
    start_time_targets: list[StartTimeTarget] = field(default_factory=list)

    @property
    def week_end(self) -> date:
        """Sunday of the schedule week."""
        return self.week_start + timedelta(days=6)


@dataclass
class ScheduleResult:
    """Output of the scheduling algorithm."""
    assignments: list[ShiftAssignment]
    gaps: list[Gap] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.gaps
