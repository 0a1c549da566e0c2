"""
Scheduling service package.

Usage:
    from datetime import date
    from shiftroster.services.scheduling import generate_schedule

    # Simple usage - load, solve and persist in one call
    outcome = generate_schedule(db, week_start=date(2025, 1, 20))

    # Or load context separately for inspection/testing
    from shiftroster.services.scheduling import load_schedule_context, generate_schedule_from_context

    context = load_schedule_context(db, week_start=date(2025, 1, 20))
    result = generate_schedule_from_context(context)
"""

from .types import (
    Employee,
    AvailabilityEntry,
    TimeOffPeriod,
    StaffingLimit,
    StartTimeTarget,
    ShiftAssignment,
    Gap,
    ScheduleContext,
    ScheduleResult,
    DEFAULT_SHIFT_WINDOWS,
)
from .availability import normalize_week_start, resolve_availability
from .constraints import ConstraintStore, find_gaps
from .data_loader import load_schedule_context
from .generator import GenerationOutcome, generate_schedule, generate_schedule_from_context
from .persistence import save_schedule
from .solver import solve_schedule
from .coverage import (
    get_coverage_stats,
    get_employee_coverage,
    get_missing_availability,
    get_schedule,
    get_schedule_gaps,
    list_schedule_shifts,
)

__all__ = [
    # Types
    "Employee",
    "AvailabilityEntry",
    "TimeOffPeriod",
    "StaffingLimit",
    "StartTimeTarget",
    "ShiftAssignment",
    "Gap",
    "ScheduleContext",
    "ScheduleResult",
    "GenerationOutcome",
    "DEFAULT_SHIFT_WINDOWS",
    # Main entry points
    "generate_schedule",
    "generate_schedule_from_context",
    # Lower-level functions
    "normalize_week_start",
    "resolve_availability",
    "ConstraintStore",
    "find_gaps",
    "load_schedule_context",
    "save_schedule",
    "solve_schedule",
    # Queries
    "get_schedule",
    "get_schedule_gaps",
    "get_coverage_stats",
    "get_employee_coverage",
    "get_missing_availability",
    "list_schedule_shifts",
]
