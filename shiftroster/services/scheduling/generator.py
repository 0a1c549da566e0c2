"""
Schedule generator - main orchestration layer.

This module provides the high-level API for generating schedules,
combining data loading, solving and persistence into a single flow.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from shiftroster.services.audit import BaseAuditSink, record_safely

from .data_loader import load_schedule_context
from .persistence import save_schedule
from .solver import solve_schedule
from .types import ScheduleContext, ScheduleResult

logger = logging.getLogger(__name__)


@dataclass
class GenerationOutcome:
    schedule_id: int
    week_start: date
    result: ScheduleResult

    @property
    def shifts_generated(self) -> int:
        return len(self.result.assignments)


def generate_schedule(
    db: Session,
    week_start: date,
    generated_by: Optional[int] = None,
    audit: Optional[BaseAuditSink] = None,
    ranking: Optional[Sequence[str]] = None,
) -> GenerationOutcome:
    """
    Generate and persist the schedule for a week.

    main entry point for schedule generation. This function:
    1. Loads all relevant data from the database
    2. Runs the greedy solver
    3. Replaces the week's persisted schedule with the result
    4. Records an audit entry

    Args:
        db: Database session
        week_start: Monday of the target week
        generated_by: employee id of the admin who triggered the run
        audit: optional audit sink, failures there never fail generation
        ranking: override for settings.SCHEDULER_RANKING

    Returns:
        GenerationOutcome with the schedule id and the solver result

    Raises:
        InvalidWeekStart: If week_start is not a Monday

    Example:
        from datetime import date
        from shiftroster.services.scheduling import generate_schedule

        outcome = generate_schedule(db, week_start=date(2025, 1, 20))
        for gap in outcome.result.gaps:
            print(gap.to_dict())
    """
    context = load_schedule_context(db, week_start)
    result = solve_schedule(context, ranking)
    schedule_id = save_schedule(db, week_start, result.assignments, generated_by)

    logger.info(
        f"Generated schedule {schedule_id} for week {week_start}: "
        f"{len(result.assignments)} shifts, {len(result.gaps)} gaps"
    )
    record_safely(
        audit,
        action="SCHEDULE_GENERATED",
        actor_id=generated_by,
        description=f"Generated schedule for week {week_start}",
        metadata={
            "schedule_id": schedule_id,
            "week_start": week_start.isoformat(),
            "shifts_generated": len(result.assignments),
            "gaps": len(result.gaps),
        },
    )

    return GenerationOutcome(schedule_id=schedule_id, week_start=week_start, result=result)


def generate_schedule_from_context(
    context: ScheduleContext,
    ranking: Optional[Sequence[str]] = None,
) -> ScheduleResult:
    """
    Solve a pre-loaded context without touching the database.

    Useful for testing or when you want to manipulate the context
    before solving.
    """
    return solve_schedule(context, ranking)
