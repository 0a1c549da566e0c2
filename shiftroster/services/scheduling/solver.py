"""
Schedule solver using a deterministic greedy pass.

Strategy:
1. Resolve the week's availability matrix
2. Walk demanded slots in canonical order (day, LUNCH before DINNER, role order)
3. Rank eligible candidates and assign until max_staff or the pool runs out
4. Pick each assignment's start time from the role's start-time targets
5. Report every slot left below min_staff as a gap
"""

import logging
from collections import Counter, defaultdict
from datetime import time
from typing import Callable, Optional, Sequence

from shiftroster.core.config import settings
from shiftroster.db.models.employees import Role
from shiftroster.db.models.shifts import ShiftType

from .types import (
    DEFAULT_SHIFT_WINDOWS,
    EXCLUDED_DOUBLE_BOOKED,
    EXCLUDED_UNAVAILABLE,
    EXCLUDED_WEEKLY_CAP,
    Employee,
    ScheduleContext,
    ScheduleResult,
    ShiftAssignment,
    StartTimeTarget,
)
from .availability import ensure_monday, is_available, resolve_availability
from .constraints import ConstraintStore, find_gaps

logger = logging.getLogger(__name__)


RankKey = Callable[["ScheduleSolver", Employee, Role], int]

RANKING_CRITERIA: dict[str, RankKey] = {
    # fewer shifts already assigned this week first
    "load": lambda solver, emp, role: solver.employee_load[emp.id],
    # primary-role holders before secondary-role holders
    "role_match": lambda solver, emp, role: 0 if emp.primary_role == role else 1,
}


def pick_start_time(
    shift_type: ShiftType,
    targets: list[StartTimeTarget],
    assigned_at: dict[time, int],
) -> tuple[time, time]:
    """
    Choose a start time for one more assignment in a slot.

    Picks the target with the largest deficit (target_count minus already
    assigned at that start time). Ties go to the lower priority value, then
    the earliest start. Deficits can be negative. With no targets the default
    window is used. The end time is always the default window end.
    """
    default_start, default_end = DEFAULT_SHIFT_WINDOWS[shift_type]
    if not targets:
        return default_start, default_end

    best = min(
        targets,
        key=lambda t: (-(t.target_count - assigned_at.get(t.start_time, 0)), t.priority, t.start_time),
    )
    return best.start_time, default_end


class ScheduleSolver:
    """
    Greedy slot-filling solver for weekly shift assignment.

    Identical contexts always yield identical results: candidates are
    ordered by the configured ranking with employee id as the final tie-break.
    """

    def __init__(self, context: ScheduleContext, ranking: Optional[Sequence[str]] = None):
        ranking = list(ranking if ranking is not None else settings.SCHEDULER_RANKING)
        unknown = [name for name in ranking if name not in RANKING_CRITERIA]
        if unknown:
            raise ValueError(f"Unknown ranking criteria: {unknown}. Valid: {sorted(RANKING_CRITERIA)}")

        self.context = context
        self.ranking = ranking
        self.store = ConstraintStore(context.staffing_limits, context.start_time_targets)
        self.employees = sorted(context.employees, key=lambda e: e.id)

        self.assignments: list[ShiftAssignment] = []
        self.employee_load: dict[int, int] = defaultdict(int)
        self.held: set[tuple[int, int, ShiftType]] = set()  # (emp_id, day, shift_type)
        self.start_counts: Counter = Counter()  # (day, shift_type, role, start_time) -> count
        self.excluded: dict[tuple[int, ShiftType, Role], dict[str, int]] = {}

    def solve(self) -> ScheduleResult:
        """
        Main solving method.

        Returns:
            ScheduleResult with assignments, gaps and warnings
        """
        ensure_monday(self.context.week_start)
        self.matrix = resolve_availability(
            self.context.week_start,
            self.context.employees,
            self.context.availability_entries,
            self.context.time_off_periods,
        )

        for day, shift_type, role in self.store.demanded_slots():
            self._fill_slot(day, shift_type, role)

        return self._build_result()

    def _candidate_pool(self, day: int, shift_type: ShiftType, role: Role) -> list[Employee]:
        """Eligible employees for a slot; tallies why the others were left out."""
        reasons: Counter = Counter()
        pool = []

        for emp in self.employees:
            if not emp.is_schedulable or not emp.can_work_role(role):
                continue
            if not is_available(self.matrix, emp.id, day, shift_type):
                reasons[EXCLUDED_UNAVAILABLE] += 1
            elif emp.max_shifts_per_week is not None and self.employee_load[emp.id] >= emp.max_shifts_per_week:
                reasons[EXCLUDED_WEEKLY_CAP] += 1
            elif (emp.id, day, shift_type) in self.held:
                reasons[EXCLUDED_DOUBLE_BOOKED] += 1
            else:
                pool.append(emp)

        self.excluded[(day, shift_type, role)] = {
            EXCLUDED_UNAVAILABLE: reasons[EXCLUDED_UNAVAILABLE],
            EXCLUDED_WEEKLY_CAP: reasons[EXCLUDED_WEEKLY_CAP],
            EXCLUDED_DOUBLE_BOOKED: reasons[EXCLUDED_DOUBLE_BOOKED],
        }
        return pool

    def _rank(self, pool: list[Employee], role: Role) -> list[Employee]:
        def sort_key(emp: Employee) -> tuple:
            return tuple(RANKING_CRITERIA[name](self, emp, role) for name in self.ranking) + (emp.id,)

        return sorted(pool, key=sort_key)

    def _fill_slot(self, day: int, shift_type: ShiftType, role: Role):
        _, max_staff = self.store.limit_for(day, shift_type, role)
        ranked = self._rank(self._candidate_pool(day, shift_type, role), role)
        if max_staff is not None:
            ranked = ranked[:max_staff]

        targets = self.store.targets_for(shift_type, role)
        for emp in ranked:
            assigned_at = {
                t.start_time: self.start_counts[(day, shift_type, role, t.start_time)]
                for t in targets
            }
            start, end = pick_start_time(shift_type, targets, assigned_at)
            self._add_assignment(ShiftAssignment(
                employee_id=emp.id,
                day_of_week=day,
                shift_type=shift_type,
                role=role,
                start_time=start,
                end_time=end,
            ))

    def _add_assignment(self, assignment: ShiftAssignment):
        """Add an assignment and update tracking."""
        self.assignments.append(assignment)
        self.employee_load[assignment.employee_id] += 1
        self.held.add((assignment.employee_id, assignment.day_of_week, assignment.shift_type))
        key = (assignment.day_of_week, assignment.shift_type, assignment.role, assignment.start_time)
        self.start_counts[key] += 1

    def _build_result(self) -> ScheduleResult:
        gaps = find_gaps(self.store, self.assignments, self.excluded)

        warnings = []
        if gaps:
            missing = sum(g.deficit for g in gaps)
            warnings.append(f"{len(gaps)} slots below minimum staffing ({missing} staff short)")
        if not self.store.demanded_slots():
            warnings.append("No staffing limits configured, nothing to schedule")

        return ScheduleResult(
            assignments=list(self.assignments),
            gaps=gaps,
            warnings=warnings,
        )


def solve_schedule(context: ScheduleContext, ranking: Optional[Sequence[str]] = None) -> ScheduleResult:
    """
    Main entry point for schedule solving.

    Args:
        context: ScheduleContext with all required data
        ranking: candidate ranking criteria, defaults to settings.SCHEDULER_RANKING

    Returns:
        ScheduleResult with assignments and gaps
    """
    solver = ScheduleSolver(context, ranking)
    result = solver.solve()
    logger.debug(
        f"Solved week {context.week_start}: {len(result.assignments)} assignments, {len(result.gaps)} gaps"
    )
    return result
