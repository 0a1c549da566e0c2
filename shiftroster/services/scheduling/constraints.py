"""
Constraint lookups and schedule validation.
Handles staffing limits, start-time targets and gap detection.
"""

from collections import Counter
from typing import Iterable, Optional

from shiftroster.db.models.employees import Role
from shiftroster.db.models.shifts import ShiftType

from .types import (
    DAYS,
    Gap,
    ROLE_ORDER,
    SHIFT_ORDER,
    ShiftAssignment,
    StaffingLimit,
    StartTimeTarget,
)

SlotKey = tuple[int, ShiftType, Role]


class ConstraintStore:
    """
    Read-only view over staffing limits and start-time targets.

    A slot without a limit row has no constraint: min 0, max unbounded.
    """

    def __init__(self, limits: Iterable[StaffingLimit], targets: Iterable[StartTimeTarget] = ()):
        self._limits: dict[SlotKey, StaffingLimit] = {
            (l.day_of_week, l.shift_type, l.role): l for l in limits
        }
        self._targets: dict[tuple[ShiftType, Role], list[StartTimeTarget]] = {}
        for t in targets:
            self._targets.setdefault((t.shift_type, t.role), []).append(t)

    def has_limit(self, day_of_week: int, shift_type: ShiftType, role: Role) -> bool:
        return (day_of_week, shift_type, role) in self._limits

    def limit_for(self, day_of_week: int, shift_type: ShiftType, role: Role) -> tuple[int, Optional[int]]:
        """Return (min_staff, max_staff); max None means unbounded."""
        limit = self._limits.get((day_of_week, shift_type, role))
        if limit is None:
            return 0, None
        return limit.min_staff, limit.max_staff

    def targets_for(self, shift_type: ShiftType, role: Role) -> list[StartTimeTarget]:
        return list(self._targets.get((shift_type, role), []))

    def demanded_slots(self) -> list[SlotKey]:
        """Slots that carry a limit row, in canonical processing order."""
        return [
            (day, shift_type, role)
            for day in DAYS
            for shift_type in SHIFT_ORDER
            for role in ROLE_ORDER
            if (day, shift_type, role) in self._limits
        ]


def count_assigned(assignments: Iterable[ShiftAssignment]) -> Counter:
    """Headcount per (day, shift_type, role)."""
    return Counter((a.day_of_week, a.shift_type, a.role) for a in assignments)


def find_gaps(
    store: ConstraintStore,
    assignments: list[ShiftAssignment],
    excluded: Optional[dict[SlotKey, dict[str, int]]] = None,
) -> list[Gap]:
    """
    Compare assigned headcount against each demanded slot's minimum.

    Returns one Gap per slot where filled < min_staff, in canonical order.
    """
    filled = count_assigned(assignments)
    excluded = excluded or {}

    gaps = []
    for slot in store.demanded_slots():
        min_staff, _ = store.limit_for(*slot)
        count = filled.get(slot, 0)
        if count < min_staff:
            day, shift_type, role = slot
            gaps.append(Gap(
                day_of_week=day,
                shift_type=shift_type,
                role=role,
                required=min_staff,
                filled=count,
                excluded=dict(excluded.get(slot, {})),
            ))
    return gaps


def find_double_bookings(assignments: list[ShiftAssignment]) -> list[tuple[int, int, ShiftType]]:
    """(employee_id, day, shift_type) keys held more than once."""
    seen = Counter((a.employee_id, a.day_of_week, a.shift_type) for a in assignments)
    return sorted(
        (key for key, n in seen.items() if n > 1),
        key=lambda k: (k[0], k[1], SHIFT_ORDER.index(k[2])),
    )
