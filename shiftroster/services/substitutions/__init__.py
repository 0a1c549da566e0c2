"""
Substitution service package.

Usage:
    from shiftroster.services.substitutions import Actor, request_substitution, approve_substitution

    req = request_substitution(db, Actor(employee_id=3), shift_id=42)
    ...
    approve_substitution(db, Actor(employee_id=1, is_admin=True), req.id)
"""

from .state_machine import (
    Actor,
    SIBLING_REJECTION_NOTE,
    compute_deadline,
    request_substitution,
    apply_for_substitution,
    approve_substitution,
    reject_substitution,
    cancel_substitution,
    list_own_requests,
    list_open_requests,
)

__all__ = [
    "Actor",
    "SIBLING_REJECTION_NOTE",
    "compute_deadline",
    # Transitions
    "request_substitution",
    "apply_for_substitution",
    "approve_substitution",
    "reject_substitution",
    "cancel_substitution",
    # Queries
    "list_own_requests",
    "list_open_requests",
]
