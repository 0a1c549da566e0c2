"""
Domain error taxonomy.

Services raise these; the HTTP layer maps each class to a status code in
shiftroster.api.errors. Insufficient staffing is never an error: the
engine reports it as gaps.
"""


class RosterError(Exception):
    """Base class for all domain errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(RosterError):
    """Malformed week, date, role or payload value."""
    status_code = 400


class InvalidWeekStart(InvalidInput):
    """week_start is not the Monday of its week."""


class InvalidState(RosterError):
    """Transition not permitted from the entity's current state."""
    status_code = 409


class Forbidden(RosterError):
    """Caller lacks the relationship or role the operation requires."""
    status_code = 403


class NotFound(RosterError):
    status_code = 404


class DeadlinePassed(RosterError):
    status_code = 400


class Conflict(RosterError):
    """Competing mutation or scheduling clash detected."""
    status_code = 409
