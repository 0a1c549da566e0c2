from shiftroster.db.database import Base

# Import models
from shiftroster.db.models.users import Users
from shiftroster.db.models.employees import Employees, Role, SCHEDULABLE_ROLES
from shiftroster.db.models.schedules import Schedules
from shiftroster.db.models.shifts import Shifts, ShiftType, ShiftStatus
from shiftroster.db.models.availability_entries import AvailabilityEntries
from shiftroster.db.models.time_off_periods import TimeOffPeriods, TimeOffKind, TimeOffStatus
from shiftroster.db.models.staffing_limits import StaffingLimits
from shiftroster.db.models.start_time_targets import StartTimeTargets
from shiftroster.db.models.substitution_requests import SubstitutionRequests, SubstitutionStatus
from shiftroster.db.models.worked_hours import WorkedHours

__all__ = [
    "Base",
    # Models
    "Users",
    "Employees",
    "Schedules",
    "Shifts",
    "AvailabilityEntries",
    "TimeOffPeriods",
    "StaffingLimits",
    "StartTimeTargets",
    "SubstitutionRequests",
    "WorkedHours",
    # Enums
    "Role",
    "SCHEDULABLE_ROLES",
    "ShiftType",
    "ShiftStatus",
    "TimeOffKind",
    "TimeOffStatus",
    "SubstitutionStatus",
]
