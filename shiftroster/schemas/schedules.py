from pydantic import BaseModel
from datetime import date, datetime, time
from typing import Optional
from shiftroster.db.models.employees import Role
from shiftroster.db.models.shifts import ShiftType, ShiftStatus


class GenerateScheduleRequest(BaseModel):
    week_start: Optional[str] = None  # ISO date, any day of the target week


class GapResponse(BaseModel):
    day_of_week: int
    shift_type: ShiftType
    role: Role
    required: int
    filled: int
    deficit: int
    excluded: dict[str, int] = {}


class GenerateScheduleResponse(BaseModel):
    schedule_id: int
    week_start: date
    shifts_generated: int
    gaps: list[GapResponse]
    warnings: list[str] = []


class ShiftResponse(BaseModel):
    id: int
    schedule_id: int
    day_of_week: int
    shift_type: ShiftType
    role: Role
    employee_id: int
    start_time: time
    end_time: time
    status: ShiftStatus

    class Config:
        from_attributes = True


class ScheduleResponse(BaseModel):
    id: int
    week_start: date
    generated_at: datetime
    generated_by_employee_id: Optional[int]
    shifts: list[ShiftResponse]


class CoverageSlotResponse(BaseModel):
    day_of_week: int
    shift_type: ShiftType
    role: Role
    required: int
    assigned: int
    available: int
    percentage: float


class CoverageResponse(BaseModel):
    week_start: date
    slots: list[CoverageSlotResponse]
    total_required: int
    total_assigned: int
    total_available: int
    coverage_percentage: float
    availability_percentage: float


class MissingAvailabilityEmployee(BaseModel):
    employee_id: int
    name: str
    primary_role: Role


class MissingAvailabilityResponse(BaseModel):
    week_start: date
    missing: list[MissingAvailabilityEmployee]
    total_employees: int
    employees_with_availability: int
    completion_percentage: float


class EmployeeCoverageResponse(BaseModel):
    employee_id: int
    name: str
    primary_role: Role
    available: int
    assigned: int
    utilization: float
