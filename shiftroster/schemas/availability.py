from pydantic import BaseModel, Field
from datetime import date
from shiftroster.db.models.shifts import ShiftType


class AvailabilitySlot(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    shift_type: ShiftType
    is_available: bool


class AvailabilityWeekUpdate(BaseModel):
    week_start: str  # ISO date, normalized to its Monday
    slots: list[AvailabilitySlot]


class AvailabilityEntryResponse(BaseModel):
    id: int
    employee_id: int
    week_start: date
    day_of_week: int
    shift_type: ShiftType
    is_available: bool

    class Config:
        from_attributes = True
