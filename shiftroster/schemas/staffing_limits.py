from pydantic import BaseModel, Field, model_validator
from typing import Optional
from shiftroster.db.models.employees import Role
from shiftroster.db.models.shifts import ShiftType


class StaffingLimitBase(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    shift_type: ShiftType
    role: Role
    min_staff: int = Field(default=0, ge=0)
    max_staff: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_bounds(self):
        if self.role == Role.ADMIN:
            raise ValueError("ADMIN is not a schedulable role")
        if self.max_staff is not None and self.max_staff < self.min_staff:
            raise ValueError("max_staff must be >= min_staff")
        return self


class StaffingLimitUpsert(StaffingLimitBase):
    pass


class StaffingLimitResponse(StaffingLimitBase):
    id: int
    last_modified_by_employee_id: Optional[int]

    class Config:
        from_attributes = True
