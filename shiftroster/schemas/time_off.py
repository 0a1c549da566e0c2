from pydantic import BaseModel, model_validator
from datetime import date, datetime
from typing import Optional
from shiftroster.db.models.time_off_periods import TimeOffKind, TimeOffStatus


class TimeOffCreate(BaseModel):
    kind: TimeOffKind
    start_date: date
    end_date: date
    comments: Optional[str] = None
    employee_id: Optional[int] = None  # admins may file on behalf of an employee

    @model_validator(mode="after")
    def check_order(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class TimeOffDecision(BaseModel):
    comments: Optional[str] = None


class TimeOffResponse(BaseModel):
    id: int
    employee_id: int
    kind: TimeOffKind
    start_date: date
    end_date: date
    status: TimeOffStatus
    comments: Optional[str]
    created_at: datetime
    updated_at: datetime
    last_modified_by_employee_id: Optional[int]

    class Config:
        from_attributes = True
