from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal


class WorkedHoursCreate(BaseModel):
    shift_id: int
    hours: Decimal = Field(gt=0, le=24)


class WorkedHoursResponse(BaseModel):
    id: int
    shift_id: int
    employee_id: int
    hours: Decimal
    submitted_at: datetime

    class Config:
        from_attributes = True
