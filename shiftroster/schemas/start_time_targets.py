from pydantic import BaseModel, Field
from datetime import time
from typing import Optional
from shiftroster.db.models.employees import Role
from shiftroster.db.models.shifts import ShiftType


class StartTimeTargetBase(BaseModel):
    shift_type: ShiftType
    role: Role
    start_time: time
    target_count: int = Field(default=1, ge=0)
    priority: int = 0
    is_active: bool = True


class StartTimeTargetCreate(StartTimeTargetBase):
    pass


class StartTimeTargetUpdate(BaseModel):
    start_time: Optional[time] = None
    target_count: Optional[int] = Field(default=None, ge=0)
    priority: Optional[int] = None
    is_active: Optional[bool] = None


class StartTimeTargetResponse(StartTimeTargetBase):
    id: int

    class Config:
        from_attributes = True
