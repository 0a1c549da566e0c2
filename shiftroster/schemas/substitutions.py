from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from shiftroster.db.models.substitution_requests import SubstitutionStatus


class SubstitutionCreate(BaseModel):
    shift_id: int
    note: Optional[str] = None


class SubstitutionDecision(BaseModel):
    note: Optional[str] = None


class SubstitutionResponse(BaseModel):
    id: int
    shift_id: int
    requester_id: int
    substitute_id: Optional[int]
    approver_id: Optional[int]
    status: SubstitutionStatus
    deadline: datetime
    request_note: Optional[str]
    response_note: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
