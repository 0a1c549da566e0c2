from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shiftroster.api.deps import get_db, require_admin
from shiftroster.db.models.employees import Employees
from shiftroster.db.models.staffing_limits import StaffingLimits
from shiftroster.schemas.staffing_limits import StaffingLimitUpsert, StaffingLimitResponse

router = APIRouter(prefix="/staffing-limits", tags=["staffing-limits"])


@router.get("", response_model=List[StaffingLimitResponse])
def list_staffing_limits(
    db: Session = Depends(get_db),
    admin: Employees = Depends(require_admin),
):
    return db.query(StaffingLimits).order_by(StaffingLimits.day_of_week, StaffingLimits.id).all()


@router.put("", response_model=List[StaffingLimitResponse])
def upsert_staffing_limits(
    payload: List[StaffingLimitUpsert],
    db: Session = Depends(get_db),
    admin: Employees = Depends(require_admin),
):
    """Create or update limits keyed by (day_of_week, shift_type, role)"""
    keys = [(item.day_of_week, item.shift_type, item.role) for item in payload]
    if len(set(keys)) != len(keys):
        raise HTTPException(status_code=409, detail="Payload repeats a (day_of_week, shift_type, role) limit")

    saved = []
    for item in payload:
        limit = db.query(StaffingLimits).filter(
            StaffingLimits.day_of_week == item.day_of_week,
            StaffingLimits.shift_type == item.shift_type,
            StaffingLimits.role == item.role,
        ).first()
        if limit is None:
            limit = StaffingLimits(day_of_week=item.day_of_week, shift_type=item.shift_type, role=item.role)
            db.add(limit)
        limit.min_staff = item.min_staff
        limit.max_staff = item.max_staff
        limit.last_modified_by_employee_id = admin.id
        saved.append(limit)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Staffing limit changed concurrently, retry")
    for limit in saved:
        db.refresh(limit)
    return saved
