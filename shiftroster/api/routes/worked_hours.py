from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from shiftroster.api.deps import get_db, get_current_employee
from shiftroster.db.models.employees import Employees
from shiftroster.db.models.shifts import Shifts
from shiftroster.db.models.worked_hours import WorkedHours
from shiftroster.schemas.worked_hours import WorkedHoursCreate, WorkedHoursResponse

router = APIRouter(prefix="/worked-hours", tags=["worked-hours"])


@router.post("", response_model=WorkedHoursResponse, status_code=status.HTTP_201_CREATED)
def submit_worked_hours(
    payload: WorkedHoursCreate,
    db: Session = Depends(get_db),
    current_employee: Employees = Depends(get_current_employee),
):
    """Submit hours for a shift you currently hold"""
    shift = db.get(Shifts, payload.shift_id)
    if not shift:
        raise HTTPException(status_code=404, detail="Shift not found")
    if shift.employee_id != current_employee.id:
        raise HTTPException(status_code=403, detail="Can only submit hours for your own shifts")

    existing = db.query(WorkedHours).filter(
        WorkedHours.shift_id == shift.id,
        WorkedHours.employee_id == current_employee.id,
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail="Hours already submitted for this shift")

    record = WorkedHours(shift_id=shift.id, employee_id=current_employee.id, hours=payload.hours)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@router.get("", response_model=List[WorkedHoursResponse])
def list_worked_hours(
    employee_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_employee: Employees = Depends(get_current_employee),
):
    """Own records; admins see all or filter by employee_id"""
    query = db.query(WorkedHours)
    if not current_employee.is_admin:
        query = query.filter(WorkedHours.employee_id == current_employee.id)
    elif employee_id:
        query = query.filter(WorkedHours.employee_id == employee_id)
    return query.order_by(WorkedHours.id).all()
