from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from shiftroster.api.deps import get_db, get_current_employee, require_admin
from shiftroster.db.models.employees import Employees
from shiftroster.db.models.time_off_periods import TimeOffPeriods, TimeOffStatus
from shiftroster.schemas.time_off import TimeOffCreate, TimeOffDecision, TimeOffResponse

router = APIRouter(prefix="/time-off", tags=["time-off"])


@router.post("", response_model=TimeOffResponse, status_code=status.HTTP_201_CREATED)
def create_time_off(
    payload: TimeOffCreate,
    db: Session = Depends(get_db),
    current_employee: Employees = Depends(get_current_employee),
):
    """File an absence or leave - employees for themselves, admins for anyone"""
    employee_id = payload.employee_id or current_employee.id
    if employee_id != current_employee.id and not current_employee.is_admin:
        raise HTTPException(status_code=403, detail="Can only request time off for yourself")

    if not db.get(Employees, employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")

    period = TimeOffPeriods(
        employee_id=employee_id,
        kind=payload.kind,
        start_date=payload.start_date,
        end_date=payload.end_date,
        comments=payload.comments,
        status=TimeOffStatus.PENDING,
        last_modified_by_employee_id=current_employee.id,
    )
    db.add(period)
    db.commit()
    db.refresh(period)
    return period


@router.get("", response_model=List[TimeOffResponse])
def list_time_off(
    employee_id: Optional[int] = None,
    period_status: Optional[TimeOffStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_employee: Employees = Depends(get_current_employee),
):
    """Admins see all periods, employees see only their own"""
    query = db.query(TimeOffPeriods)

    if not current_employee.is_admin:
        query = query.filter(TimeOffPeriods.employee_id == current_employee.id)
    elif employee_id:
        query = query.filter(TimeOffPeriods.employee_id == employee_id)

    if period_status:
        query = query.filter(TimeOffPeriods.status == period_status)

    return query.order_by(TimeOffPeriods.start_date.desc(), TimeOffPeriods.id.desc()).offset(skip).limit(limit).all()


def _decide(db: Session, period_id: int, new_status: TimeOffStatus, admin: Employees, comments: Optional[str]):
    period = db.get(TimeOffPeriods, period_id)
    if not period:
        raise HTTPException(status_code=404, detail="Time off period not found")
    if period.status != TimeOffStatus.PENDING:
        raise HTTPException(status_code=409, detail=f"Time off period is already {period.status.value}")

    period.status = new_status
    period.last_modified_by_employee_id = admin.id
    if comments:
        period.comments = comments
    db.commit()
    db.refresh(period)
    return period


@router.patch("/{period_id}/approve", response_model=TimeOffResponse)
def approve_time_off(
    period_id: int,
    payload: Optional[TimeOffDecision] = None,
    db: Session = Depends(get_db),
    admin: Employees = Depends(require_admin),
):
    return _decide(db, period_id, TimeOffStatus.APPROVED, admin, payload.comments if payload else None)


@router.patch("/{period_id}/reject", response_model=TimeOffResponse)
def reject_time_off(
    period_id: int,
    payload: Optional[TimeOffDecision] = None,
    db: Session = Depends(get_db),
    admin: Employees = Depends(require_admin),
):
    return _decide(db, period_id, TimeOffStatus.REJECTED, admin, payload.comments if payload else None)
