from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shiftroster.api.deps import get_db, require_admin
from shiftroster.db.models.employees import Employees
from shiftroster.db.models.start_time_targets import StartTimeTargets
from shiftroster.schemas.start_time_targets import (
    StartTimeTargetCreate,
    StartTimeTargetUpdate,
    StartTimeTargetResponse,
)

router = APIRouter(prefix="/start-time-targets", tags=["start-time-targets"])


@router.get("", response_model=List[StartTimeTargetResponse])
def list_start_time_targets(
    db: Session = Depends(get_db),
    admin: Employees = Depends(require_admin),
):
    return db.query(StartTimeTargets).order_by(
        StartTimeTargets.shift_type, StartTimeTargets.role, StartTimeTargets.start_time
    ).all()


@router.post("", response_model=StartTimeTargetResponse, status_code=status.HTTP_201_CREATED)
def create_start_time_target(
    payload: StartTimeTargetCreate,
    db: Session = Depends(get_db),
    admin: Employees = Depends(require_admin),
):
    existing = db.query(StartTimeTargets).filter(
        StartTimeTargets.shift_type == payload.shift_type,
        StartTimeTargets.role == payload.role,
        StartTimeTargets.start_time == payload.start_time,
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail="Target already exists for this shift, role and start time")

    target = StartTimeTargets(**payload.model_dump())
    db.add(target)
    db.commit()
    db.refresh(target)
    return target


@router.put("/{target_id}", response_model=StartTimeTargetResponse)
def update_start_time_target(
    target_id: int,
    payload: StartTimeTargetUpdate,
    db: Session = Depends(get_db),
    admin: Employees = Depends(require_admin),
):
    target = db.get(StartTimeTargets, target_id)
    if not target:
        raise HTTPException(status_code=404, detail="Start time target not found")

    changes = payload.model_dump(exclude_unset=True)
    start_time = changes.get("start_time", target.start_time)
    clash = db.query(StartTimeTargets).filter(
        StartTimeTargets.id != target.id,
        StartTimeTargets.shift_type == target.shift_type,
        StartTimeTargets.role == target.role,
        StartTimeTargets.start_time == start_time,
    ).first()
    if clash:
        raise HTTPException(status_code=409, detail="Target already exists for this shift, role and start time")

    for field, value in changes.items():
        setattr(target, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Target already exists for this shift, role and start time")
    db.refresh(target)
    return target
