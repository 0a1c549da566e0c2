from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shiftroster.api.deps import get_db, get_current_employee
from shiftroster.db.models.availability_entries import AvailabilityEntries
from shiftroster.db.models.employees import Employees
from shiftroster.db.models.shifts import ShiftType
from shiftroster.schemas.availability import AvailabilityWeekUpdate, AvailabilityEntryResponse
from shiftroster.services.scheduling import normalize_week_start

router = APIRouter(prefix="/availability", tags=["availability"])


@router.put("", response_model=List[AvailabilityEntryResponse])
def set_week_availability(
    payload: AvailabilityWeekUpdate,
    db: Session = Depends(get_db),
    current_employee: Employees = Depends(get_current_employee),
):
    """Upsert the caller's availability for one week; slots not sent are left unchanged"""
    week_start = normalize_week_start(payload.week_start)

    existing = {
        (e.day_of_week, e.shift_type): e
        for e in db.query(AvailabilityEntries).filter(
            AvailabilityEntries.employee_id == current_employee.id,
            AvailabilityEntries.week_start == week_start,
        ).all()
    }

    for slot in payload.slots:
        entry = existing.get((slot.day_of_week, slot.shift_type))
        if entry is None:
            entry = AvailabilityEntries(
                employee_id=current_employee.id,
                week_start=week_start,
                day_of_week=slot.day_of_week,
                shift_type=slot.shift_type,
            )
            db.add(entry)
            existing[(slot.day_of_week, slot.shift_type)] = entry
        entry.is_available = slot.is_available

    db.commit()
    return sorted(existing.values(), key=lambda e: (e.day_of_week, list(ShiftType).index(e.shift_type)))


@router.get("", response_model=List[AvailabilityEntryResponse])
def get_week_availability(
    week_start: str,
    employee_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_employee: Employees = Depends(get_current_employee),
):
    """Own availability; admins may pass employee_id"""
    target_id = current_employee.id
    if employee_id is not None and employee_id != current_employee.id:
        if not current_employee.is_admin:
            raise HTTPException(status_code=403, detail="Can only view your own availability")
        target_id = employee_id

    return db.query(AvailabilityEntries).filter(
        AvailabilityEntries.employee_id == target_id,
        AvailabilityEntries.week_start == normalize_week_start(week_start),
    ).order_by(AvailabilityEntries.day_of_week, AvailabilityEntries.id).all()
