from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shiftroster.api.deps import get_db, get_current_employee, require_admin, get_audit_sink
from shiftroster.db.models.employees import Employees
from shiftroster.schemas.schedules import (
    CoverageResponse,
    EmployeeCoverageResponse,
    GapResponse,
    GenerateScheduleRequest,
    GenerateScheduleResponse,
    MissingAvailabilityResponse,
    ScheduleResponse,
    ShiftResponse,
)
from shiftroster.services.audit import BaseAuditSink
from shiftroster.services.scheduling import (
    generate_schedule,
    get_coverage_stats,
    get_employee_coverage,
    get_missing_availability,
    get_schedule,
    get_schedule_gaps,
    list_schedule_shifts,
    normalize_week_start,
)

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.post("/generate", response_model=GenerateScheduleResponse, status_code=status.HTTP_201_CREATED)
def generate(
    payload: GenerateScheduleRequest,
    db: Session = Depends(get_db),
    admin: Employees = Depends(require_admin),
    audit: BaseAuditSink = Depends(get_audit_sink),
):
    """Generate (or regenerate) the schedule for the week containing week_start"""
    week_start = normalize_week_start(payload.week_start)
    outcome = generate_schedule(db, week_start, generated_by=admin.id, audit=audit)
    return GenerateScheduleResponse(
        schedule_id=outcome.schedule_id,
        week_start=outcome.week_start,
        shifts_generated=outcome.shifts_generated,
        gaps=[GapResponse(**g.to_dict()) for g in outcome.result.gaps],
        warnings=outcome.result.warnings,
    )


@router.get("/{week_start}", response_model=ScheduleResponse)
def read_schedule(
    week_start: str,
    db: Session = Depends(get_db),
    current_employee: Employees = Depends(get_current_employee),
):
    schedule = get_schedule(db, normalize_week_start(week_start))
    return ScheduleResponse(
        id=schedule.id,
        week_start=schedule.week_start,
        generated_at=schedule.generated_at,
        generated_by_employee_id=schedule.generated_by_employee_id,
        shifts=[ShiftResponse.model_validate(s) for s in list_schedule_shifts(db, schedule.id)],
    )


@router.get("/{week_start}/gaps", response_model=list[GapResponse])
def read_gaps(
    week_start: str,
    db: Session = Depends(get_db),
    admin: Employees = Depends(require_admin),
):
    return [GapResponse(**g.to_dict()) for g in get_schedule_gaps(db, normalize_week_start(week_start))]


@router.get("/{week_start}/coverage", response_model=CoverageResponse)
def read_coverage(
    week_start: str,
    db: Session = Depends(get_db),
    admin: Employees = Depends(require_admin),
):
    return get_coverage_stats(db, normalize_week_start(week_start))


@router.get("/{week_start}/employee-coverage", response_model=list[EmployeeCoverageResponse])
def read_employee_coverage(
    week_start: str,
    db: Session = Depends(get_db),
    admin: Employees = Depends(require_admin),
):
    """Available vs assigned shifts per employee, busiest first"""
    return get_employee_coverage(db, normalize_week_start(week_start))


@router.get("/{week_start}/missing-availability", response_model=MissingAvailabilityResponse)
def read_missing_availability(
    week_start: str,
    db: Session = Depends(get_db),
    admin: Employees = Depends(require_admin),
):
    """Employees who have not submitted any availability for the week; no schedule needed"""
    return get_missing_availability(db, normalize_week_start(week_start))
