from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shiftroster.api.deps import get_db, get_actor, get_notifier, get_audit_sink
from shiftroster.schemas.substitutions import SubstitutionCreate, SubstitutionDecision, SubstitutionResponse
from shiftroster.services.audit import BaseAuditSink
from shiftroster.services.notifications import BaseNotifier
from shiftroster.services.substitutions import (
    Actor,
    apply_for_substitution,
    approve_substitution,
    cancel_substitution,
    list_open_requests,
    list_own_requests,
    reject_substitution,
    request_substitution,
)

router = APIRouter(prefix="/substitutions", tags=["substitutions"])


@router.post("", response_model=SubstitutionResponse, status_code=status.HTTP_201_CREATED)
def create_substitution(
    payload: SubstitutionCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    notifier: BaseNotifier = Depends(get_notifier),
    audit: BaseAuditSink = Depends(get_audit_sink),
):
    """Request a substitute for one of your own shifts"""
    return request_substitution(db, actor, payload.shift_id, note=payload.note, notifier=notifier, audit=audit)


@router.get("", response_model=List[SubstitutionResponse])
def list_my_substitutions(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    """Requests you opened or applied to"""
    return list_own_requests(db, actor)


@router.get("/open", response_model=List[SubstitutionResponse])
def list_open_substitutions(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    """Pending requests you could apply to (admins see all)"""
    return list_open_requests(db, actor)


@router.post("/{request_id}/apply", response_model=SubstitutionResponse)
def apply(
    request_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    notifier: BaseNotifier = Depends(get_notifier),
    audit: BaseAuditSink = Depends(get_audit_sink),
):
    return apply_for_substitution(db, actor, request_id, notifier=notifier, audit=audit)


@router.post("/{request_id}/approve", response_model=SubstitutionResponse)
def approve(
    request_id: int,
    payload: Optional[SubstitutionDecision] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    notifier: BaseNotifier = Depends(get_notifier),
    audit: BaseAuditSink = Depends(get_audit_sink),
):
    note = payload.note if payload else None
    return approve_substitution(db, actor, request_id, note=note, notifier=notifier, audit=audit)


@router.post("/{request_id}/reject", response_model=SubstitutionResponse)
def reject(
    request_id: int,
    payload: Optional[SubstitutionDecision] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    notifier: BaseNotifier = Depends(get_notifier),
    audit: BaseAuditSink = Depends(get_audit_sink),
):
    note = payload.note if payload else None
    return reject_substitution(db, actor, request_id, note=note, notifier=notifier, audit=audit)


@router.post("/{request_id}/cancel", response_model=SubstitutionResponse)
def cancel(
    request_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    notifier: BaseNotifier = Depends(get_notifier),
    audit: BaseAuditSink = Depends(get_audit_sink),
):
    return cancel_substitution(db, actor, request_id, notifier=notifier, audit=audit)
