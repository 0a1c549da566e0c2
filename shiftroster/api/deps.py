from typing import Generator
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from shiftroster.db.database import SessionLocal
from shiftroster.core.security import decode_access_token
from shiftroster.db.models.users import Users
from shiftroster.db.models.employees import Employees
from shiftroster.services.audit import BaseAuditSink, get_audit_sink as _default_audit_sink
from shiftroster.services.notifications import BaseNotifier, get_notifier as _default_notifier
from shiftroster.services.substitutions import Actor

security = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Users:
    token_data = decode_access_token(credentials.credentials)
    if token_data is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = db.query(Users).filter(Users.id == token_data.user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    return user


def get_current_employee(
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
) -> Employees:
    """Helper to get employee record for current user"""
    employee = db.query(Employees).filter(Employees.user_id == current_user.id).first()
    if not employee:
        raise HTTPException(status_code=404, detail="No employee record found for current user")
    return employee


def require_admin(employee: Employees = Depends(get_current_employee)) -> Employees:
    """Require the caller's employee record to carry the ADMIN role"""
    if not employee.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return employee


def get_actor(employee: Employees = Depends(get_current_employee)) -> Actor:
    return Actor(employee_id=employee.id, is_admin=employee.is_admin)


def get_notifier() -> BaseNotifier:
    return _default_notifier()


def get_audit_sink() -> BaseAuditSink:
    return _default_audit_sink()
