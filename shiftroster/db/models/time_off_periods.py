from typing import Optional
from enum import Enum
from datetime import date, datetime
from sqlalchemy import CheckConstraint, Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from shiftroster.db.database import Base


class TimeOffKind(str, Enum):
    ABSENCE = "ABSENCE"
    LEAVE = "LEAVE"


class TimeOffStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class TimeOffPeriods(Base):
    __tablename__ = "time_off_periods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    kind: Mapped[TimeOffKind] = mapped_column(SQLEnum(TimeOffKind, name="time_off_kind_enum"), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)  # inclusive
    status: Mapped[TimeOffStatus] = mapped_column(SQLEnum(TimeOffStatus, name="time_off_status_enum"), nullable=False, default=TimeOffStatus.PENDING)
    comments: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    last_modified_by_employee_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("employees.id"), nullable=True)

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_time_off_period_order"),
    )
