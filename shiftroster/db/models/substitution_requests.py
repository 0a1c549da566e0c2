from typing import Optional
from enum import Enum
from datetime import datetime
from sqlalchemy import DateTime, ForeignKey, Integer, Text, Enum as SQLEnum, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from shiftroster.db.database import Base


class SubstitutionStatus(str, Enum):
    PENDING = "PENDING"
    APPLIED = "APPLIED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


LIVE_STATUSES: tuple[SubstitutionStatus, ...] = (SubstitutionStatus.PENDING, SubstitutionStatus.APPLIED)


class SubstitutionRequests(Base):
    __tablename__ = "substitution_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    shift_id: Mapped[int] = mapped_column(Integer, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    requester_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    substitute_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("employees.id"), nullable=True, index=True)
    approver_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("employees.id"), nullable=True)
    status: Mapped[SubstitutionStatus] = mapped_column(SQLEnum(SubstitutionStatus, name="substitution_status_enum"), nullable=False, default=SubstitutionStatus.PENDING, index=True)
    deadline: Mapped[datetime] = mapped_column(DateTime, nullable=False)  # restaurant-local wall clock
    request_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    response_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_substitution_requests_shift_status", "shift_id", "status"),
    )

    @property
    def is_live(self) -> bool:
        return self.status in LIVE_STATUSES
