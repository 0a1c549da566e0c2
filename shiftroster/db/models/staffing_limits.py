from typing import Optional
from datetime import datetime
from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Integer, func, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from shiftroster.db.database import Base
from shiftroster.db.models.employees import Role
from shiftroster.db.models.shifts import ShiftType


class StaffingLimits(Base):
    __tablename__ = "staffing_limits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0-6
    shift_type: Mapped[ShiftType] = mapped_column(SQLEnum(ShiftType, name="shift_type_enum"), nullable=False)
    role: Mapped[Role] = mapped_column(SQLEnum(Role, name="role_enum"), nullable=False)
    min_staff: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_staff: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # null = unbounded
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    last_modified_by_employee_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("employees.id"), nullable=True)

    __table_args__ = (
        UniqueConstraint("day_of_week", "shift_type", "role", name="uix_staffing_limits_slot"),
        CheckConstraint("min_staff >= 0", name="ck_staffing_limits_min"),
    )
