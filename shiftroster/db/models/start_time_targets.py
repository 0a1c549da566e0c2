from datetime import datetime, time
from sqlalchemy import Boolean, DateTime, Enum as SQLEnum, Integer, Time, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from shiftroster.db.database import Base
from shiftroster.db.models.employees import Role
from shiftroster.db.models.shifts import ShiftType


class StartTimeTargets(Base):
    __tablename__ = "start_time_targets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    shift_type: Mapped[ShiftType] = mapped_column(SQLEnum(ShiftType, name="shift_type_enum"), nullable=False)
    role: Mapped[Role] = mapped_column(SQLEnum(Role, name="role_enum"), nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    target_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # lower wins ties
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("shift_type", "role", "start_time", name="uix_start_time_target"),
    )
