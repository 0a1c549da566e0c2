from sqlalchemy import Integer, Time, ForeignKey, Enum as SQLEnum, Index, UniqueConstraint
from datetime import time
from sqlalchemy.orm import Mapped, mapped_column, relationship
from enum import Enum
from shiftroster.db.database import Base
from shiftroster.db.models.employees import Role


class ShiftType(str, Enum):
    # declaration order: LUNCH is processed before DINNER
    LUNCH = "LUNCH"
    DINNER = "DINNER"


class ShiftStatus(str, Enum):
    ASSIGNED = "ASSIGNED"
    SUBSTITUTED = "SUBSTITUTED"


class Shifts(Base):
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    schedule_id: Mapped[int] = mapped_column(Integer, ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0 = Monday
    shift_type: Mapped[ShiftType] = mapped_column(SQLEnum(ShiftType, name="shift_type_enum"), nullable=False)
    role: Mapped[Role] = mapped_column(SQLEnum(Role, name="role_enum"), nullable=False)
    employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    status: Mapped[ShiftStatus] = mapped_column(SQLEnum(ShiftStatus, name="shift_status_enum"), nullable=False, default=ShiftStatus.ASSIGNED)

    schedule = relationship("Schedules", back_populates="shifts")

    __table_args__ = (
        UniqueConstraint("schedule_id", "day_of_week", "shift_type", "employee_id", name="uix_shifts_one_per_service"),
        Index("ix_shifts_schedule_day", "schedule_id", "day_of_week"),
        Index("ix_shifts_employee", "employee_id"),
    )
