from sqlalchemy import Integer, String, DateTime, Boolean, func, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from enum import Enum
from typing import Optional
from shiftroster.db.database import Base


class Role(str, Enum):
    # declaration order is the order the engine fills roles within a shift
    PIZZA_MAKER = "PIZZA_MAKER"
    COOK = "COOK"
    DELIVERY = "DELIVERY"
    FLOOR = "FLOOR"
    CASHIER = "CASHIER"
    ADMIN = "ADMIN"


SCHEDULABLE_ROLES: tuple[Role, ...] = tuple(r for r in Role if r != Role.ADMIN)


class Employees(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), unique=True, nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    primary_role: Mapped[Role] = mapped_column(SQLEnum(Role, name="role_enum"), nullable=False)
    secondary_role: Mapped[Optional[Role]] = mapped_column(SQLEnum(Role, name="role_enum"), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    max_shifts_per_week: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # null = no cap
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def roles(self) -> set[Role]:
        return {r for r in (self.primary_role, self.secondary_role) if r is not None}

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles
