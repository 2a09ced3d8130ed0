"""User model — a person who manages projects or is assigned tasks.

Users are also the actors attributed on audit entries.
"""

from __future__ import annotations

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin
from src.models.enums import UserRole


class User(TimestampMixin, Base):
    """An application user."""

    __tablename__ = "users"

    # Profile
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    employee_id: Mapped[str | None] = mapped_column(String(50), unique=True)

    # Access
    role: Mapped[str] = mapped_column(String(20), default=UserRole.USER.value, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} role={self.role} active={self.is_active}>"
