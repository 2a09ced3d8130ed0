"""Request and read schemas for Projects, Tasks and Users.

The `*Read` schemas double as the snapshot shape stored on audit entries:
`snapshot(obj)` renders exactly the fields a client can see.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from src.models.enums import TaskStatus, UserRole


class _ReadModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def _reject_null(v: Any, info: ValidationInfo) -> Any:
    """Partial updates may omit a required column but never clear it."""
    if v is None:
        msg = f"{info.field_name} may not be null"
        raise ValueError(msg)
    return v


# ── Projects ─────────────────────────────────────────────────────────


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    start_date: date | None = None
    end_date: date | None = None
    priority: int | None = Field(default=None, ge=0, le=30)
    manager_id: uuid.UUID | None = None


class ProjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    start_date: date | None = None
    end_date: date | None = None
    priority: int | None = Field(default=None, ge=0, le=30)
    manager_id: uuid.UUID | None = None

    @field_validator("name")
    @classmethod
    def required_not_null(cls, v: Any, info: ValidationInfo) -> Any:
        return _reject_null(v, info)


class ProjectRead(_ReadModel):
    id: uuid.UUID
    name: str
    start_date: date | None = None
    end_date: date | None = None
    priority: int | None = None
    manager_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime


# ── Tasks ────────────────────────────────────────────────────────────


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    start_date: date | None = None
    end_date: date | None = None
    priority: int = Field(default=0, ge=0, le=30)
    status: TaskStatus = TaskStatus.OPEN
    parent_id: uuid.UUID | None = None
    project_id: uuid.UUID | None = None
    user_id: uuid.UUID | None = None


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    priority: int | None = Field(default=None, ge=0, le=30)
    status: TaskStatus | None = None
    parent_id: uuid.UUID | None = None
    project_id: uuid.UUID | None = None
    user_id: uuid.UUID | None = None

    @field_validator("title", "description", "priority", "status")
    @classmethod
    def required_not_null(cls, v: Any, info: ValidationInfo) -> Any:
        return _reject_null(v, info)


class TaskRead(_ReadModel):
    id: uuid.UUID
    title: str
    description: str
    start_date: date | None = None
    end_date: date | None = None
    priority: int
    status: str
    parent_id: uuid.UUID | None = None
    project_id: uuid.UUID | None = None
    user_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime


# ── Users ────────────────────────────────────────────────────────────


class UserCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    employee_id: str | None = Field(default=None, max_length=50)
    role: UserRole = UserRole.USER

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        return v.strip()

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class UserUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    employee_id: str | None = Field(default=None, max_length=50)
    role: UserRole | None = None
    is_active: bool | None = None

    @field_validator("first_name", "last_name", "email", "role", "is_active")
    @classmethod
    def required_not_null(cls, v: Any, info: ValidationInfo) -> Any:
        return _reject_null(v, info)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return v.lower() if v else v


class UserRead(_ReadModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    employee_id: str | None = None
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


def snapshot(schema: type[_ReadModel], obj: Any) -> dict[str, Any]:
    """Point-in-time JSON copy of an entity's public fields."""
    return schema.model_validate(obj).model_dump(mode="json")


def column_values(payload: BaseModel, partial: bool = False) -> dict[str, Any]:
    """Column values from a request body, with enums reduced to their values.

    With `partial`, only the fields the client actually sent.
    """
    values = payload.model_dump(exclude_unset=partial)
    for key, value in values.items():
        if isinstance(value, TaskStatus | UserRole):
            values[key] = value.value
    return values
