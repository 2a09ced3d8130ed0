"""SQLAlchemy ORM models for the project manager.

Import all models here so Alembic and Base.metadata.create_all() discover them.
"""

from __future__ import annotations

from src.models.audit import AuditLog
from src.models.base import Base
from src.models.enums import AuditAction, EntityType, TaskStatus, UserRole
from src.models.project import Project
from src.models.task import Task
from src.models.user import User

__all__ = [
    # Base
    "Base",
    # Models
    "User",
    "Project",
    "Task",
    "AuditLog",
    # Enums
    "EntityType",
    "AuditAction",
    "UserRole",
    "TaskStatus",
]
