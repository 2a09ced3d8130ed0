"""Domain enums used across SQLAlchemy models and Pydantic schemas.

All enums use str mixin for JSON serialization; columns store the `.value`.
"""

from __future__ import annotations

from enum import Enum


class EntityType(str, Enum):
    """Auditable entity kinds. Closed set — extend here to audit a new kind."""

    PROJECT = "PROJECT"
    TASK = "TASK"
    USER = "USER"


class AuditAction(str, Enum):
    """Mutation classification recorded on every audit entry."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class UserRole(str, Enum):
    """Access role carried on a user and in their access token."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"


class TaskStatus(str, Enum):
    """Task workflow states."""

    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    BLOCKED = "Blocked"
