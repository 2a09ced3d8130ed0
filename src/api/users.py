"""User endpoints — CRUD with audit capture on every mutation.

Emails are unique; a clash on create or update answers 409.
"""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_request_auditor
from src.audit.recorder import RequestAuditor
from src.db.engine import get_session
from src.models.enums import EntityType
from src.models.user import User
from src.schemas.entities import UserCreate, UserRead, UserUpdate, column_values, snapshot
from src.schemas.responses import error_response, success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def list_users(
    active_only: bool = False,
    db: AsyncSession = Depends(get_session),
) -> JSONResponse:
    query = select(User).order_by(User.last_name, User.first_name)
    if active_only:
        query = query.where(User.is_active.is_(True))
    result = await db.execute(query)
    return success_response([UserRead.model_validate(u) for u in result.scalars().all()])


@router.get("/{user_id}")
async def get_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> JSONResponse:
    user = await db.get(User, user_id)
    if user is None:
        return error_response("User not found", status.HTTP_404_NOT_FOUND)
    return success_response(UserRead.model_validate(user))


@router.post("")
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_session),
    audit: RequestAuditor = Depends(get_request_auditor),
) -> JSONResponse:
    user = User(**column_values(payload))
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("Rejected duplicate user: %s", payload.email)
        return error_response("Email or employee id already exists", status.HTTP_409_CONFLICT)

    after = snapshot(UserRead, user)
    await audit.log_create(EntityType.USER, str(user.id), after)
    return success_response(after, "User created successfully", status.HTTP_201_CREATED)


@router.put("/{user_id}")
async def update_user(
    user_id: uuid.UUID,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_session),
    audit: RequestAuditor = Depends(get_request_auditor),
) -> JSONResponse:
    user = await db.get(User, user_id)
    if user is None:
        return error_response("User not found", status.HTTP_404_NOT_FOUND)

    before = snapshot(UserRead, user)
    for field, value in column_values(payload, partial=True).items():
        setattr(user, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        return error_response("Email or employee id already exists", status.HTTP_409_CONFLICT)

    after = snapshot(UserRead, user)
    await audit.log_update(EntityType.USER, str(user.id), before, after)
    return success_response(after, "User updated successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    audit: RequestAuditor = Depends(get_request_auditor),
) -> JSONResponse:
    user = await db.get(User, user_id)
    if user is None:
        return error_response("User not found", status.HTTP_404_NOT_FOUND)

    before = snapshot(UserRead, user)
    await db.delete(user)
    await db.commit()

    await audit.log_delete(EntityType.USER, str(user_id), before)
    return success_response(message="User deleted successfully")
