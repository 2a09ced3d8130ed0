"""Task endpoints — CRUD with audit capture on every mutation."""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_request_auditor
from src.audit.recorder import RequestAuditor
from src.db.engine import get_session
from src.models.enums import EntityType
from src.models.task import Task
from src.schemas.entities import TaskCreate, TaskRead, TaskUpdate, column_values, snapshot
from src.schemas.responses import error_response, success_response

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("")
async def list_tasks(db: AsyncSession = Depends(get_session)) -> JSONResponse:
    result = await db.execute(select(Task).order_by(Task.priority.desc(), Task.created_at.desc()))
    return success_response([TaskRead.model_validate(t) for t in result.scalars().all()])


@router.get("/{task_id}")
async def get_task(task_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> JSONResponse:
    task = await db.get(Task, task_id)
    if task is None:
        return error_response("Task not found", status.HTTP_404_NOT_FOUND)
    return success_response(TaskRead.model_validate(task))


@router.post("")
async def create_task(
    payload: TaskCreate,
    db: AsyncSession = Depends(get_session),
    audit: RequestAuditor = Depends(get_request_auditor),
) -> JSONResponse:
    task = Task(**column_values(payload))
    db.add(task)
    await db.commit()

    after = snapshot(TaskRead, task)
    await audit.log_create(EntityType.TASK, str(task.id), after)
    return success_response(after, "Task created successfully", status.HTTP_201_CREATED)


@router.put("/{task_id}")
async def update_task(
    task_id: uuid.UUID,
    payload: TaskUpdate,
    db: AsyncSession = Depends(get_session),
    audit: RequestAuditor = Depends(get_request_auditor),
) -> JSONResponse:
    task = await db.get(Task, task_id)
    if task is None:
        return error_response("Task not found", status.HTTP_404_NOT_FOUND)

    before = snapshot(TaskRead, task)
    for field, value in column_values(payload, partial=True).items():
        setattr(task, field, value)
    await db.commit()

    after = snapshot(TaskRead, task)
    await audit.log_update(EntityType.TASK, str(task.id), before, after)
    return success_response(after, "Task updated successfully")


@router.delete("/{task_id}")
async def delete_task(
    task_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    audit: RequestAuditor = Depends(get_request_auditor),
) -> JSONResponse:
    task = await db.get(Task, task_id)
    if task is None:
        return error_response("Task not found", status.HTTP_404_NOT_FOUND)

    before = snapshot(TaskRead, task)
    await db.delete(task)
    await db.commit()

    await audit.log_delete(EntityType.TASK, str(task_id), before)
    return success_response(message="Task deleted successfully")
