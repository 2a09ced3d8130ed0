"""Project endpoints — CRUD with audit capture on every mutation."""
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
from src.models.project import Project
from src.schemas.entities import ProjectCreate, ProjectRead, ProjectUpdate, column_values, snapshot
from src.schemas.responses import error_response, success_response

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("")
async def list_projects(db: AsyncSession = Depends(get_session)) -> JSONResponse:
    result = await db.execute(select(Project).order_by(Project.created_at.desc()))
    return success_response([ProjectRead.model_validate(p) for p in result.scalars().all()])


@router.get("/{project_id}")
async def get_project(project_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> JSONResponse:
    project = await db.get(Project, project_id)
    if project is None:
        return error_response("Project not found", status.HTTP_404_NOT_FOUND)
    return success_response(ProjectRead.model_validate(project))


@router.post("")
async def create_project(
    payload: ProjectCreate,
    db: AsyncSession = Depends(get_session),
    audit: RequestAuditor = Depends(get_request_auditor),
) -> JSONResponse:
    project = Project(**column_values(payload))
    db.add(project)
    await db.commit()

    after = snapshot(ProjectRead, project)
    await audit.log_create(EntityType.PROJECT, str(project.id), after)
    return success_response(after, "Project created successfully", status.HTTP_201_CREATED)


@router.put("/{project_id}")
async def update_project(
    project_id: uuid.UUID,
    payload: ProjectUpdate,
    db: AsyncSession = Depends(get_session),
    audit: RequestAuditor = Depends(get_request_auditor),
) -> JSONResponse:
    project = await db.get(Project, project_id)
    if project is None:
        return error_response("Project not found", status.HTTP_404_NOT_FOUND)

    before = snapshot(ProjectRead, project)
    for field, value in column_values(payload, partial=True).items():
        setattr(project, field, value)
    await db.commit()

    after = snapshot(ProjectRead, project)
    await audit.log_update(EntityType.PROJECT, str(project.id), before, after)
    return success_response(after, "Project updated successfully")


@router.delete("/{project_id}")
async def delete_project(
    project_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    audit: RequestAuditor = Depends(get_request_auditor),
) -> JSONResponse:
    project = await db.get(Project, project_id)
    if project is None:
        return error_response("Project not found", status.HTTP_404_NOT_FOUND)

    before = snapshot(ProjectRead, project)
    await db.delete(project)
    await db.commit()

    await audit.log_delete(EntityType.PROJECT, str(project_id), before)
    return success_response(message="Project deleted successfully")
