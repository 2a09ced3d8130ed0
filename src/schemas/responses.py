"""Uniform JSON envelope: `{success, data?, message?}`.

Every route answers through these helpers so the UI can branch on
`success` alone. Absent `data` / `message` keys are omitted, not null.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope shared by all endpoints."""

    success: bool
    data: T | None = None
    message: str | None = None


def success_response(
    data: Any = None,
    message: str | None = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Wrap a payload in a success envelope.

    Pydantic models inside `data` are dumped by alias so audit entries keep
    their camelCase keys.
    """
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = jsonable_encoder(data, by_alias=True)
    if message:
        body["message"] = message
    return JSONResponse(body, status_code=status_code)


def error_response(
    message: str,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Failure envelope carrying only a human-readable message."""
    return JSONResponse(
        {"success": False, "message": message},
        status_code=status_code,
        headers=headers,
    )
