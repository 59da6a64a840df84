"""Translate service errors into HTTP responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from lms.services.errors import ServiceError


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def http_error(exc: ServiceError) -> HTTPException:
    """HTTPException for a service error, keeping its context.

    Context keys that the client needs (``available_at``) are rendered in
    camelCase next to ``error``.
    """
    detail: dict[str, Any] = {"error": exc.message}
    if "available_at" in exc.context:
        detail["availableAt"] = _jsonable(exc.context["available_at"])
    return HTTPException(status_code=exc.status_code, detail=detail)


def method_not_allowed(allowed: list[str]) -> JSONResponse:
    """405 with an Allow header listing the supported verbs."""
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content={"detail": "Method Not Allowed"},
        headers={"Allow": ", ".join(allowed)},
    )
