"""Request correlation for logs.

Each request gets an ID (the client's X-Request-ID when sent, else a
UUID4) that is echoed on the response.  The ID and, once the bearer token
is validated, the acting user are held in ContextVars; a LogRecord factory
copies both onto every record created inside the request, whichever
logger emits it, so the JSON formatter can print them as top-level keys.
One summary line is logged per request.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_var: ContextVar[str | None] = ContextVar("user_id", default=None)

_base_factory = logging.getLogRecordFactory()


def _record_with_context(*args, **kwargs) -> logging.LogRecord:
    record = _base_factory(*args, **kwargs)
    record.request_id = request_id_var.get()
    record.user_id = user_id_var.get()
    return record


# Installed once; a module reload must not wrap the factory again
if not getattr(logging.getLogRecordFactory(), "_lms_context", False):
    _record_with_context._lms_context = True  # type: ignore[attr-defined]
    logging.setLogRecordFactory(_record_with_context)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)
        user_id_var.set(None)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        # The route runs in its own task, so its ContextVar writes are not
        # visible here; require_user also leaves the user on request.state.
        user_id_var.set(getattr(request.state, "user_id", None))

        logger.info(
            "%s %s %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
