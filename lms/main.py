from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lms.api.assessments import router as assessments_router
from lms.api.catalog import router as catalog_router
from lms.api.certificates import router as certificates_router
from lms.api.enrollments import router as enrollments_router
from lms.api.health import router as health_router
from lms.api.metrics_endpoint import router as metrics_router
from lms.api.payments import router as payments_router
from lms.api.results import router as results_router
from lms.core.config import SETTINGS
from lms.core.logging import setup_logging
from lms.db.engine import lifespan_db
from lms.middleware.metrics import MetricsMiddleware
from lms.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_db():
        yield


# only app setup + router registration

app = FastAPI(
    title="lms-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) → Metrics → CORS → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(catalog_router)
app.include_router(assessments_router)
app.include_router(enrollments_router)
app.include_router(results_router)
app.include_router(payments_router)
app.include_router(certificates_router)

logger.info(
    "lms-service started  env=%s log_level=%s port=%d docs=%s storage=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
    "postgres" if SETTINGS.database_url else "memory",
)
