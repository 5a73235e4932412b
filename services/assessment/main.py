"""
Assessment Service - Main Application
=====================================

FastAPI application for control assessments, evidence and maturity scoring.

Version: 0.1.0
"""

import uuid
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.assessment.routes import assessments, frameworks, maturity, organizations
from shared.config import settings
from shared.database.postgres import PostgresClient
from shared.exceptions import AssessmentError
from shared.logging import bind_context, clear_context, get_logger, setup_logging
from shared.models.common import ErrorResponse, HealthResponse
from shared.notifications import build_notifier
from shared.storage import build_evidence_store


SERVICE_NAME = "assessment"
SERVICE_VERSION = "0.1.0"

# Setup logging
setup_logging(
    log_level=settings.log_level.value,
    json_logs=settings.is_production,
    service_name=SERVICE_NAME,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Application lifespan manager."""
    logger.info(
        "assessment_service_starting",
        environment=settings.environment.value,
        port=settings.ports.assessment,
    )

    # Startup
    try:
        PostgresClient.get_engine()
        if settings.is_development:
            await PostgresClient.create_schema()
        logger.info("postgres_connected")

        app.state.evidence_store = build_evidence_store(settings)
        app.state.notifier = build_notifier(settings)

    except Exception as e:
        logger.error("startup_failed", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("assessment_service_shutting_down")
    await app.state.notifier.close()
    await PostgresClient.close()


# Create FastAPI application
app = FastAPI(
    title="Bastion Assessment Service",
    description="Compliance assessments, evidence and maturity scoring",
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins_list,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Bind a request id to every log line emitted while handling the request."""
    clear_context()
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    bind_context(request_id=request_id, path=request.url.path)

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
@app.get("/api/v1/health", response_model=HealthResponse, tags=["Health"], include_in_schema=False)
async def health_check(request: Request) -> HealthResponse:
    """
    Service health check.

    Evidence storage being disabled does not degrade the service; it only
    means uploads are rejected.
    """
    components: dict[str, dict[str, Any]] = {
        "postgres": await PostgresClient.health_check(),
        "evidence_store": await request.app.state.evidence_store.health_check(),
    }

    all_healthy = all(c.get("status") in ("healthy", "disabled") for c in components.values())

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        components=components,
    )


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": "Bastion Assessment Service",
        "version": SERVICE_VERSION,
        "docs": "/docs",
    }


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(
    frameworks.router,
    prefix="/api/v1/frameworks",
    tags=["Frameworks"],
)

app.include_router(
    organizations.router,
    prefix="/api/v1/organizations",
    tags=["Organizations"],
)

app.include_router(
    assessments.router,
    prefix="/api/v1/assessments",
    tags=["Assessments"],
)

app.include_router(
    maturity.router,
    prefix="/api/v1/maturity",
    tags=["Maturity"],
)


# ============================================================================
# Error Handlers
# ============================================================================

_HTTP_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def _error_response(
    status_code: int,
    message: str,
    error_code: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=message, error_code=error_code, details=details or None)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


@app.exception_handler(AssessmentError)
async def assessment_error_handler(request: Request, exc: AssessmentError) -> JSONResponse:
    """Handle expected domain errors."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "assessment_error",
        error_code=exc.error_code,
        status_code=exc.status_code,
        error=exc.message,
        path=request.url.path,
    )
    details = dict(exc.details)
    if exc.retryable:
        details["retryable"] = True
    return _error_response(exc.status_code, exc.message, exc.error_code, details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle malformed requests."""
    logger.warning("request_validation_failed", path=request.url.path, errors=len(exc.errors()))
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Request validation failed",
        "validation_error",
        {"errors": jsonable_encoder(exc.errors(), exclude={"input", "ctx", "url"})},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    return _error_response(
        exc.status_code,
        str(exc.detail),
        _HTTP_ERROR_CODES.get(exc.status_code, "http_error"),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "internal_error",
    )


# ============================================================================
# Run with Uvicorn
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.assessment.main:app",
        host="0.0.0.0",
        port=settings.ports.assessment,
        reload=settings.debug,
        log_level=settings.log_level.value.lower(),
    )
