"""
FastAPI Main Application for the Records Service.

This module provides the REST API for the finance and K-12 record
types. Each record type has a runtime-editable schema (the schema API
under /spi/v1) and record CRUD endpoints (the record API under /api/v1)
that validate and project records through the live schema.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.auth.dependencies import WWW_AUTHENTICATE
from app.core import RequestContextMiddleware, Settings, configure_logging, get_logger, get_settings
from app.exceptions import SchemaServiceException, to_http_status
from app.routers import health
from app.routers.records import build_record_router
from app.routers.schemas import build_schema_router
from app.services.container import ServiceContainer
from app.services.health_service import APP_VERSION, HealthService
from app.services.resources import list_resources
from app.utils.negotiation import render_error

logger = get_logger(__name__)


# ============================================================
# OpenAPI Configuration
# ============================================================

API_TITLE = "Records Service API"
API_VERSION = APP_VERSION
API_DESCRIPTION = """
## Schema-driven record service

Finance and K-12 records whose field catalog can be edited at runtime.

### Schema API

`/spi/v1/{finance|k12}/schema/fields[/{name}]` - read, add, replace and
delete field definitions. `GET /fields` returns the schema revision in
`ETag`; mutations accept `If-Match` with that revision.

### Record API

`/api/v1/finances`, `/api/v1/k12` - record CRUD validated against the
live schema. Hidden fields never appear in responses.

### Authentication

HTTP Basic. `/health` is public.

### Formats

JSON by default, XML with `Accept: application/xml`.
"""

TAGS_METADATA = [
    {
        "name": "Schemas",
        "description": "Runtime-editable field catalog per record type.",
    },
    {
        "name": "Records",
        "description": "Record CRUD validated and projected through the live schema.",
    },
    {
        "name": "Health",
        "description": "System health check endpoint for load balancers and monitoring.",
    },
]

NOT_FOUND_MESSAGE = "The request resource is not found"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting Records Service API...", env=app.state.settings.env)

    container: ServiceContainer = app.state.container
    for resource in list_resources():
        try:
            registry = await run_in_threadpool(lambda: container.resource(resource.name).registry)
            logger.info(
                "Schema loaded",
                resource=resource.name,
                fields=len(registry.get_schema().fields)
            )
        except SchemaServiceException as e:
            # 첫 요청 시 다시 시도됨
            logger.error("Schema load failed at startup", resource=resource.name, error=e.message)

    yield

    # Shutdown
    logger.info("Shutting down Records Service API...")
    container.close()


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the service as an error envelope."""

    @app.exception_handler(SchemaServiceException)
    async def service_exception_handler(request: Request, exc: SchemaServiceException):
        status_code = to_http_status(exc.status)
        if status_code >= 500:
            logger.error(f"Service error: {exc}", details=exc.details)
        else:
            logger.info(f"Request rejected: {exc}")

        headers = {"WWW-Authenticate": WWW_AUTHENTICATE} if status_code == 401 else None
        return render_error(request, status_code, exc.message, headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = NOT_FOUND_MESSAGE
        else:
            message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return render_error(request, exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        return render_error(request, 400, f"Invalid request: {problems}")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        # 로그에는 상세 정보 기록
        logger.error(f"Unhandled exception: {exc}", exc_info=True)

        # 프로덕션 환경에서는 상세 에러 메시지 숨김
        if app.state.settings.is_production:
            message = "Internal server error"
        else:
            message = f"{type(exc).__name__}: {exc}"
        return render_error(request, 500, message)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Runtime configuration; read from the environment when omitted.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=TAGS_METADATA,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.container = ServiceContainer(settings)
    app.state.health_service = HealthService(app.state.container)

    # CORS 설정 (환경별)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins if settings.is_production else ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "Accept", "If-Match",
                       "X-Request-ID", "X-Correlation-ID"],
        expose_headers=["ETag", "X-Request-ID", "X-Correlation-ID"],
        max_age=86400,
    )

    # Request / Correlation ID (structlog context)
    app.add_middleware(RequestContextMiddleware)

    register_exception_handlers(app)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    for resource in list_resources():
        app.include_router(
            build_schema_router(resource),
            prefix=resource.schema_path,
            tags=["Schemas"]
        )
        app.include_router(
            build_record_router(resource),
            prefix=resource.base_path,
            tags=["Records"]
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
