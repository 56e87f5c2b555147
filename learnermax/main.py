"""LearnerMax API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnermax.config import get_settings
from learnermax.core.context import get_request_id
from learnermax.core.errors import ConfigurationError
from learnermax.core.logging import configure_structlog, get_logger
from learnermax.core.middleware import RequestContextMiddleware
from learnermax.core.redis import init_redis, shutdown_redis
from learnermax.courses.router import router as courses_router
from learnermax.courses.service import LessonService
from learnermax.enrollment.repository import EnrollmentRepository
from learnermax.enrollment.router import router as enrollments_router
from learnermax.enrollment.service import EnrollmentService
from learnermax.health import router as health_router
from learnermax.progress.cache import ProgressCache
from learnermax.progress.repository import ProgressRepository
from learnermax.progress.router import router as progress_router
from learnermax.progress.service import ProgressStore
from learnermax.video.router import router as video_router
from learnermax.video.service import CredentialIssuer


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_to_files=not settings.is_testing)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Wire services onto ``app.state``.

    Missing CloudFront configuration aborts startup. Redis is optional, and a
    database outage leaves the data endpoints answering 503.
    """
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    if not settings.video_delivery_configured:
        logger.error(
            "video_delivery_not_configured",
            missing=settings.missing_video_settings,
        )
        raise ConfigurationError(
            "Video delivery is not configured; missing: "
            + ", ".join(settings.missing_video_settings)
        )

    app.state.redis = None
    try:
        app.state.redis = await init_redis()
    except Exception as e:  # noqa: BLE001
        logger.warning(
            "redis_init_skipped",
            error=str(e),
            message="Running without Redis - progress reads are not cached",
        )

    # Imported here so the app can be built without the Cassandra driver loaded
    from learnermax.core.database import init_async_cassandra, shutdown_async_cassandra

    try:
        session = await init_async_cassandra()
        keyspace = settings.cassandra_keyspace

        lessons = LessonService(session=session, keyspace=keyspace)
        enrollment_service = EnrollmentService(
            repository=EnrollmentRepository(session=session, keyspace=keyspace),
            lessons=lessons,
        )
        app.state.lesson_service = lessons
        app.state.enrollment_service = enrollment_service
        app.state.progress_store = ProgressStore(
            repository=ProgressRepository(session=session, keyspace=keyspace),
            lessons=lessons,
            cache=ProgressCache(app.state.redis, settings.progress_cache_ttl_seconds),
        )
        app.state.credential_issuer = CredentialIssuer.from_settings(
            settings, gate=enrollment_service.gate, lessons=lessons
        )
        logger.info("services_initialized")
    except ConnectionError as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    logger.info("shutting_down_application")
    await shutdown_redis()
    await shutdown_async_cassandra()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # debug=False keeps Starlette from rendering tracebacks in responses
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="LearnerMax - lesson access and completion API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id() or None

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
            content={
                "error": True,
                "message": str(exc.detail)
                if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                or exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
                else "Internal server error",
                "status_code": exc.status_code,
                "request_id": _get_request_id_safe(request),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle validation errors, listing the offending fields."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "message": "Validation error",
                "status_code": 422,
                "request_id": _get_request_id_safe(request),
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler. Details go to the logs, never to the client."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "message": "An unexpected error occurred. Please try again later.",
                "status_code": 500,
                "request_id": _get_request_id_safe(request),
            },
        )

    app.include_router(health_router)
    app.include_router(enrollments_router)
    app.include_router(courses_router)
    app.include_router(video_router)
    app.include_router(progress_router)

    return app


app = create_app()
