"""Serious People backend: FastAPI application entry point."""

import signal
import uuid
from contextlib import asynccontextmanager

# Logging is configured before the remaining imports: modules create their
# structlog loggers at import time and the processor chain is cached on first use.
from serious_people.core.config import get_settings
from serious_people.core.logging import configure_structlog

configure_structlog(
    log_level="DEBUG" if get_settings().debug else "INFO",
    json_logs=not get_settings().debug,
)

import structlog

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from serious_people.api.deps import to_http_exception
from serious_people.api.routes import api_router
from serious_people.core.exceptions import SeriousPeopleError
from serious_people.db import close_db, close_redis, init_db, init_redis
from serious_people.middleware.correlation import get_correlation_id, setup_correlation_middleware

logger = structlog.get_logger(__name__)


def validate_settings() -> None:
    """Refuse to start without the secrets production needs."""
    settings = get_settings()
    missing = []
    if not settings.auth_jwt_secret:
        missing.append("AUTH_JWT_SECRET")
    if not settings.anthropic_api_key and not settings.debug:
        missing.append("ANTHROPIC_API_KEY")
    if missing:
        raise RuntimeError(f"Missing required settings at startup: {missing}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect stores on startup, release them on shutdown."""
    # Flipped by SIGTERM; /api/health then answers 503 while in-flight requests finish
    app.state.shutting_down = False

    def handle_sigterm(signum, frame):
        app.state.shutting_down = True
        logger.info("sigterm_received", action="health_check_503_draining_connections")

    signal.signal(signal.SIGTERM, handle_sigterm)

    settings = get_settings()
    validate_settings()
    logger.info(
        "startup_begin",
        app_name=settings.app_name,
        debug=settings.debug,
        artifact_catalog=settings.plan_artifact_keys,
        max_concurrent_generations=settings.max_concurrent_generations,
    )

    await init_db()
    await init_redis()
    logger.info("startup_complete")

    yield

    logger.info("shutdown_begin")
    await close_redis()
    await close_db()
    logger.info("shutdown_complete")


# ==================== EXCEPTION HANDLERS ====================


def _error_response(
    request: Request,
    status_code: int,
    detail,
    headers: dict[str, str] | None = None,
    exc: Exception | None = None,
) -> JSONResponse:
    """Log the failure with a fresh debug_id and return the sanitised body."""
    debug_id = str(uuid.uuid4())
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request_failed",
        status_code=status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=getattr(request.state, "user_id", None),
        detail=detail if status_code < 500 else None,
        error=str(exc) if exc is not None else None,
        error_type=type(exc).__name__ if exc is not None else None,
        exc_info=exc if status_code >= 500 and exc is not None else None,
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "debug_id": debug_id},
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """HTTPException -> {detail, debug_id}; headers such as Retry-After pass through."""
    return _error_response(request, exc.status_code, exc.detail, headers=exc.headers)


async def domain_exception_handler(request: Request, exc: SeriousPeopleError) -> JSONResponse:
    """Domain errors that escape a route are mapped to their HTTP status."""
    http_exc = to_http_exception(exc)
    return _error_response(request, http_exc.status_code, http_exc.detail, headers=http_exc.headers, exc=exc)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else is a 500 with no internals in the body."""
    return _error_response(request, 500, "Internal server error", exc=exc)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Serious People: coaching journey progression and Serious Plan generation",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    # Added last so it wraps CORS and sees every request first
    setup_correlation_middleware(app)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(SeriousPeopleError, domain_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("serious_people.main:app", host="0.0.0.0", port=8000, reload=get_settings().debug)
