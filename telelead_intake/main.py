# telelead_intake/main.py
from __future__ import annotations

import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import sentry_sdk
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from telelead_intake.core.config import Settings, load_settings
from telelead_intake.core.exceptions import (
    ConfigurationError,
    IntakeError,
    InternalError,
    InvalidBodyError,
)
from telelead_intake.core.logging import configure_structlog, get_structlog_logger
from telelead_intake.middleware.body_limit import BodySizeLimitMiddleware
from telelead_intake.middleware.logging import LoggingMiddleware
from telelead_intake.middleware.request_id import RequestIdMiddleware
from telelead_intake.routes import health, leads
from telelead_intake.services.forwarder import TeleleadForwarder

logger = get_structlog_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(
        "application.started",
        environment=settings.environment,
        telelead_url=settings.telelead_url,
        timeout_seconds=settings.telelead_timeout_seconds,
    )
    yield
    logger.info("application.shutdown_complete")


async def intake_exception_handler(request: Request, exc: IntakeError):
    """Render intake errors as ``{ok: false, error, ...}``."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed JSON or a non-object body."""
    errors = [
        {"loc": list(error.get("loc", [])), "msg": error.get("msg", "Validation error")}
        for error in exc.errors()
    ]
    logger.warning(
        "validation.error",
        path=request.url.path,
        method=request.method,
        errors=errors,
    )
    error = InvalidBodyError()
    return JSONResponse(status_code=error.status_code, content=error.to_content())


async def global_exception_handler(request: Request, exc: Exception):
    """Log unexpected exceptions; the caller only sees a generic 500."""
    error_id = f"err_{int(time.time())}_{hash(str(exc)) % 10000:04d}"
    logger.error(
        "unhandled.exception",
        error_id=error_id,
        error_type=type(exc).__name__,
        error=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    error = InternalError()
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error.to_content(),
        headers={"X-Error-ID": error_id},
    )


def init_sentry(settings: Settings) -> None:
    if not settings.sentry_dsn:
        return
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        integrations=[
            FastApiIntegration(),
            StarletteIntegration(),
        ],
        traces_sample_rate=1.0 if settings.is_development else 0.1,
        send_default_pii=False,
    )
    logger.info("sentry.initialized")


def create_app(settings: Optional[Settings] = None, forwarder=None) -> FastAPI:
    """
    Build the intake application.

    ``settings`` defaults to the environment (raising ``ConfigurationError``
    when TeleLead credentials are missing); ``forwarder`` defaults to a
    ``TeleleadForwarder`` built from those settings.
    """
    if settings is None:
        settings = load_settings()

    configure_structlog(settings.log_level, settings.log_format)
    init_sentry(settings)

    app = FastAPI(
        title="TeleLead Intake",
        version="1.0.0",
        description="Validates lead submissions and forwards them to TeleLead",
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.forwarder = forwarder or TeleleadForwarder.from_settings(settings)

    # Last added runs first: request id is bound before the access log.
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)
    origins = settings.origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    app.add_exception_handler(IntakeError, intake_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(health.router)
    app.include_router(leads.router, prefix=settings.api_prefix)

    if settings.static_dir:
        static_path = Path(settings.static_dir)
        if static_path.is_dir():
            app.mount("/", StaticFiles(directory=static_path, html=True), name="static")
        else:
            logger.warning("static.dir_missing", static_dir=settings.static_dir)

    logger.info("application.configured", environment=settings.environment)
    return app


def run() -> None:
    """Console entrypoint: refuse to start without TeleLead credentials."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        configure_structlog()
        logger.critical("configuration.invalid", error=e.message, missing=e.missing)
        sys.exit(1)

    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    run()
