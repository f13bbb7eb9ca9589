"""
Main FastAPI application.
"""
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from starlette.exceptions import HTTPException as StarletteHTTPException

from satprep.api.v1.api import api_router
from satprep.core.config import settings
from satprep.core.error_responses import ErrorMessages
from satprep.core.logging_config import setup_logging
from satprep.middleware import RequestLoggingMiddleware
from satprep.models import async_engine, create_all_tables
from satprep.services.content_source import ContentSourceClient
from satprep.services.identity import GoogleIdentityClient
from satprep.services.question_bank import QuestionBank

# Initialize logging configuration at startup
setup_logging()

logger = logging.getLogger(__name__)


def init_sentry(
    dsn: str,
    traces_sample_rate: float,
    environment: str,
    release: str,
) -> bool:
    """
    Initialize Sentry error tracking.

    Args:
        dsn: Sentry DSN; empty disables Sentry
        traces_sample_rate: Fraction of transactions to trace (0.0-1.0)
        environment: Deployment environment name
        release: Application version

    Returns:
        True if Sentry was initialized, False if disabled
    """
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=traces_sample_rate,
        environment=environment,
        release=release,
        send_default_pii=False,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(transaction_style="endpoint"),
        ],
    )
    logger.info(
        f"Sentry initialized for environment '{environment}' "
        f"with {int(traces_sample_rate * 100)}% trace sampling"
    )
    return True


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan event handler.

    - On startup: initializes Sentry, optionally creates tables, and loads
      the question bank (a failed load aborts startup)
    - On shutdown: disposes the database engine
    """
    init_sentry(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        environment=settings.ENV,
        release=settings.APP_VERSION,
    )

    if settings.DB_AUTO_CREATE:
        await create_all_tables()
        logger.info("Database tables created")

    if settings.QUESTION_BANK_PRELOAD:
        await app.state.question_bank.load()

    yield

    await async_engine.dispose()
    logger.info("Application shutting down")


# OpenAPI tags metadata
tags_metadata = [
    {
        "name": "health",
        "description": "Health check endpoints for monitoring application status",
    },
    {
        "name": "auth",
        "description": "Registration, sign-in, Google identity and profile endpoints",
    },
    {
        "name": "questions",
        "description": "Filtered retrieval from the cached SAT question bank",
    },
    {
        "name": "progress",
        "description": "Practice sessions, recorded responses and progress analytics",
    },
]


def _validation_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "loc": [str(part) for part in error.get("loc", [])],
                "msg": str(error.get("msg", "")).removeprefix("Value error, "),
                "type": str(error.get("type", "")),
            }
        )
    return errors


def _validation_message(errors: List[Dict[str, Any]]) -> str:
    """Human-readable summary such as 'password: Password must be ...'."""
    parts = []
    for error in errors:
        field = ".".join(p for p in error["loc"] if p not in ("body", "query", "path"))
        parts.append(f"{field}: {error['msg']}" if field else error["msg"])
    return "; ".join(parts) or "Invalid request."


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
        description=(
            "**SAT Prep API** - practice questions and progress tracking.\n\n"
            "This API provides:\n"
            "* Account registration, password and Google sign-in\n"
            "* Filtered SAT practice questions from a cached question bank\n"
            "* Study, quiz and test session tracking with per-question responses\n"
            "* Progress totals and per-domain accuracy\n\n"
            "## Authentication\n\n"
            "Progress and profile endpoints require a JWT Bearer token. "
            f"Obtain one via `{settings.API_PREFIX}/auth/login`."
        ),
        docs_url=f"{settings.API_PREFIX}/docs",
        redoc_url=f"{settings.API_PREFIX}/redoc",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        openapi_tags=tags_metadata,
    )

    # Application-owned services, loaded during lifespan startup
    app.state.question_bank = QuestionBank(
        ContentSourceClient(
            settings.OPENSAT_API_URL,
            timeout=settings.CONTENT_SOURCE_TIMEOUT_SECONDS,
        ),
        seed=settings.QUESTION_SHUFFLE_SEED,
    )
    app.state.identity_client = GoogleIdentityClient(
        settings.GOOGLE_USERINFO_URL,
        timeout=settings.IDENTITY_PROVIDER_TIMEOUT_SECONDS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Render HTTP errors in the {success, error} envelope.
        """
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """
        Report request validation errors as 400 with a readable message.
        """
        errors = _validation_errors(exc)
        logger.info(
            f"Validation error on {request.method} {request.url.path}: "
            f"{_validation_message(errors)}"
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": _validation_message(errors),
                "details": errors,
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """
        Handle unexpected exceptions without leaking internal details.

        Each failure gets a unique error_id that is logged with the full
        traceback and returned to the caller for support requests.
        """
        error_id = str(uuid.uuid4())

        logger.exception(
            f"Unhandled exception [error_id={error_id}]: {exc}",
            extra={"error_id": error_id},
        )
        sentry_sdk.capture_exception(exc)

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": ErrorMessages.INTERNAL_SERVER_ERROR,
                "errorId": error_id,
            },
        )

    return app


app = create_application()


@app.get("/")
async def root():
    """
    Root endpoint.
    """
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": f"{settings.API_PREFIX}/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
