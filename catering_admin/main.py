"""FastAPI application initialization."""

from contextlib import asynccontextmanager
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catering_admin.api.auth import router as auth_router
from catering_admin.api.middleware import CorrelationIdMiddleware
from catering_admin.api.routes import router
from catering_admin.api.users import router as users_router
from catering_admin.config import get_settings
from catering_admin.errors import AppError
from catering_admin.services.logging_service import configure_logging, get_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = get_logger("main")

    # Fail fast on unusable signing configuration
    settings.token_config()

    try:
        from catering_admin.database import init_database, run_migrations

        await init_database()
        await run_migrations()
        logger.info("database_initialized")
    except Exception as e:
        logger.warning(
            "database_initialization_failed",
            error=str(e),
            note="Continuing without database - account routes will fail until it is reachable",
        )

    logger.info("application_started", log_level=settings.log_level)

    yield

    try:
        from catering_admin.database import close_database

        await close_database()
    except Exception as e:
        logger.warning("database_close_failed", error=str(e))

    logger.info("application_shutdown")


app = FastAPI(
    title="Catering Admin API",
    description="Admin account authentication and session management",
    version="0.1.0",
    lifespan=lifespan,
)


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or str(uuid4())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render service errors in the standard envelope."""
    correlation_id = _correlation_id(request)
    structlog.get_logger().info(
        "request_failed",
        correlation_id=correlation_id,
        error_type=type(exc).__name__,
        status_code=exc.status_code,
    )
    headers = {"X-Correlation-Id": correlation_id}
    if exc.headers:
        headers.update(exc.headers)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with a 400 envelope naming the first bad field."""
    correlation_id = _correlation_id(request)

    errors = exc.errors()
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", ["unknown"]))
        message = first_error.get("msg", "Validation failed")
        detail = f"Field '{field}': {message}"
    else:
        detail = "Request validation failed"

    structlog.get_logger().warning(
        "validation_error",
        correlation_id=correlation_id,
        detail=detail,
    )

    return JSONResponse(
        status_code=400,
        content={"success": False, "message": detail},
        headers={"X-Correlation-Id": correlation_id},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Generic 500 for anything outside the error taxonomy (e.g. database down)."""
    correlation_id = _correlation_id(request)
    structlog.get_logger().error(
        "unhandled_exception",
        correlation_id=correlation_id,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error"},
        headers={"X-Correlation-Id": correlation_id},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Correlation ID middleware for request tracking and observability
app.add_middleware(CorrelationIdMiddleware)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(router)
