"""
TeamHub Collaboration Backend

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from teamhub.config import get_settings
from teamhub.database import init_db, close_db
from teamhub.errors import CascadeFailed, TeamHubError
from teamhub.api.v1 import router as api_v1_router
from teamhub.api.middleware.request_id import RequestIdMiddleware
from teamhub.notifications.dispatcher import get_dispatcher
from teamhub.schemas.common import ErrorResponse, FieldError, HealthResponse
from teamhub.logging_config import configure_logging, get_logger

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    # Configure logging first
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    # Startup
    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    logger.info("Database initialized")

    yield

    # Shutdown
    logger.info("Shutting down...")
    dispatcher = get_dispatcher()
    if dispatcher.pending:
        logger.info("Waiting for %d notification(s)", dispatcher.pending)
        await dispatcher.drain()
    await close_db()
    logger.info("Database connections closed")


# Create FastAPI application
app = FastAPI(
    title=settings.project_name,
    description="""
    TeamHub Collaboration Backend

    Organizations, teams and projects with consistent, denormalized membership.

    ## Architectural Invariants

    1. Symmetric membership: every membership edge has its reverse edge
    2. Atomic cascades: a mutation is fully applied or not applied at all
    3. Gate before mutation: roles are checked against pre-mutation state
    4. Post-commit notifications: delivery never affects the committed cascade
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# LAST added = OUTERMOST; CORS wraps everything so error responses carry its headers
_cors_origins = [
    "http://localhost:3000",
    "http://localhost:5173",  # Vite default
    "http://127.0.0.1:3000",
]

app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(request: Request, status_code: int, message: str, **extra) -> JSONResponse:
    headers = {}
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        headers["X-Request-ID"] = req_id
    body = ErrorResponse(status_code=status_code, message=message, **extra)
    if req_id and status_code >= 500:
        body.request_id = req_id
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


@app.exception_handler(TeamHubError)
async def teamhub_exception_handler(request: Request, exc: TeamHubError):
    """Render domain errors with their public message only."""
    if isinstance(exc, CascadeFailed):
        logger.warning("Request failed: cascade aborted", extra={"path": request.url.path})
    return _error_response(request, exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
):
    """Handle request validation errors."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append(FieldError(field=field, message=error["msg"], type=error["type"]))
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        errors=errors,
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
):
    """Handle unexpected exceptions without exposing internal state."""
    logger.exception("Unhandled exception: %s", exc)
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        CascadeFailed.default_message,
    )


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(
        status="ok",
        version=settings.version,
        database="connected",
        notifications={"pending": get_dispatcher().pending},
    )


# Mount API v1 routes
app.include_router(
    api_v1_router,
    prefix=settings.api_v1_prefix,
)


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "teamhub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
