"""FastAPI application entry point — ResolveIt"""

import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from resolveit import __version__
from resolveit.config import settings, validate_settings
from resolveit.core.logging import log, setup_logging
from resolveit.core.exceptions import AppException
from resolveit.api.rate_limit import RateLimitMiddleware
from resolveit.api.routes import admin, auth, cases, dashboard, uploads, users
from resolveit.tasks.scheduler import get_scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    setup_logging(
        debug=settings.DEBUG,
        log_format=settings.LOG_FORMAT,
        log_dir="logs" if settings.get("LOG_TO_FILE", True) else None,
    )
    log.info(f"Starting {settings.APP_NAME}...")
    log.info(f"Environment: {settings.current_env}")
    validate_settings()

    # Re-arm transitions that were pending when the process last stopped
    scheduler = get_scheduler()
    try:
        await scheduler.recover()
    except Exception as e:
        log.warning(f"Transition recovery failed (non-fatal): {e}")

    yield

    log.info(f"Shutting down ({scheduler.armed_count} armed transition timers)...")
    await scheduler.shutdown()


app = FastAPI(
    title=settings.APP_NAME,
    description="Case management for community mediation",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Per-IP request limit on the API routes
app.add_middleware(RateLimitMiddleware)


@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Log all requests."""
    request_id = str(uuid.uuid4())[:8]
    start_time = time.time()
    request.state.request_id = request_id

    with log.contextualize(request_id=request_id):
        log.info(
            "Request started",
            method=request.method,
            path=request.url.path,
        )
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000
        log.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

    return response


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Handle application exceptions."""
    if exc.status_code >= 500:
        # Operation name only; the underlying error was logged where it happened
        log.error(f"{exc.message} ({exc.details})")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "Invalid request",
            "details": {"errors": jsonable_errors(exc)},
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    log.exception("Unhandled exception")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )


# Routes
app.include_router(users.router, prefix=settings.API_PREFIX, tags=["users"])
app.include_router(cases.router, prefix=settings.API_PREFIX, tags=["cases"])
app.include_router(admin.router, prefix=settings.API_PREFIX, tags=["admin"])
app.include_router(auth.router, prefix=settings.API_PREFIX, tags=["auth"])
app.include_router(uploads.router, prefix=settings.API_PREFIX, tags=["uploads"])
app.include_router(dashboard.router, prefix=settings.API_PREFIX, tags=["dashboard"])
app.include_router(dashboard.ws_router, tags=["realtime"])

Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.APP_NAME}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.APP_NAME,
        "version": __version__,
        "docs": "/docs" if settings.DEBUG else None,
    }
