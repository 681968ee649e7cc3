"""AdCanvas — compliance-aware design assistant for retail media creatives.

Main FastAPI application with lifespan management, CORS, and global error handling.
"""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adcanvas.api.router import api_router
from adcanvas.config import get_settings
from adcanvas.errors import AdCanvasError
from adcanvas.registry import Registry


def configure_logging() -> None:
    settings = get_settings()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if settings.DEBUG else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.LOG_LEVEL.upper())
        ),
    )


configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    settings = get_settings()

    # ── Startup ──
    logger.info("app_starting", debug=settings.DEBUG)

    app.state.registry = Registry.from_settings(settings)

    logger.info("app_started", platforms=app.state.registry.rules.supported_platforms())

    yield

    # ── Shutdown ──
    logger.info("app_shutting_down")
    app.state.registry.models.clear()
    logger.info("app_stopped")


# ── Create Application ──

app = FastAPI(
    title="AdCanvas",
    description=(
        "Design assistant for retail media creatives. "
        "Routes natural-language requests, proposes design options behind a human "
        "approval gate, and validates canvases against Amazon, Walmart and Flipkart rules."
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ── Middleware ──

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Global Exception Handlers ──

@app.exception_handler(AdCanvasError)
async def adcanvas_error_handler(request: Request, exc: AdCanvasError):
    """Map the error taxonomy onto status codes."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "request_failed",
        path=request.url.path,
        method=request.method,
        error=exc.error,
        message=exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "message": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed request fields are client errors."""
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"error": "validation_input_error", "message": details or "Invalid request"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all error handler for unhandled exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again.",
        },
    )


# ── Routes ──

app.include_router(api_router, prefix="/api/v1")


# ── Root endpoint ──

@app.get("/")
async def root():
    """Root endpoint — API info."""
    return {
        "name": "AdCanvas",
        "version": "1.0.0",
        "platforms": "/api/v1/platforms",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
