"""
Youth League API Server

FastAPI server exposing accounts, players, leagues, seasons, positions,
sports, registrations and SMTP configuration for a youth sports league.
"""

from contextlib import asynccontextmanager
import logging

import sentry_sdk
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded  # type: ignore
from sqlalchemy.exc import InterfaceError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from league_api import config
from league_api.api.routes import router, limiter as routes_limiter
from league_api.database import db
from league_api.database.init_defaults import init_defaults
from league_api.utils.errors import (
    INVALID_JSON_DETAIL,
    handle_error,
    is_default_detail,
    is_payload_error,
    send_status,
)

# Set up logging
numeric_level = getattr(logging, config.LOG_LEVEL, logging.INFO)
logging.basicConfig(
    level=numeric_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

if config.SENTRY and config.SENTRY_DSN:
    sentry_sdk.init(dsn=config.SENTRY_DSN, traces_sample_rate=config.SENTRY_TSR)
    logger.info("Sentry error reporting enabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup and shutdown events."""
    logger.info("Starting up Youth League API...")

    # Don't raise on failure: requests report 502 until the store is reachable
    try:
        await db.init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        sentry_sdk.capture_exception(e)

    try:
        await init_defaults()
        logger.info("Default values initialized")
    except Exception as e:
        logger.error(f"Failed to initialize defaults: {e}", exc_info=True)
        sentry_sdk.capture_exception(e)

    yield  # App is running

    logger.info("Shutting down Youth League API...")
    await db.engine.dispose()


app = FastAPI(
    title="Youth League API",
    description="API for managing youth sports league accounts, players, seasons and registrations",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup rate limiter
app.state.limiter = routes_limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return send_status(429, f"rate limit exceeded: {exc.detail}")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as {"status": ..., "detail": ...}."""
    detail = None if is_default_detail(exc.status_code, exc.detail) else exc.detail
    return send_status(exc.status_code, detail, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or invalid request bodies are always a 400."""
    if is_payload_error(list(exc.errors())):
        return send_status(400, INVALID_JSON_DETAIL)
    return send_status(400, handle_error(exc))


@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
async def store_unavailable_handler(request: Request, exc: Exception):
    logger.error(f"Database unavailable: {exc}")
    sentry_sdk.capture_exception(exc)
    return send_status(502)


# Add CORS middleware - origins configured via ALLOWED_ORIGINS env var
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
