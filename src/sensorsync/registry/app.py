"""FastAPI application for the device registry.

This is the main entry point for the SensorSync API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..common.database import check_database_health
from ..common.error_sanitizer import sanitize_error_message
from ..common.exceptions import SensorSyncError
from .api.dependencies import (
    close_db_pool,
    close_notification_channel,
    get_config,
    get_db_pool_or_none,
    get_notification_channel_or_none,
    init_db_pool,
    init_notification_channel,
)
from .api.router import router

API_VERSION = "1.0.0"

config = get_config()

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: Initialize database pool and MQTT channel
    - Shutdown: Stop MQTT channel and close database pool
    """
    # Startup
    logger.info("Starting SensorSync API...")

    try:
        await init_db_pool(config)
        logger.info("Database pool initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database pool: {e}")
        raise

    try:
        init_notification_channel(config)
        logger.info(f"MQTT channel started for {config.mqtt_host}:{config.mqtt_port}")
    except Exception as e:
        logger.warning(f"Failed to start MQTT channel: {e}")
        # Registry endpoints still work; notifications are best effort

    yield

    # Shutdown (reverse order of initialization)
    logger.info("Shutting down SensorSync API...")

    close_notification_channel()
    logger.info("MQTT channel stopped")

    await close_db_pool()
    logger.info("Database pool closed")


# Create FastAPI application
app = FastAPI(
    title="SensorSync Device Registry API",
    description="""
    Backend for humidity-sensing embedded devices.

    ## Features

    - **Accounts**: Sign up and log in with a username and password
    - **Devices**: Register devices and record their humidity readings
    - **Notifications**: New devices and humidity changes are published over MQTT

    ## Topics

    - `project/newDevice`: payload `id:<deviceId>`
    - `project/newHumidity`: payload `<deviceId>:<humidity>`
    """,
    version=API_VERSION,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials="*" not in config.cors_origins,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)

# Include routers
app.include_router(router)


# ========== Exception Handlers ==========


async def sensorsync_exception_handler(request: Request, exc: SensorSyncError):
    """Answer domain errors with their mapped HTTP status.

    4xx messages only echo what the caller sent (ids, usernames) and are
    returned verbatim. 5xx messages may carry store or broker internals.
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc}")
        detail = sanitize_error_message(exc.message)
    else:
        logger.info(f"{exc.code} on {request.url.path}: {exc.message}")
        detail = exc.message
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
):
    """Malformed or incomplete request bodies are client errors (400)."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    detail = f"{field}: {message}" if field else message
    return JSONResponse(status_code=400, content={"detail": detail})


async def generic_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


app.add_exception_handler(SensorSyncError, sensorsync_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


# ========== Service Endpoints ==========


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "SensorSync Device Registry API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health():
    """Global health check.

    Reports the database pool and the MQTT connection separately. A broker
    outage only degrades the service since notifications are best effort.
    """
    db = await check_database_health(get_db_pool_or_none())
    if "error" in db:
        db["error"] = sanitize_error_message(db["error"])

    channel = get_notification_channel_or_none()
    notifications = {"connected": bool(channel and channel.is_connected())}

    if not db["healthy"]:
        status = "unhealthy"
    elif not notifications["connected"]:
        status = "degraded"
    else:
        status = "healthy"

    return {"status": status, "database": db, "notifications": notifications}


@app.get("/api/config")
async def get_frontend_config():
    """Get frontend configuration.

    The web client reads the backend URL from here instead of hard-coding it.
    """
    return {
        "backendUrl": config.backend_url,
        "version": API_VERSION,
    }


# Entry point for running with uvicorn
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.sensorsync.registry.app:app",
        host="0.0.0.0",
        port=config.port,
        reload=True,
    )
