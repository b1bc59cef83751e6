#!/usr/bin/env python3
"""
Main FastAPI application for the Jira EVTX Relay
"""

import logging
import time
from contextlib import asynccontextmanager

from ticket_relay import __version__
from ticket_relay.config.settings import get_settings


# Configure logging early to ensure DEBUG messages are captured
def setup_logging(settings=None):
    """Set up logging configuration - simplified to avoid duplicates"""
    settings = settings or get_settings()
    log_level = settings.log_level.upper()

    # If DEBUG is true, force DEBUG level
    if settings.debug:
        log_level = 'DEBUG'

    # Convert string level to logging level
    numeric_level = getattr(logging, log_level, logging.INFO)

    # Only configure if not already configured (check for any handlers)
    root_logger = logging.getLogger()
    if root_logger.handlers:
        # Already configured, just return a logger
        return logging.getLogger(__name__)

    # Simple basic config - let uvicorn handle most logging
    logging.basicConfig(
        level=numeric_level,
        format=settings.log_format,
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Create and return a logger for this module
    return logging.getLogger(__name__)

# Set up logging immediately
logger = setup_logging()

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ticket_relay.config.settings import Settings
from ticket_relay.dependencies import get_current_settings
from ticket_relay.integrations.base.exceptions import ClientInputError
from ticket_relay.routers.jira import router as jira_router
from ticket_relay.routers.oauth import router as oauth_router
from ticket_relay.utils.http_debug_logger import enable_http_debug_logging


async def startup_event():
    """FastAPI startup event handler"""
    settings = get_settings()
    logger.info(f"🚀 Starting {settings.app_name} ({settings.environment})")

    if settings.http_debug_logging_enabled:
        enable_http_debug_logging(
            True, getattr(logging, settings.http_debug_log_level.upper(), logging.DEBUG)
        )

    if not settings.verify_ssl:
        logger.warning("⚠️  TLS certificate verification is DISABLED for outbound calls")
    if not settings.jira_basic_auth_configured:
        logger.warning("⚠️  JIRA_BASE_URL/JIRA_EMAIL/JIRA_API_TOKEN not set - /jira-ticket will fail")
    if not settings.oauth_configured:
        logger.warning("⚠️  OAUTH_CLIENT_ID/OAUTH_CLIENT_SECRET/OAUTH_REDIRECT_URI not set - OAuth endpoints will fail")

    logger.info("🎉 Relay initialization completed")

async def shutdown_event():
    """FastAPI shutdown event handler"""
    logger.info("🛑 Shutting down Jira EVTX Relay")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    await startup_event()
    yield
    await shutdown_event()

# Create FastAPI app with lifespan
settings = get_settings()
app = FastAPI(
    title="Jira EVTX Relay API",
    description="Checks Jira Cloud tickets for Windows event log (.evtx) attachments, including inside ZIP archives",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)


@app.exception_handler(ClientInputError)
async def client_input_error_handler(request: Request, exc: ClientInputError):
    """Missing or unusable request parameters"""
    logger.info(f"400 on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors too, reported in the same shape"""
    logger.info(f"400 on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request parameters."})


# Include route modules
app.include_router(jira_router)
app.include_router(oauth_router)


@app.get("/health", tags=["System"])
async def health_check(current: Settings = Depends(get_current_settings)):
    """Health check reporting which credential sets are configured"""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": current.environment,
        "version": __version__,
        "services": {
            "jiraBasicAuth": "configured" if current.jira_basic_auth_configured else "not_configured",
            "oauth": "configured" if current.oauth_configured else "not_configured"
        }
    }


def run():
    """Console entry point: serve the app with uvicorn"""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
