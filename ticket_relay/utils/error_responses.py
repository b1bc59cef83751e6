"""
Error responses shared by the routers.

Upstream failures are logged with everything known about them and answered
with a generic message; the caller never sees provider bodies or tokens.
"""

import logging

from fastapi.responses import JSONResponse

from ticket_relay.integrations.base.exceptions import (
    RequestSetupError,
    UpstreamError,
    UpstreamNoResponseError,
    UpstreamStatusError,
)

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def log_upstream_failure(error: UpstreamError, context: str) -> None:
    """Log an upstream failure with as much detail as its variant carries"""
    logger.error("--- ERROR DETAILS ---")
    logger.error(f"{context}: {error.message}")
    if isinstance(error, UpstreamStatusError):
        logger.error(f"Provider response status: {error.upstream_status}")
        logger.error(f"Provider response data: {error.body}")
    elif isinstance(error, UpstreamNoResponseError):
        logger.error(f"No response received from provider: {error.cause!r}")
    elif isinstance(error, RequestSetupError):
        logger.error(f"Error setting up provider request: {error.reason}")
    logger.error("----------------------")


def upstream_error_response(error: UpstreamError, context: str, message: str) -> JSONResponse:
    log_upstream_failure(error, context)
    return error_response(500, message)
