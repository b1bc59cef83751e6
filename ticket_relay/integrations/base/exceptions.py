#!/usr/bin/env python3
"""
Relay Error Classes
Error taxonomy shared by the Jira and Atlassian OAuth integrations
"""

from typing import Any, Optional


class RelayError(Exception):
    """Base class for every error raised by the relay"""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientInputError(RelayError):
    """A required parameter is missing or cannot be interpreted"""

    status_code = 400


class UpstreamError(RelayError):
    """
    An outbound call to Jira or the Atlassian identity service failed.

    Subclasses record which stage of the call broke so the HTTP boundary can
    decide how much detail to surface.
    """

    def __init__(self, message: str, operation: str = "request"):
        super().__init__(message)
        self.operation = operation


class UpstreamStatusError(UpstreamError):
    """The provider answered with a non-success status"""

    def __init__(self, operation: str, status_code: int, body: Any = None):
        super().__init__(f"{operation} failed with status {status_code}", operation)
        self.upstream_status = status_code
        self.body = body


class UpstreamNoResponseError(UpstreamError):
    """The request was sent but no response arrived (network error or timeout)"""

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        reason = f"{type(cause).__name__}: {cause}" if cause else "no response"
        super().__init__(f"{operation} received no response ({reason})", operation)
        self.cause = cause


class RequestSetupError(UpstreamError):
    """The request could not be built, usually because of missing configuration"""

    def __init__(self, operation: str, reason: str):
        super().__init__(f"{operation} could not be prepared: {reason}", operation)
        self.reason = reason
