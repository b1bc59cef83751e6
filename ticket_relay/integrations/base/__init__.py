#!/usr/bin/env python3
"""
Base integration module
Contains the error taxonomy and httpx helpers shared by all integrations
"""

from .exceptions import (
    ClientInputError,
    RelayError,
    RequestSetupError,
    UpstreamError,
    UpstreamNoResponseError,
    UpstreamStatusError,
)
from .http_client import BearerAuth, build_async_client, decode_json, send_request

__all__ = [
    "RelayError",
    "ClientInputError",
    "UpstreamError",
    "UpstreamStatusError",
    "UpstreamNoResponseError",
    "RequestSetupError",
    "BearerAuth",
    "build_async_client",
    "decode_json",
    "send_request"
]
