#!/usr/bin/env python3
"""
Shared httpx helpers
Bearer authentication, client construction and error translation
"""

import logging
from typing import Any, Optional

import httpx

from ticket_relay.utils.http_debug_logger import http_debug_event_hooks

from .exceptions import RequestSetupError, UpstreamNoResponseError, UpstreamStatusError

logger = logging.getLogger(__name__)


class BearerAuth(httpx.Auth):
    """Attach an OAuth access token as an Authorization: Bearer header"""

    def __init__(self, token: str):
        self.token = token

    def auth_flow(self, request: httpx.Request):
        request.headers["Authorization"] = f"Bearer {self.token}"
        yield request


def build_async_client(
    auth: Optional[httpx.Auth] = None,
    timeout: float = 30.0,
    verify: bool = True,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    headers: Optional[dict] = None,
) -> httpx.AsyncClient:
    """
    Create an AsyncClient with the relay's defaults.

    Args:
        auth: httpx auth handler (basic or bearer)
        timeout: Per-request timeout in seconds
        verify: Verify TLS certificates
        transport: Optional transport override (tests inject httpx.MockTransport)
        headers: Extra default headers
    """
    default_headers = {"Accept": "application/json"}
    if headers:
        default_headers.update(headers)

    client_kwargs: dict = {
        "auth": auth,
        "timeout": timeout,
        "headers": default_headers,
        "event_hooks": http_debug_event_hooks(),
    }
    if transport is not None:
        client_kwargs["transport"] = transport
    else:
        client_kwargs["verify"] = verify
    return httpx.AsyncClient(**client_kwargs)


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def decode_json(response: httpx.Response, operation: str) -> Any:
    """
    Parse a successful response body as JSON.

    Raises:
        UpstreamStatusError: The body is not JSON (e.g. an SSO or maintenance page)
    """
    try:
        return response.json()
    except ValueError as e:
        logger.error(f"❌ {operation}: provider responded with {response.status_code} but the body is not JSON")
        logger.error(f"❌ {operation}: response body: {response.text[:500]}")
        raise UpstreamStatusError(operation, response.status_code, response.text) from e


async def send_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    operation: str,
    **kwargs: Any,
) -> httpx.Response:
    """
    Send a request and translate httpx failures into the relay error taxonomy.

    Raises:
        UpstreamStatusError: The provider answered with a 4xx/5xx status
        UpstreamNoResponseError: Network failure or timeout
        RequestSetupError: The URL or request could not be built
    """
    try:
        response = await client.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    except httpx.HTTPStatusError as e:
        body = _response_body(e.response)
        logger.error(f"❌ {operation}: provider responded with {e.response.status_code}")
        logger.error(f"❌ {operation}: response body: {body}")
        raise UpstreamStatusError(operation, e.response.status_code, body) from e

    except (httpx.UnsupportedProtocol, httpx.InvalidURL, httpx.LocalProtocolError) as e:
        logger.error(f"❌ {operation}: error setting up request: {e}")
        raise RequestSetupError(operation, str(e)) from e

    except httpx.RequestError as e:
        logger.error(f"❌ {operation}: no response received: {type(e).__name__}: {e}")
        raise UpstreamNoResponseError(operation, e) from e
