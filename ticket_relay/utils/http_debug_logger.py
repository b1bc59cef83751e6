#!/usr/bin/env python3
"""
HTTP Debug Logger Utility

Logs outbound requests to Jira and the Atlassian identity service through
httpx event hooks. Credentials (Authorization headers, token fields in JSON
bodies and query strings) are always redacted before anything is written.
"""

import json
import logging
from typing import Any, Dict, List

import httpx

logger = logging.getLogger(__name__)

_SENSITIVE_HEADERS = {"authorization", "cookie", "set-cookie", "x-api-key"}
_SENSITIVE_FIELDS = {
    "access_token", "refresh_token", "client_secret", "code", "id_token",
    "accesstoken", "refreshtoken", "password", "api_token", "state",
}


class HTTPDebugLogger:
    """
    Debug logger for outbound HTTP traffic.

    Disabled by default; enable with HTTP_DEBUG_LOGGING_ENABLED=true.
    """

    def __init__(self, enabled: bool = False, log_level: int = logging.DEBUG, max_body: int = 2000):
        self.enabled = enabled
        self.log_level = log_level
        self.max_body = max_body

    def sanitize_headers(self, headers: httpx.Headers) -> Dict[str, str]:
        """Mask credentials in headers, keeping the auth scheme visible"""
        sanitized = {}
        for key, value in headers.items():
            if key.lower() not in _SENSITIVE_HEADERS:
                sanitized[key] = value
            elif key.lower() == "authorization" and " " in value:
                scheme = value.split(" ", 1)[0]
                sanitized[key] = f"{scheme} [REDACTED]"
            else:
                sanitized[key] = "[REDACTED]"
        return sanitized

    def sanitize_data(self, data: Any) -> Any:
        """Recursively redact token-like fields"""
        if isinstance(data, dict):
            return {
                key: "[REDACTED]" if str(key).lower() in _SENSITIVE_FIELDS else self.sanitize_data(value)
                for key, value in data.items()
            }
        if isinstance(data, list):
            return [self.sanitize_data(item) for item in data]
        return data

    def format_body(self, content: bytes, content_type: str) -> str:
        if not content:
            return "<empty>"
        if "json" not in content_type:
            return f"<{content_type or 'binary'} content, {len(content)} bytes>"
        try:
            parsed = json.loads(content)
        except ValueError:
            return f"<unparseable JSON, {len(content)} bytes>"
        formatted = json.dumps(self.sanitize_data(parsed), indent=2, ensure_ascii=False, sort_keys=True)
        if len(formatted) > self.max_body:
            return f"{formatted[:self.max_body]}... (truncated)"
        return formatted

    def sanitize_url(self, url: httpx.URL) -> str:
        if not url.query:
            return str(url)
        params = [
            (key, "[REDACTED]" if key.lower() in _SENSITIVE_FIELDS else value)
            for key, value in url.params.multi_items()
        ]
        return str(url.copy_with(params=params))

    async def log_request(self, request: httpx.Request) -> None:
        if not self.enabled:
            return
        log_lines = [
            "=" * 80,
            f"🔍 HTTP REQUEST {request.method} {self.sanitize_url(request.url)}",
            "Headers:",
        ]
        for key, value in self.sanitize_headers(request.headers).items():
            log_lines.append(f"  {key}: {value}")
        log_lines.append("Body:")
        log_lines.append(self.format_body(request.content, request.headers.get("content-type", "")))
        log_lines.append("=" * 80)
        logger.log(self.log_level, "\n".join(log_lines))

    async def log_response(self, response: httpx.Response) -> None:
        if not self.enabled:
            return
        await response.aread()
        elapsed = ""
        try:
            elapsed = f" in {response.elapsed.total_seconds() * 1000:.0f}ms"
        except RuntimeError:
            # elapsed is only available once the response is closed
            pass
        log_lines = [
            "=" * 80,
            f"📡 HTTP RESPONSE {response.status_code} for {response.request.method} "
            f"{self.sanitize_url(response.request.url)}{elapsed}",
            "Headers:",
        ]
        for key, value in self.sanitize_headers(response.headers).items():
            log_lines.append(f"  {key}: {value}")
        log_lines.append("Response Body:")
        log_lines.append(self.format_body(response.content, response.headers.get("content-type", "")))
        log_lines.append("=" * 80)
        logger.log(self.log_level, "\n".join(log_lines))


# Global debug logger instance
http_debug_logger = HTTPDebugLogger()


def enable_http_debug_logging(enabled: bool = True, log_level: int = logging.DEBUG) -> None:
    """
    Enable or disable HTTP debug logging globally.

    Args:
        enabled: Whether to enable debug logging
        log_level: Log level to use for debug messages
    """
    http_debug_logger.enabled = enabled
    http_debug_logger.log_level = log_level

    if enabled:
        logger.info(f"✅ HTTP debug logging enabled at level {logging.getLevelName(log_level)}")
    else:
        logger.info("❌ HTTP debug logging disabled")


def http_debug_event_hooks() -> Dict[str, List]:
    """Event hooks to pass to httpx.AsyncClient"""
    return {
        "request": [http_debug_logger.log_request],
        "response": [http_debug_logger.log_response],
    }
