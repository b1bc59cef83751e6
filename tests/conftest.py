#!/usr/bin/env python3
"""
Shared fixtures: test settings and an in-memory stand-in for Jira Cloud and
the Atlassian identity service, served through httpx.MockTransport
"""

import io
import zipfile
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from ticket_relay.config.settings import Settings
from ticket_relay.dependencies import get_current_settings, get_http_transport
from ticket_relay.main import app

JIRA_SITE = "https://example.atlassian.net"
ATTACHMENT_BASE = f"{JIRA_SITE}/rest/api/3/attachment/content"


def make_zip(names: List[str]) -> bytes:
    """Build an in-memory ZIP archive with the given entry names"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name in names:
            archive.writestr(name, b"data")
    return buffer.getvalue()


def attachment(filename: str, attachment_id: str, mime_type: str = "application/octet-stream", size: int = 4) -> Dict[str, Any]:
    """Element of an issue's fields.attachment array"""
    return {
        "id": attachment_id,
        "filename": filename,
        "mimeType": mime_type,
        "size": size,
        "content": f"{ATTACHMENT_BASE}/{attachment_id}",
    }


class FakeAtlassian:
    """Records every outbound request and answers like Jira Cloud would"""

    def __init__(self):
        self.issues: Dict[str, Any] = {}
        self.files: Dict[str, Any] = {}
        self.token_response: Tuple[int, Any] = (200, {
            "access_token": "new-access-token",
            "refresh_token": "new-refresh-token",
            "expires_in": 3600,
            "scope": "read:jira-work offline_access",
            "token_type": "Bearer",
        })
        self.resources_response: Tuple[int, Any] = (200, [])
        self.comment_status = 201
        self.requests: List[httpx.Request] = []

    def add_issue(self, key: str, attachments: List[Dict[str, Any]]) -> None:
        self.issues[key] = {"key": key, "fields": {"attachment": attachments}}

    @staticmethod
    def _reply(status: int, body: Any) -> httpx.Response:
        # bytes stand for a non-JSON page (SSO login, maintenance)
        if isinstance(body, bytes):
            return httpx.Response(status, content=body, headers={"Content-Type": "text/html"})
        return httpx.Response(status, json=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.url.host == "auth.atlassian.com" and path == "/oauth/token":
            status, body = self.token_response
            return self._reply(status, body)

        if path == "/oauth/token/accessible-resources":
            status, body = self.resources_response
            return self._reply(status, body)

        if request.method == "POST" and path.endswith("/comment"):
            return httpx.Response(self.comment_status, json={"id": "10100"})

        if "/rest/api/3/issue/" in path:
            key = path.rsplit("/", 1)[1]
            if key in self.issues:
                return self._reply(200, self.issues[key])
            return httpx.Response(404, json={"errorMessages": ["Issue does not exist or you do not have permission to see it."]})

        content = self.files.get(str(request.url))
        if isinstance(content, Exception):
            raise content
        if content is not None:
            return httpx.Response(200, content=content, headers={"Content-Type": "application/zip"})
        return httpx.Response(404, json={"errorMessages": ["Not found"]})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requests_matching(self, method: str, path_suffix: str) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.endswith(path_suffix)
        ]

    def requests_to_host(self, host: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


def build_settings(**overrides: Any) -> Settings:
    values: Dict[str, Optional[Any]] = {
        "environment": "testing",
        "jira_base_url": JIRA_SITE,
        "jira_email": "automation@example.com",
        "jira_api_token": "jira-api-token",
        "oauth_client_id": "client-id",
        "oauth_client_secret": "client-secret",
        "oauth_redirect_uri": "http://localhost:3000/oauth/callback",
        "oauth_refresh_token": None,
        "oauth_state_secret": "state-signing-secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return build_settings()


@pytest.fixture
def fake_atlassian() -> FakeAtlassian:
    return FakeAtlassian()


@pytest.fixture
def client(settings, fake_atlassian):
    """TestClient whose outbound calls all go to the fake"""
    app.dependency_overrides[get_current_settings] = lambda: settings
    app.dependency_overrides[get_http_transport] = lambda: fake_atlassian.transport
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
