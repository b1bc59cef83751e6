#!/usr/bin/env python3
"""
Tests for the Atlassian OAuth client
"""

import json
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from ticket_relay.integrations.atlassian import AtlassianOAuthClient
from ticket_relay.integrations.base.exceptions import (
    ClientInputError,
    RequestSetupError,
    UpstreamNoResponseError,
    UpstreamStatusError,
)

SCOPES = ["read:jira-work", "read:attachment:jira", "write:jira-work", "offline_access"]


def _client(fake_atlassian=None, **overrides):
    kwargs = {
        "client_id": "client-id",
        "client_secret": "client-secret",
        "redirect_uri": "http://localhost:3000/oauth/callback",
        "scopes": SCOPES,
    }
    kwargs.update(overrides)
    if fake_atlassian is not None:
        kwargs["transport"] = fake_atlassian.transport
    return AtlassianOAuthClient(**kwargs)


class TestAuthorizationUrl:
    """Consent URL construction (no network)"""

    @pytest.mark.asyncio
    async def test_contains_all_parameters(self):
        async with _client() as oauth:
            url = oauth.build_authorization_url("state-123")

        parts = urlsplit(url)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://auth.atlassian.com/authorize"
        params = {k: v[0] for k, v in parse_qs(parts.query).items()}
        assert params == {
            "audience": "api.atlassian.com",
            "client_id": "client-id",
            "scope": " ".join(SCOPES),
            "redirect_uri": "http://localhost:3000/oauth/callback",
            "state": "state-123",
            "response_type": "code",
            "prompt": "consent",
        }

    @pytest.mark.asyncio
    async def test_deterministic_for_same_state(self):
        async with _client() as oauth:
            assert oauth.build_authorization_url("s") == oauth.build_authorization_url("s")

    @pytest.mark.asyncio
    async def test_requires_client_configuration(self):
        async with _client(client_id=None) as oauth:
            with pytest.raises(RequestSetupError):
                oauth.build_authorization_url("state")

    @pytest.mark.asyncio
    async def test_rejects_empty_state(self):
        async with _client() as oauth:
            with pytest.raises(ValueError):
                oauth.build_authorization_url("")


class TestExchangeCode:
    """Authorization-code grant"""

    @pytest.mark.asyncio
    async def test_exchange_posts_authorization_code_grant(self, fake_atlassian):
        async with _client(fake_atlassian) as oauth:
            tokens = await oauth.exchange_code("auth-code")

        assert tokens.access_token == "new-access-token"
        assert tokens.refresh_token == "new-refresh-token"
        assert tokens.expires_in == 3600

        [request] = fake_atlassian.requests
        assert str(request.url) == "https://auth.atlassian.com/oauth/token"
        assert json.loads(request.content) == {
            "grant_type": "authorization_code",
            "client_id": "client-id",
            "client_secret": "client-secret",
            "code": "auth-code",
            "redirect_uri": "http://localhost:3000/oauth/callback",
        }

    @pytest.mark.asyncio
    async def test_exchange_failure_carries_provider_payload(self, fake_atlassian):
        fake_atlassian.token_response = (403, {"error": "invalid_grant", "error_description": "Invalid authorization code"})

        async with _client(fake_atlassian) as oauth:
            with pytest.raises(UpstreamStatusError) as exc_info:
                await oauth.exchange_code("stale-code")

        assert exc_info.value.upstream_status == 403
        assert exc_info.value.body["error"] == "invalid_grant"

    @pytest.mark.asyncio
    async def test_response_without_access_token_is_a_failure(self, fake_atlassian):
        fake_atlassian.token_response = (200, {"unexpected": True})

        async with _client(fake_atlassian) as oauth:
            with pytest.raises(UpstreamStatusError):
                await oauth.exchange_code("auth-code")

    @pytest.mark.asyncio
    async def test_non_json_token_response_is_a_failure(self, fake_atlassian):
        fake_atlassian.token_response = (200, b"<html>maintenance</html>")

        async with _client(fake_atlassian) as oauth:
            with pytest.raises(UpstreamStatusError) as exc_info:
                await oauth.exchange_code("auth-code")

        assert exc_info.value.upstream_status == 200
        assert exc_info.value.body == "<html>maintenance</html>"

    @pytest.mark.asyncio
    async def test_malformed_token_fields_are_a_failure(self, fake_atlassian):
        fake_atlassian.token_response = (200, {"access_token": "token", "expires_in": "soon"})

        async with _client(fake_atlassian) as oauth:
            with pytest.raises(UpstreamStatusError):
                await oauth.refresh("old-refresh-token")


class TestRefresh:
    """Refresh-token grant"""

    @pytest.mark.asyncio
    async def test_missing_refresh_token_never_calls_provider(self, fake_atlassian):
        async with _client(fake_atlassian) as oauth:
            with pytest.raises(ClientInputError):
                await oauth.refresh(None)
            with pytest.raises(ClientInputError):
                await oauth.refresh("")

        assert fake_atlassian.requests == []

    @pytest.mark.asyncio
    async def test_refresh_posts_refresh_token_grant(self, fake_atlassian):
        async with _client(fake_atlassian) as oauth:
            tokens = await oauth.refresh("old-refresh-token")

        assert tokens.access_token == "new-access-token"
        assert tokens.refresh_token == "new-refresh-token"
        body = json.loads(fake_atlassian.requests[0].content)
        assert body["grant_type"] == "refresh_token"
        assert body["refresh_token"] == "old-refresh-token"

    @pytest.mark.asyncio
    async def test_refresh_keeps_token_when_not_rotated(self, fake_atlassian):
        fake_atlassian.token_response = (200, {"access_token": "fresh", "expires_in": 3600})

        async with _client(fake_atlassian) as oauth:
            tokens = await oauth.refresh("old-refresh-token")

        assert tokens.access_token == "fresh"
        assert tokens.refresh_token == "old-refresh-token"

    @pytest.mark.asyncio
    async def test_refresh_network_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(transport=httpx.MockTransport(handler)) as oauth:
            with pytest.raises(UpstreamNoResponseError):
                await oauth.refresh("old-refresh-token")


class TestAccessibleResources:
    """Cloud site discovery"""

    @pytest.mark.asyncio
    async def test_projects_sites(self, fake_atlassian):
        fake_atlassian.resources_response = (200, [{
            "id": "cloud-1",
            "name": "example",
            "url": "https://example.atlassian.net",
            "scopes": ["read:jira-work"],
            "avatarUrl": "https://example/avatar.png",
        }])

        async with _client(fake_atlassian) as oauth:
            sites = await oauth.get_accessible_resources("access-token")

        assert [s.model_dump() for s in sites] == [
            {"id": "cloud-1", "name": "example", "url": "https://example.atlassian.net"}
        ]
        assert fake_atlassian.requests[0].headers["Authorization"] == "Bearer access-token"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [[], {"not": "a list"}])
    async def test_unusable_body_means_no_sites(self, fake_atlassian, body):
        fake_atlassian.resources_response = (200, body)

        async with _client(fake_atlassian) as oauth:
            assert await oauth.get_accessible_resources("access-token") == []

    @pytest.mark.asyncio
    async def test_provider_error(self, fake_atlassian):
        fake_atlassian.resources_response = (401, {"code": 401, "message": "Unauthorized"})

        async with _client(fake_atlassian) as oauth:
            with pytest.raises(UpstreamStatusError):
                await oauth.get_accessible_resources("expired-token")

    @pytest.mark.asyncio
    async def test_non_json_body_is_a_failure(self, fake_atlassian):
        fake_atlassian.resources_response = (200, b"<html>login</html>")

        async with _client(fake_atlassian) as oauth:
            with pytest.raises(UpstreamStatusError):
                await oauth.get_accessible_resources("access-token")

    @pytest.mark.asyncio
    async def test_malformed_entries_are_skipped(self, fake_atlassian):
        fake_atlassian.resources_response = (200, [
            "cloud-0",
            {"id": "cloud-1", "name": "example", "url": "https://example.atlassian.net"},
        ])

        async with _client(fake_atlassian) as oauth:
            sites = await oauth.get_accessible_resources("access-token")

        assert [s.id for s in sites] == ["cloud-1"]
