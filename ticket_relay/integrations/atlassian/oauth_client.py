#!/usr/bin/env python3
"""
Atlassian OAuth 2.0 (3LO) Client
Consent URL construction, authorization-code exchange, token refresh and
accessible-resources lookup against Atlassian's identity service
"""

import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from ticket_relay.schemas.oauth import CloudSite, TokenPair

from ..base.exceptions import ClientInputError, RequestSetupError, UpstreamStatusError
from ..base.http_client import BearerAuth, build_async_client, decode_json, send_request

logger = logging.getLogger(__name__)

AUDIENCE = "api.atlassian.com"


class AtlassianOAuthClient:
    """
    Client for the Atlassian authorization server.

    Nothing is stored between calls: tokens are handed back to the caller,
    who is responsible for keeping the refresh token.
    """

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        redirect_uri: Optional[str],
        scopes: Sequence[str],
        auth_url: str = "https://auth.atlassian.com",
        api_url: str = "https://api.atlassian.com",
        timeout: float = 30.0,
        verify: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes)
        self.auth_url = auth_url.rstrip('/')
        self.api_url = api_url.rstrip('/')
        self.client = build_async_client(
            timeout=timeout,
            verify=verify,
            transport=transport
        )

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()

    @property
    def token_url(self) -> str:
        return f"{self.auth_url}/oauth/token"

    def _require(self, operation: str, **values: Optional[str]) -> None:
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise RequestSetupError(operation, f"missing OAuth configuration: {', '.join(missing)}")

    def build_authorization_url(self, state: str) -> str:
        """
        Consent page URL the user is redirected to.

        Args:
            state: Fresh anti-replay value, verified again on the callback

        Returns:
            Absolute URL on the Atlassian authorization server
        """
        self._require("authorization redirect", client_id=self.client_id, redirect_uri=self.redirect_uri)
        if not state:
            raise ValueError("OAuth state must not be empty")
        params = {
            "audience": AUDIENCE,
            "client_id": self.client_id,
            "scope": " ".join(self.scopes),
            "redirect_uri": self.redirect_uri,
            "state": state,
            "response_type": "code",
            "prompt": "consent",
        }
        return f"{self.auth_url}/authorize?{urlencode(params)}"

    async def _post_token(self, operation: str, payload: Dict[str, Any]) -> TokenPair:
        response = await send_request(self.client, "POST", self.token_url, operation, json=payload)
        data = decode_json(response, operation)
        if not isinstance(data, dict) or not data.get("access_token"):
            logger.error(f"❌ {operation}: token response has no access_token")
            raise UpstreamStatusError(operation, response.status_code, data)
        try:
            return TokenPair.from_provider(data)
        except ValidationError as e:
            logger.error(f"❌ {operation}: malformed token response: {e.errors()}")
            raise UpstreamStatusError(operation, response.status_code, data) from e

    async def exchange_code(self, code: str) -> TokenPair:
        """
        Exchange an authorization code for an access/refresh token pair.

        Raises:
            ClientInputError: If the code is empty
            UpstreamStatusError: Provider rejected the exchange; ``body`` holds its error payload
        """
        if not code:
            raise ClientInputError("Missing code in callback")
        self._require(
            "code exchange",
            client_id=self.client_id,
            client_secret=self.client_secret,
            redirect_uri=self.redirect_uri
        )
        tokens = await self._post_token("code exchange", {
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "redirect_uri": self.redirect_uri,
        })
        logger.info("✅ Exchanged authorization code for access token")
        return tokens

    async def refresh(self, refresh_token: Optional[str]) -> TokenPair:
        """
        Trade a refresh token for a new access token.

        Atlassian rotates refresh tokens; when the response carries none the
        one that was sent stays valid and is returned instead.

        Raises:
            ClientInputError: No refresh token was supplied (the provider is not called)
            UpstreamError: The provider call failed
        """
        if not refresh_token:
            raise ClientInputError("Missing refreshToken in request body.")
        self._require("token refresh", client_id=self.client_id, client_secret=self.client_secret)
        tokens = await self._post_token("token refresh", {
            "grant_type": "refresh_token",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
        })
        if not tokens.refresh_token:
            tokens = tokens.model_copy(update={"refresh_token": refresh_token})
        logger.info("✅ Refreshed OAuth access token")
        return tokens

    async def get_accessible_resources(self, access_token: str) -> List[CloudSite]:
        """
        Jira Cloud sites the access token can reach.

        Returns:
            Site projections; empty when the provider returns nothing usable
        """
        if not access_token:
            raise ClientInputError("Missing accessToken in query params.")
        response = await send_request(
            self.client,
            "GET",
            f"{self.api_url}/oauth/token/accessible-resources",
            "accessible resources",
            auth=BearerAuth(access_token)
        )
        resources = decode_json(response, "accessible resources")
        if not isinstance(resources, list) or not resources:
            logger.info("No accessible Jira sites found for this token.")
            return []

        sites = []
        for resource in resources:
            if not isinstance(resource, dict):
                logger.warning(f"Skipping malformed accessible-resources entry: {resource!r}")
                continue
            site = CloudSite(
                id=str(resource.get("id", "")),
                name=resource.get("name") or "",
                url=resource.get("url") or ""
            )
            logger.info(f"Accessible Jira site: {site.name} ({site.url}) cloud id {site.id}")
            sites.append(site)
        return sites
