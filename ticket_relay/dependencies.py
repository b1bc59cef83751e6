#!/usr/bin/env python3
"""
FastAPI dependency injection functions
"""

import logging
from typing import AsyncGenerator, Optional

import httpx
from fastapi import Depends

from ticket_relay.config.settings import Settings, get_settings
from ticket_relay.integrations.atlassian import AtlassianOAuthClient
from ticket_relay.services.oauth_state_service import OAuthStateService
from ticket_relay.services.ticket_lookup_service import TicketLookupService

logger = logging.getLogger(__name__)


def get_current_settings() -> Settings:
    """Dependency to get current settings"""
    return get_settings()


def get_http_transport() -> Optional[httpx.AsyncBaseTransport]:
    """
    Transport used for outbound calls.

    None means httpx's default network transport; tests override this with
    an httpx.MockTransport.
    """
    return None


async def get_oauth_client(
    settings: Settings = Depends(get_current_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport)
) -> AsyncGenerator[AtlassianOAuthClient, None]:
    """Per-request Atlassian OAuth client, closed when the request ends"""
    async with AtlassianOAuthClient(
        client_id=settings.oauth_client_id,
        client_secret=settings.oauth_client_secret,
        redirect_uri=settings.oauth_redirect_uri,
        scopes=settings.oauth_scopes,
        auth_url=settings.atlassian_auth_url,
        api_url=settings.atlassian_api_url,
        timeout=settings.http_timeout_seconds,
        verify=settings.verify_ssl,
        transport=transport
    ) as client:
        yield client


def get_state_service(settings: Settings = Depends(get_current_settings)) -> OAuthStateService:
    """OAuth state signer bound to the configured secret"""
    return OAuthStateService(settings.oauth_state_secret, settings.oauth_state_ttl_seconds)


def get_ticket_lookup_service(
    settings: Settings = Depends(get_current_settings),
    oauth_client: AtlassianOAuthClient = Depends(get_oauth_client),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport)
) -> TicketLookupService:
    """Ticket lookup service wired to this request's clients"""
    return TicketLookupService(settings, oauth_client=oauth_client, transport=transport)
