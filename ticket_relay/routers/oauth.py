#!/usr/bin/env python3
"""
OAuth API Routes for the Jira EVTX Relay
Atlassian consent redirect, authorization-code callback and token refresh
"""

import html
import json
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from ..config.settings import Settings
from ..dependencies import get_current_settings, get_oauth_client, get_state_service
from ..integrations.atlassian import AtlassianOAuthClient
from ..integrations.base.exceptions import ClientInputError, UpstreamError
from ..schemas.base import ErrorResponse
from ..schemas.oauth import RefreshTokenRequest, TokenRefreshResponse
from ..services.oauth_state_service import OAuthStateService
from ..utils.error_responses import log_upstream_failure, upstream_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/oauth", tags=["OAuth"])


@router.get("/start", status_code=status.HTTP_302_FOUND)
async def oauth_start(
    oauth_client: AtlassianOAuthClient = Depends(get_oauth_client),
    state_service: OAuthStateService = Depends(get_state_service)
):
    """Step 1: redirect the user to the Atlassian consent page"""
    try:
        auth_url = oauth_client.build_authorization_url(state_service.issue_state())
    except UpstreamError as e:
        return upstream_error_response(e, "OAuth start failed", "OAuth client is not configured.")
    return RedirectResponse(auth_url, status_code=status.HTTP_302_FOUND)


def _render_tokens_page(token_data: dict) -> str:
    access_token = html.escape(str(token_data.get("access_token")))
    refresh_token = html.escape(str(token_data.get("refresh_token")))
    full_response = html.escape(json.dumps(token_data, indent=2))
    return (
        f"Access token: {access_token}<br>"
        f"Refresh token: {refresh_token}<br><br>"
        f"Full response:<br><pre>{full_response}</pre><br>"
        "To refresh, POST to /oauth/token with { refreshToken }."
    )


@router.get("/callback", response_class=HTMLResponse)
async def oauth_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    oauth_client: AtlassianOAuthClient = Depends(get_oauth_client),
    state_service: OAuthStateService = Depends(get_state_service)
):
    """Step 2: verify the state and exchange the authorization code for tokens"""
    if not code:
        return PlainTextResponse("Missing code in callback", status_code=status.HTTP_400_BAD_REQUEST)
    try:
        state_service.verify_state(state)
    except ClientInputError as e:
        return PlainTextResponse(e.message, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        tokens = await oauth_client.exchange_code(code)
    except UpstreamError as e:
        log_upstream_failure(e, "OAuth token exchange error")
        return PlainTextResponse(
            "Failed to exchange code for access token",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    # For demo, show both tokens (store securely in production)
    return HTMLResponse(_render_tokens_page(tokens.model_dump(exclude_none=True)))


@router.post("/token", response_model=TokenRefreshResponse, responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
async def oauth_refresh_token(
    payload: Optional[RefreshTokenRequest] = Body(None),
    settings: Settings = Depends(get_current_settings),
    oauth_client: AtlassianOAuthClient = Depends(get_oauth_client)
):
    """Refresh an access token; the body's refreshToken wins over the configured one"""
    refresh_token = (payload.refresh_token if payload else None) or settings.oauth_refresh_token
    if not refresh_token:
        raise ClientInputError("Missing refreshToken in request body.")
    try:
        tokens = await oauth_client.refresh(refresh_token)
    except UpstreamError as e:
        return upstream_error_response(e, "OAuth token refresh error", "Failed to refresh access token.")
    return TokenRefreshResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)
