#!/usr/bin/env python3
"""
Jira API Routes for the Jira EVTX Relay
Ticket lookups (basic auth and OAuth) and accessible cloud sites
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from ..dependencies import get_oauth_client, get_ticket_lookup_service
from ..integrations.atlassian import AtlassianOAuthClient
from ..integrations.base.exceptions import ClientInputError, UpstreamError
from ..schemas.base import ErrorResponse
from ..schemas.jira import OAuthTicketLookupResponse, TicketLookupRequest, TicketLookupResponse
from ..schemas.oauth import CloudSitesResponse
from ..services.ticket_lookup_service import TicketLookupService
from ..utils.error_responses import upstream_error_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Jira"])

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


async def _basic_lookup(service: TicketLookupService, ticket_ref: Optional[str]):
    try:
        return await service.lookup_with_basic_auth(ticket_ref)
    except UpstreamError as e:
        return upstream_error_response(e, "Error fetching Jira ticket", "Failed to fetch ticket from Jira.")


@router.post("/jira-ticket", response_model=TicketLookupResponse, responses=ERROR_RESPONSES)
async def post_jira_ticket(
    payload: Optional[TicketLookupRequest] = Body(None),
    service: TicketLookupService = Depends(get_ticket_lookup_service)
):
    """Scan a ticket's attachments using the configured Jira credentials (Jira automation webhook)"""
    ticket_ref = payload.ticket_id if payload else None
    logger.info(f"Ticket lookup requested for {ticket_ref}")
    return await _basic_lookup(service, ticket_ref)


@router.get("/jira-ticket", response_model=TicketLookupResponse, responses=ERROR_RESPONSES)
async def get_jira_ticket(
    ticket_id: Optional[str] = Query(None, alias="ticketId"),
    service: TicketLookupService = Depends(get_ticket_lookup_service)
):
    """Same as POST /jira-ticket with the ticket passed as a query parameter"""
    if not ticket_id:
        raise ClientInputError("Missing ticketId in query params.")
    return await _basic_lookup(service, ticket_id)


@router.get("/jira-oauth-ticket", response_model=OAuthTicketLookupResponse, responses=ERROR_RESPONSES)
async def get_jira_oauth_ticket(
    ticket_id: Optional[str] = Query(None, alias="ticketId"),
    cloud_id: Optional[str] = Query(None, alias="cloudId"),
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    access_token: Optional[str] = Query(None, alias="accessToken"),
    refresh_token: Optional[str] = Query(None, alias="refreshToken"),
    service: TicketLookupService = Depends(get_ticket_lookup_service)
):
    """
    Scan a ticket's attachments through the OAuth gateway.

    Accepts an access token, or a refresh token that is exchanged first. The
    tokens used are returned so the caller can keep them.
    """
    try:
        return await service.lookup_with_oauth(
            ticket_ref=ticket_id,
            cloud_id=cloud_id or tenant_id,
            access_token=access_token,
            refresh_token=refresh_token
        )
    except UpstreamError as e:
        return upstream_error_response(
            e, "Error fetching Jira ticket (OAuth)", "Failed to fetch ticket from Jira (OAuth)."
        )


@router.get("/jira-cloud-info", response_model=CloudSitesResponse, responses=ERROR_RESPONSES)
async def get_jira_cloud_info(
    access_token: Optional[str] = Query(None, alias="accessToken"),
    oauth_client: AtlassianOAuthClient = Depends(get_oauth_client)
):
    """List the Jira Cloud sites (cloud ids) an access token can reach"""
    if not access_token:
        raise ClientInputError("Missing accessToken in query params.")
    try:
        sites = await oauth_client.get_accessible_resources(access_token)
    except UpstreamError as e:
        return upstream_error_response(
            e, "Error fetching accessible Jira sites", "Failed to fetch accessible Jira sites."
        )
    return CloudSitesResponse(resources=sites)
