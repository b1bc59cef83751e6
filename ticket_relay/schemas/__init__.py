#!/usr/bin/env python3
"""
Pydantic Schemas for the Jira EVTX Relay API
"""

from ticket_relay.schemas.base import BaseSchema, ErrorResponse
from ticket_relay.schemas.jira import (
    AttachmentInfo,
    InspectionStatusSchema,
    OAuthTicketLookupResponse,
    TicketLookupRequest,
    TicketLookupResponse,
)
from ticket_relay.schemas.oauth import (
    CloudSite,
    CloudSitesResponse,
    RefreshTokenRequest,
    TokenPair,
    TokenRefreshResponse,
)

__all__ = [
    "BaseSchema",
    "ErrorResponse",
    "AttachmentInfo",
    "InspectionStatusSchema",
    "TicketLookupRequest",
    "TicketLookupResponse",
    "OAuthTicketLookupResponse",
    "TokenPair",
    "RefreshTokenRequest",
    "TokenRefreshResponse",
    "CloudSite",
    "CloudSitesResponse",
]
