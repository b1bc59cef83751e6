#!/usr/bin/env python3
"""
Atlassian OAuth schemas
"""

from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from ticket_relay.schemas.base import BaseSchema


class TokenPair(BaseSchema):
    """Tokens returned by the Atlassian token endpoint"""
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    scope: Optional[str] = None
    token_type: Optional[str] = None

    @classmethod
    def from_provider(cls, data: Dict[str, Any]) -> "TokenPair":
        """Build from the provider's snake_case JSON"""
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=data.get("expires_in"),
            scope=data.get("scope"),
            token_type=data.get("token_type"),
        )


class RefreshTokenRequest(BaseSchema):
    """Body of POST /oauth/token"""
    model_config = ConfigDict(str_strip_whitespace=True)

    refresh_token: Optional[str] = Field(None, description="Refresh token; falls back to configuration")


class TokenRefreshResponse(BaseSchema):
    """Response of POST /oauth/token"""
    access_token: str
    refresh_token: Optional[str] = None


class CloudSite(BaseSchema):
    """Jira Cloud site reachable with an access token"""
    id: str
    name: str
    url: str


class CloudSitesResponse(BaseSchema):
    """Response of GET /jira-cloud-info"""
    resources: List[CloudSite] = Field(default_factory=list)
