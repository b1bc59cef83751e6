#!/usr/bin/env python3
"""
Jira ticket lookup schemas for API validation and serialization
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field, field_validator

from ticket_relay.schemas.base import BaseSchema


class InspectionStatusSchema(str, Enum):
    """Outcome of looking inside an attachment"""
    NOT_APPLICABLE = "not_applicable"
    FAILED = "failed"
    SUCCEEDED = "succeeded"


class AttachmentInfo(BaseSchema):
    """Attachment metadata plus the result of ZIP inspection"""
    filename: str = Field(default="", description="Attachment file name")
    mime_type: Optional[str] = Field(None, description="Declared MIME type")
    size: Optional[int] = Field(None, description="Size in bytes")
    content: Optional[str] = Field(None, description="Download URL of the attachment content")
    zip_contents: Optional[List[str]] = Field(
        None, description="Entry names when the attachment is a ZIP that was unpacked"
    )
    zip_status: InspectionStatusSchema = Field(
        InspectionStatusSchema.NOT_APPLICABLE, description="ZIP inspection outcome"
    )
    zip_error: Optional[str] = Field(None, description="Why ZIP inspection failed")

    @classmethod
    def from_jira(cls, attachment: Dict[str, Any]) -> "AttachmentInfo":
        """Build from an element of the issue's fields.attachment array"""
        return cls(
            filename=attachment.get("filename") or "",
            mime_type=attachment.get("mimeType"),
            size=attachment.get("size"),
            content=attachment.get("content"),
        )


class TicketLookupRequest(BaseSchema):
    """Body of POST /jira-ticket"""
    model_config = ConfigDict(str_strip_whitespace=True)

    ticket_id: Optional[str] = Field(None, description="Issue key, numeric id or browse URL")

    @field_validator("ticket_id", mode="before")
    @classmethod
    def accept_numeric_id(cls, v):
        """Jira automation may send the numeric issue id as a JSON number"""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class TicketLookupResponse(BaseSchema):
    """Result of scanning a ticket's attachments for the target log type"""
    ticket_id: str = Field(description="Resolved issue key")
    attachments: List[AttachmentInfo] = Field(default_factory=list)
    has_evtx: bool = Field(description="Whether any matching file was found")
    evtx_files: List[str] = Field(
        default_factory=list,
        description="Matching names, top-level attachments first then ZIP entries"
    )
    found_log_files: bool = Field(description="Same as hasEvtx, kept for older callers")
    scan_failures: List[str] = Field(
        default_factory=list, description="ZIP attachments that could not be inspected"
    )


class OAuthTicketLookupResponse(TicketLookupResponse):
    """Lookup result on the OAuth path, echoing the tokens for the caller to keep"""
    cloud_id: str = Field(description="Jira Cloud site the issue was read from")
    access_token: str = Field(description="Access token used (possibly freshly refreshed)")
    refresh_token: Optional[str] = Field(None, description="Refresh token to persist for the next call")
