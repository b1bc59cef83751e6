#!/usr/bin/env python3
"""
Ticket Lookup Service
Fetches a Jira issue, scans its attachments (including inside ZIPs) for the
target log type and builds the lookup response for both entry points
"""

import logging
from typing import List, Optional, Tuple

import httpx

from ticket_relay.config.settings import Settings
from ticket_relay.integrations.atlassian import AtlassianOAuthClient
from ticket_relay.integrations.base.exceptions import ClientInputError
from ticket_relay.integrations.jira import ArchiveInspector, JiraIntegration, classify, filter_filenames
from ticket_relay.schemas.jira import AttachmentInfo, OAuthTicketLookupResponse, TicketLookupResponse
from ticket_relay.utils.ticket_keys import extract_ticket_key

logger = logging.getLogger(__name__)


class TicketLookupService:
    """
    Service behind /jira-ticket and /jira-oauth-ticket.

    The two entry points deliberately differ: only the basic-auth lookup
    leaves a comment on the issue when no log file is found, and only the
    OAuth lookup echoes tokens back to the caller.
    """

    def __init__(
        self,
        settings: Settings,
        oauth_client: Optional[AtlassianOAuthClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings
        self.oauth_client = oauth_client
        self.transport = transport

    def _client_options(self) -> dict:
        return {
            "timeout": self.settings.http_timeout_seconds,
            "verify": self.settings.verify_ssl,
            "transport": self.transport
        }

    async def scan_issue(self, jira: JiraIntegration, issue_key: str) -> Tuple[List[AttachmentInfo], List[str], List[str]]:
        """
        Fetch an issue and look for the target extension.

        Returns:
            (attachments with inspection results, matching names, names of ZIPs that failed to open)
        """
        issue = await jira.get_issue(issue_key)
        attachments = [AttachmentInfo.from_jira(att) for att in jira.get_attachments(issue)]

        inspector = ArchiveInspector(jira, max_concurrency=self.settings.attachment_concurrency)
        attachments = await inspector.inspect_attachments(attachments)

        extension = self.settings.target_extension
        matches = classify(attachments, extension)
        for attachment in attachments:
            if attachment.zip_contents:
                matches.extend(filter_filenames(attachment.zip_contents, extension))

        scan_failures = [att.filename for att in attachments if att.zip_status == "failed"]
        if scan_failures:
            logger.warning(f"⚠️ Could not inspect {len(scan_failures)} archive(s) on {issue_key}: {scan_failures}")
        logger.info(f"EVTX files found on {issue_key}: {matches}")
        return attachments, matches, scan_failures

    async def lookup_with_basic_auth(self, ticket_ref: Optional[str]) -> TicketLookupResponse:
        """
        Scan a ticket using the configured Jira site credentials.

        Posts the missing-log comment to the issue when nothing matches.

        Raises:
            ClientInputError: ticketId missing or unparsable
            UpstreamError: Fetching the issue or posting the comment failed
        """
        if not ticket_ref:
            raise ClientInputError("Missing ticketId in request body.")
        issue_key = extract_ticket_key(ticket_ref)

        async with JiraIntegration.with_basic_auth(
            self.settings.jira_base_url,
            self.settings.jira_email,
            self.settings.jira_api_token,
            **self._client_options()
        ) as jira:
            attachments, matches, scan_failures = await self.scan_issue(jira, issue_key)
            has_evtx = bool(matches)
            if not has_evtx:
                await jira.add_comment(issue_key, self.settings.missing_log_comment)

        return TicketLookupResponse(
            ticket_id=issue_key,
            attachments=attachments,
            has_evtx=has_evtx,
            evtx_files=matches,
            found_log_files=has_evtx,
            scan_failures=scan_failures
        )

    async def lookup_with_oauth(
        self,
        ticket_ref: Optional[str],
        cloud_id: Optional[str],
        access_token: Optional[str],
        refresh_token: Optional[str]
    ) -> OAuthTicketLookupResponse:
        """
        Scan a ticket through the OAuth gateway for a given cloud site.

        When only a refresh token is supplied it is exchanged first, and the
        new pair is returned with the result.

        Raises:
            ClientInputError: Required parameters missing or ticketId unparsable
            UpstreamError: Token refresh or issue fetch failed
        """
        if not ticket_ref or not cloud_id or not (access_token or refresh_token):
            raise ClientInputError(
                "Missing ticketId, cloudId, or accessToken/refreshToken in query params."
            )
        issue_key = extract_ticket_key(ticket_ref)

        if not access_token:
            if self.oauth_client is None:
                raise RuntimeError("OAuth client is required to refresh tokens")
            logger.info("No access token supplied, refreshing before fetching the issue")
            tokens = await self.oauth_client.refresh(refresh_token)
            access_token = tokens.access_token
            refresh_token = tokens.refresh_token

        async with JiraIntegration.with_oauth(
            cloud_id,
            access_token,
            api_url=self.settings.atlassian_api_url,
            **self._client_options()
        ) as jira:
            attachments, matches, scan_failures = await self.scan_issue(jira, issue_key)

        has_evtx = bool(matches)
        return OAuthTicketLookupResponse(
            ticket_id=issue_key,
            attachments=attachments,
            has_evtx=has_evtx,
            evtx_files=matches,
            found_log_files=has_evtx,
            scan_failures=scan_failures,
            cloud_id=cloud_id,
            access_token=access_token,
            refresh_token=refresh_token
        )
