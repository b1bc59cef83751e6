#!/usr/bin/env python3
"""
JIRA Integration Service
Reads issues, downloads attachments and posts comments through the Jira Cloud REST API v3
"""

import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..base.exceptions import RequestSetupError, UpstreamStatusError
from ..base.http_client import BearerAuth, build_async_client, decode_json, send_request

logger = logging.getLogger(__name__)


class JiraIntegration:
    """
    Jira Cloud API v3 client.

    The client does not care how it authenticates: the classmethod
    constructors pick basic auth against the site URL or bearer auth against
    the OAuth gateway, and everything below works the same either way.
    """

    def __init__(
        self,
        base_url: str,
        auth: httpx.Auth,
        timeout: float = 30.0,
        verify: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize JIRA integration.

        Args:
            base_url: Root the REST paths are appended to
            auth: httpx auth handler
            timeout: Per-request timeout in seconds
            verify: Verify TLS certificates
            transport: Optional transport override for tests
        """
        if not base_url:
            raise RequestSetupError("jira client", "Jira base URL is not configured")
        self.base_url = base_url.rstrip('/')
        self.client = build_async_client(
            auth=auth,
            timeout=timeout,
            verify=verify,
            transport=transport
        )

    @classmethod
    def with_basic_auth(
        cls,
        base_url: Optional[str],
        email: Optional[str],
        api_token: Optional[str],
        **kwargs: Any
    ) -> "JiraIntegration":
        """Site-scoped client using email + API token"""
        # CRITICAL: JIRA requires email as username, API token as password
        if not (email and api_token):
            raise RequestSetupError("jira client", "JIRA_EMAIL and JIRA_API_TOKEN must be set")
        return cls(base_url, httpx.BasicAuth(email, api_token), **kwargs)

    @classmethod
    def with_oauth(
        cls,
        cloud_id: str,
        access_token: str,
        api_url: str = "https://api.atlassian.com",
        **kwargs: Any
    ) -> "JiraIntegration":
        """Gateway client for a specific cloud site using an OAuth access token"""
        base_url = f"{api_url.rstrip('/')}/ex/jira/{quote(cloud_id, safe='')}"
        return cls(base_url, BearerAuth(access_token), **kwargs)

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()

    def _issue_url(self, issue_key: str) -> str:
        return f"{self.base_url}/rest/api/3/issue/{quote(issue_key, safe='')}"

    async def get_issue(self, issue_key: str) -> Dict[str, Any]:
        """
        Fetch an issue.

        Args:
            issue_key: JIRA issue key (e.g., "TEST-123") or numeric id

        Returns:
            Issue JSON as returned by Jira

        Raises:
            UpstreamError: If Jira cannot be reached or rejects the request
        """
        start_time = time.time()
        response = await send_request(self.client, "GET", self._issue_url(issue_key), "fetch issue")
        duration_ms = (time.time() - start_time) * 1000
        logger.info(f"✅ Fetched JIRA issue {issue_key} ({response.status_code}) in {duration_ms:.0f}ms")
        issue = decode_json(response, "fetch issue")
        if not isinstance(issue, dict):
            logger.error(f"❌ fetch issue: expected a JSON object, got {type(issue).__name__}")
            raise UpstreamStatusError("fetch issue", response.status_code, issue)
        return issue

    @staticmethod
    def get_attachments(issue: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Attachment objects of an issue, empty when the field is missing or malformed"""
        fields = issue.get("fields")
        if not isinstance(fields, dict):
            return []
        attachments = fields.get("attachment")
        if not isinstance(attachments, list):
            return []
        return [att for att in attachments if isinstance(att, dict)]

    async def add_comment(self, issue_key: str, comment: str) -> Dict[str, Any]:
        """
        Add a plain-text comment to a JIRA issue.

        Args:
            issue_key: JIRA issue key
            comment: Comment text

        Returns:
            Created comment JSON
        """
        # JIRA Cloud v3 uses Atlassian Document Format (ADF) for rich text
        payload = {
            "body": {
                "type": "doc",
                "version": 1,
                "content": [
                    {
                        "type": "paragraph",
                        "content": [
                            {
                                "type": "text",
                                "text": comment
                            }
                        ]
                    }
                ]
            }
        }
        response = await send_request(
            self.client,
            "POST",
            f"{self._issue_url(issue_key)}/comment",
            "add comment",
            json=payload
        )
        logger.info(f"✅ Added comment to JIRA issue {issue_key}: {response.status_code}")
        return decode_json(response, "add comment")

    async def download_attachment(self, content_url: str) -> bytes:
        """
        Download attachment content as raw bytes.

        Jira answers the content URL with a redirect to the media service, so
        redirects are followed.
        """
        response = await send_request(
            self.client,
            "GET",
            content_url,
            "download attachment",
            headers={"Accept": "*/*"},
            follow_redirects=True
        )
        return response.content
