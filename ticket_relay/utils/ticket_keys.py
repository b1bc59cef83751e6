"""
Ticket reference parsing.

Callers send either a bare issue key (``ABC-123``), a numeric issue id, or a
URL copied from the browser. URLs are parsed in this order:

1. query parameters ``selectedIssue``, ``issueKey``, ``key``
2. the path segment following ``browse``
3. the last path segment that looks like an issue key
4. the text after the final ``=`` (older links that end in ``...=KEY``)

Input that matches none of these is rejected instead of guessed at.
"""

import logging
import re
from urllib.parse import parse_qs, unquote, urlsplit

from ticket_relay.integrations.base.exceptions import ClientInputError

logger = logging.getLogger(__name__)

ISSUE_KEY_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*-\d+$")
ISSUE_ID_PATTERN = re.compile(r"^\d+$")
KEY_QUERY_PARAMS = ("selectedIssue", "issueKey", "key")


def is_issue_key(value: str) -> bool:
    return bool(ISSUE_KEY_PATTERN.match(value))


def _is_identifier(value: str) -> bool:
    return is_issue_key(value) or bool(ISSUE_ID_PATTERN.match(value))


def _key_from_url(url: str) -> str:
    parts = urlsplit(url)
    query = parse_qs(parts.query)
    for name in KEY_QUERY_PARAMS:
        for value in query.get(name, []):
            if is_issue_key(value.strip()):
                return value.strip()

    segments = [unquote(s) for s in parts.path.split("/") if s]
    for previous, segment in zip(segments, segments[1:]):
        if previous == "browse" and _is_identifier(segment):
            return segment
    for segment in reversed(segments):
        if is_issue_key(segment):
            return segment

    # legacy convention: identifier is whatever follows the last "="
    if "=" in url:
        tail = unquote(url.rsplit("=", 1)[1]).strip()
        if is_issue_key(tail):
            return tail

    raise ClientInputError(f"Could not find an issue key in ticketId URL: {url}")


def extract_ticket_key(ticket_ref: str) -> str:
    """
    Resolve a ticket reference to an issue key or id.

    Raises:
        ClientInputError: If the reference is empty or cannot be interpreted
    """
    ref = (ticket_ref or "").strip()
    if not ref:
        raise ClientInputError("Missing ticketId.")
    if _is_identifier(ref):
        return ref
    if "://" in ref:
        key = _key_from_url(ref)
        logger.debug(f"Resolved ticket URL {ref} to {key}")
        return key
    raise ClientInputError(f"ticketId is not an issue key or URL: {ref}")
