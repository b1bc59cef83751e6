#!/usr/bin/env python3
"""
Integration modules
Contains the Jira Cloud and Atlassian OAuth clients
"""

# Import base classes for external use
from .base import ClientInputError, RelayError, UpstreamError

# Import specific integrations
from .atlassian import AtlassianOAuthClient
from .jira import ArchiveInspector, JiraIntegration

__all__ = [
    # Base error classes
    "RelayError",
    "ClientInputError",
    "UpstreamError",
    # Atlassian OAuth
    "AtlassianOAuthClient",
    # JIRA integration
    "JiraIntegration",
    "ArchiveInspector"
]
