#!/usr/bin/env python3
"""
JIRA integration module
Contains the JIRA REST client and attachment inspection services
"""

from .jira_attachment_service import (
    ArchiveInspector,
    InspectionResult,
    classify,
    filter_filenames,
    is_zip_attachment,
    list_zip_entries,
)
from .jira_integration import JiraIntegration

__all__ = [
    "JiraIntegration",
    "ArchiveInspector",
    "InspectionResult",
    "classify",
    "filter_filenames",
    "is_zip_attachment",
    "list_zip_entries"
]
