#!/usr/bin/env python3
"""
Atlassian identity service integration
"""

from .oauth_client import AtlassianOAuthClient

__all__ = ["AtlassianOAuthClient"]
