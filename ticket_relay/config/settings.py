#!/usr/bin/env python3
"""
Application settings and configuration management
"""

import json
import re
import secrets
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    """
    Application settings using Pydantic BaseSettings.
    Automatically loads from environment variables and .env files.
    """

    # Application Settings
    app_name: str = Field(default="Jira EVTX Relay", description="Application name")
    environment: str = Field(default="development", description="Environment (production, staging, development, testing)")
    debug: bool = Field(default=False, description="Debug mode")
    host: str = Field(default="0.0.0.0", description="Bind address for the HTTP server")
    port: int = Field(default=3000, description="Port for the HTTP server")

    # HTTP Debug Logging Settings
    http_debug_logging_enabled: bool = Field(default=False, description="Log outbound HTTP traffic (credentials redacted)")
    http_debug_log_level: str = Field(default="DEBUG", description="Log level for HTTP debug messages")

    # Outbound HTTP
    http_timeout_seconds: float = Field(default=30.0, gt=0, description="Timeout for every outbound call")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates of Atlassian endpoints")

    # Jira basic auth (POST/GET /jira-ticket)
    jira_base_url: Optional[str] = Field(default=None, description="Jira site URL, e.g. https://company.atlassian.net")
    jira_email: Optional[str] = Field(default=None, description="Jira user email")
    jira_api_token: Optional[str] = Field(default=None, description="Jira API token")

    # Atlassian OAuth 2.0 (3LO)
    oauth_client_id: Optional[str] = Field(default=None, description="OAuth client ID")
    oauth_client_secret: Optional[str] = Field(default=None, description="OAuth client secret")
    oauth_redirect_uri: Optional[str] = Field(default=None, description="OAuth callback URL registered with Atlassian")
    oauth_refresh_token: Optional[str] = Field(default=None, description="Fallback refresh token for /oauth/token")
    oauth_scopes: Annotated[List[str], NoDecode] = Field(
        default=["read:jira-work", "read:attachment:jira", "write:jira-work", "offline_access"],
        description="Scopes requested on the consent page"
    )
    oauth_state_secret: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        description="Key used to sign OAuth state values (random per process when unset)"
    )
    oauth_state_ttl_seconds: int = Field(default=600, gt=0, description="Lifetime of an OAuth state value")
    atlassian_auth_url: str = Field(default="https://auth.atlassian.com", description="Atlassian identity service")
    atlassian_api_url: str = Field(default="https://api.atlassian.com", description="Atlassian API gateway")

    # Attachment scanning
    target_extension: str = Field(default=".evtx", description="File extension the scan looks for")
    attachment_concurrency: int = Field(default=4, description="Maximum concurrent ZIP downloads per request")
    missing_log_comment: str = Field(
        default="No Windows event log (.evtx) file found in attachments.",
        description="Comment posted by the basic-auth lookup when nothing is found"
    )

    # Logging Settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting"""
        valid_environments = ["development", "staging", "production", "testing"]
        if v not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v

    @field_validator("target_extension")
    @classmethod
    def validate_target_extension(cls, v):
        """Normalize the extension to a lowercase, dot-prefixed suffix"""
        v = v.strip().lower()
        if not v:
            raise ValueError("Target extension must not be empty")
        return v if v.startswith(".") else f".{v}"

    @field_validator("oauth_scopes", mode="before")
    @classmethod
    def parse_oauth_scopes(cls, v):
        """Accept a JSON list or Atlassian's space/comma separated scope string"""
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                return json.loads(v)
            return [scope for scope in re.split(r"[\s,]+", v) if scope]
        return v

    @field_validator("attachment_concurrency")
    @classmethod
    def validate_attachment_concurrency(cls, v):
        """Keep the download fan-out small"""
        if v < 1 or v > 16:
            raise ValueError("Attachment concurrency must be between 1 and 16")
        return v

    @field_validator("jira_base_url", "atlassian_auth_url", "atlassian_api_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/") if v else v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == "production"

    @property
    def jira_basic_auth_configured(self) -> bool:
        """Whether /jira-ticket has everything it needs"""
        return bool(self.jira_base_url and self.jira_email and self.jira_api_token)

    @property
    def oauth_configured(self) -> bool:
        """Whether the OAuth endpoints have client credentials"""
        return bool(self.oauth_client_id and self.oauth_client_secret and self.oauth_redirect_uri)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_ignore_empty": True,
        "extra": "ignore"
    }


# Global settings instance
_settings: Optional[Settings] = None

def get_settings() -> Settings:
    """
    Get application settings instance.
    Implements singleton pattern for settings.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

def reload_settings() -> Settings:
    """
    Reload settings from environment/files.
    Useful for testing or configuration changes.
    """
    global _settings
    _settings = Settings()
    return _settings
