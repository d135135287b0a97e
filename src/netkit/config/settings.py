"""Configuration settings for the netkit request dispatcher.

This module defines the configuration for a :class:`NetworkManager`:
API endpoints, the token refresh endpoint, transport timeouts and
connection pool limits. Settings are loaded from environment variables
prefixed with ``NETKIT_`` and from ``.env`` files.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Dispatcher settings loaded from environment variables.

    :param base_url: Base URL of the production API
    :type base_url: str
    :param dev_base_url: Base URL used when test mode is enabled
    :type dev_base_url: Optional[str]
    :param test_mode: Route requests to ``dev_base_url``
    :type test_mode: bool
    :param refresh_token_path: Path of the token refresh endpoint; when
        unset, authorization failures are passed through untouched
    :type refresh_token_path: Optional[str]
    :param refresh_method: HTTP method used for the refresh call
    :type refresh_method: str
    :param log_level: Logging level for the application
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_prefix="NETKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
    )

    # API Configuration
    base_url: str = Field("http://localhost", description="API base URL")
    dev_base_url: Optional[str] = Field(
        None, description="API base URL used in test mode"
    )
    test_mode: bool = Field(False, description="Route requests to dev_base_url")

    # Token refresh
    refresh_token_path: Optional[str] = Field(
        None, description="Path of the token refresh endpoint"
    )
    refresh_method: Literal["GET", "POST", "PUT", "PATCH"] = Field(
        "POST", description="HTTP method for the refresh call"
    )

    # Transport configuration
    connect_timeout: float = Field(5.0, description="Connect timeout in seconds")
    read_timeout: float = Field(30.0, description="Read timeout in seconds")
    write_timeout: float = Field(10.0, description="Write timeout in seconds")
    pool_timeout: float = Field(5.0, description="Pool timeout in seconds")
    max_keepalive_connections: int = Field(10, description="Keepalive pool size")
    max_connections: int = Field(20, description="Maximum open connections")
    keepalive_expiry: float = Field(30.0, description="Keepalive expiry in seconds")
    follow_redirects: bool = Field(True, description="Follow HTTP redirects")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Reject an empty base URL and strip trailing slashes.

        :param v: The configured base URL
        :type v: str
        :return: Base URL without trailing slash
        :rtype: str
        :raises ValueError: If the base URL is empty
        """
        v = (v or "").strip()
        if not v:
            raise ValueError("base_url must not be empty")
        return v.rstrip("/")

    @field_validator("refresh_token_path")
    @classmethod
    def normalize_refresh_path(cls, v: Optional[str]) -> Optional[str]:
        """Normalize the refresh path to a leading slash, or None when blank."""
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if v.startswith(("http://", "https://")):
            return v
        return v if v.startswith("/") else f"/{v}"

    @property
    def effective_base_url(self) -> str:
        """Get the base URL requests are sent to.

        Returns ``dev_base_url`` when test mode is enabled and a dev URL
        is configured, otherwise ``base_url``.

        :return: Base URL for outgoing requests
        :rtype: str
        """
        if self.test_mode and self.dev_base_url:
            return self.dev_base_url.rstrip("/")
        return self.base_url
