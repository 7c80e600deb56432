"""
Configuration dataclass for the Bento API client.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import InvalidConfigError


SDK_VERSION = "0.1.0"
DEFAULT_BASE_URL = "https://app.bentonow.com/api/v1"


@dataclass(frozen=True)
class BentoConfig:
    """Configuration for Bento API client.

    Instances are immutable and owned by a single client, so several
    independently configured clients can live in the same process.

    Attributes:
        publishable_key: Bento publishable key (Basic auth username)
        secret_key: Bento secret key (Basic auth password)
        site_uuid: Site identifier sent as ``site_uuid`` on every request
        base_url: Base URL for API (default: https://app.bentonow.com/api/v1)
        connect_timeout: Connection timeout in seconds
        default_timeout: Read timeout for requests in seconds
        max_attempts: Total attempts per request, first try included
        retry_base_delay: First backoff delay in seconds, doubled per retry
        retry_max_delay: Upper bound for a single backoff delay in seconds
    """
    publishable_key: str
    secret_key: str
    site_uuid: str
    base_url: str = DEFAULT_BASE_URL
    connect_timeout: float = 10
    default_timeout: float = 30
    max_attempts: int = 3
    retry_base_delay: float = 0.1
    retry_max_delay: float = 5.0

    def __post_init__(self):
        for name in ("publishable_key", "secret_key", "site_uuid", "base_url"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidConfigError(f"{name} is required")
        if self.max_attempts < 1:
            raise InvalidConfigError("max_attempts must be at least 1")
        if self.connect_timeout <= 0 or self.default_timeout <= 0:
            raise InvalidConfigError("timeouts must be positive")
        if self.retry_base_delay < 0 or self.retry_max_delay < self.retry_base_delay:
            raise InvalidConfigError(
                "retry delays must satisfy 0 <= retry_base_delay <= retry_max_delay"
            )

    @property
    def timeout(self):
        """``(connect, read)`` tuple as accepted by requests."""
        return (self.connect_timeout, self.default_timeout)

    @classmethod
    def from_env(cls, prefix: str = "BENTO_", dotenv_path: Optional[str] = None,
                 **overrides) -> "BentoConfig":
        """Build a config from environment variables.

        Loads a ``.env`` file first (without overriding variables that are
        already set), then reads ``<prefix>PUBLISHABLE_KEY``,
        ``<prefix>SECRET_KEY``, ``<prefix>SITE_UUID`` and the optional
        ``<prefix>BASE_URL``.

        Args:
            prefix: Environment variable prefix
            dotenv_path: Explicit .env file, default is python-dotenv's lookup
            **overrides: Extra keyword arguments passed to the constructor

        Raises:
            InvalidConfigError: If a required variable is missing
        """
        load_dotenv(dotenv_path)

        values = {
            "publishable_key": os.getenv(f"{prefix}PUBLISHABLE_KEY", ""),
            "secret_key": os.getenv(f"{prefix}SECRET_KEY", ""),
            "site_uuid": os.getenv(f"{prefix}SITE_UUID", ""),
        }
        base_url = os.getenv(f"{prefix}BASE_URL")
        if base_url:
            values["base_url"] = base_url
        values.update(overrides)
        return cls(**values)

    def __repr__(self) -> str:
        return (f"BentoConfig(site_uuid={self.site_uuid!r}, "
                f"base_url={self.base_url!r}, max_attempts={self.max_attempts})")
