"""Runtime settings from environment variables.

Centralized environment variable parsing and validation.
"""

import codecs
import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Runtime settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Host key verification
    known_hosts: str | None = field(default=None)
    strict_host_key_checking: bool = field(default=True)

    # Connection
    connect_timeout: int = field(default=30)

    # Captured output
    encoding: str = field(default="utf-8")

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from RUNCMD_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            known_hosts=os.getenv("RUNCMD_KNOWN_HOSTS") or None,
            strict_host_key_checking=cls._get_bool("RUNCMD_STRICT_HOST_KEY_CHECKING", True),
            connect_timeout=cls._get_int("RUNCMD_CONNECT_TIMEOUT", 30),
            encoding=cls._get_encoding("RUNCMD_ENCODING", "utf-8"),
            log_level=os.getenv("RUNCMD_LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("RUNCMD_LOG_COLORS", True),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get non-negative integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set or invalid

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            parsed = int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

        if parsed < 0:
            logger.warning("Negative value for %s: %s, using default %d", key, value, default)
            return default
        return parsed

    @staticmethod
    def _get_encoding(key: str, default: str) -> str:
        """Get a codec name known to Python from environment."""
        value = os.getenv(key)
        if not value:
            return default

        try:
            codecs.lookup(value)
        except LookupError:
            logger.warning("Unknown encoding for %s: %s, using default %s", key, value, default)
            return default
        return value

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")
