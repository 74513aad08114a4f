"""SSH host key verification.

Resolves the known_hosts file handed to asyncssh for MITM prevention.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class HostKeyVerifier:
    """SSH host key verification manager.

    Handles known_hosts configuration for MITM prevention.
    """

    def __init__(
        self,
        known_hosts_path: str | None = None,
        strict_checking: bool = True,
    ):
        """Initialize host key verifier.

        Args:
            known_hosts_path: Path to known_hosts file or 'none' to disable
            strict_checking: Reject configurations without a known_hosts file

        Raises:
            FileNotFoundError: If strict mode and file missing
        """
        self.strict_checking = strict_checking
        self._known_hosts = self._resolve_known_hosts(known_hosts_path)

    def _resolve_known_hosts(self, value: str | None) -> str | None:
        """Resolve known_hosts path with security defaults.

        Returns:
            Path to known_hosts file or None to disable verification

        Raises:
            FileNotFoundError: If strict mode and file missing
        """
        if value and value.lower() == "none":
            logger.warning(
                "SSH host key verification DISABLED - vulnerable to MITM attacks. "
                "Only use in trusted networks for testing."
            )
            return None

        if value:
            path = Path(os.path.expanduser(value))
        else:
            path = Path.home() / ".ssh" / "known_hosts"

        if not path.exists():
            if self.strict_checking:
                raise FileNotFoundError(
                    f"SSH host key verification required but "
                    f"known_hosts file not found: {path}\n\n"
                    f"To fix this:\n"
                    f"1. Add host keys: ssh-keyscan <hostname> >> {path}\n"
                    f"2. Or point RUNCMD_KNOWN_HOSTS at another file\n"
                    f"3. Or disable verification (NOT RECOMMENDED): "
                    f"RUNCMD_KNOWN_HOSTS=none"
                )
            logger.warning(
                "known_hosts not found at %s, verification disabled. "
                "This is insecure!",
                path,
            )
            return None

        return str(path)

    def get_known_hosts_path(self) -> str | None:
        """Get path to known_hosts file.

        Returns:
            Path string or None if verification disabled
        """
        return self._known_hosts

    def is_enabled(self) -> bool:
        """Check if host key verification is enabled."""
        return self._known_hosts is not None
