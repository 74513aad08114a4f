"""Configuration module for runcmd.

- Settings: Environment variable configuration
- HostKeyVerifier: Resolves the known_hosts file used when dialing
"""

from runcmd.config.host_keys import HostKeyVerifier
from runcmd.config.settings import Settings

__all__ = ["HostKeyVerifier", "Settings"]
