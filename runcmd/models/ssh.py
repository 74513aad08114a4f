"""SSH-related data models."""

from dataclasses import dataclass

from runcmd.errors import InvalidArgumentError

DEFAULT_SSH_PORT = 22


@dataclass
class SSHTarget:
    """Remote endpoint a runner dials."""

    user: str
    host: str
    port: int = DEFAULT_SSH_PORT

    @classmethod
    def parse(cls, user: str, address: str) -> "SSHTarget":
        """Build a target from a ``host``, ``host:port`` or ``[v6]:port`` address.

        Args:
            user: Login name
            address: Host address, optionally with a port

        Returns:
            Parsed SSHTarget

        Raises:
            InvalidArgumentError: If the address or port is malformed
        """
        address = address.strip()
        if not address:
            raise InvalidArgumentError("host address cannot be empty")

        host, port_str = address, ""
        if address.startswith("["):
            end = address.find("]")
            if end == -1:
                raise InvalidArgumentError(f"invalid host address: {address}")
            host = address[1:end]
            rest = address[end + 1 :]
            if rest:
                if not rest.startswith(":"):
                    raise InvalidArgumentError(f"invalid host address: {address}")
                port_str = rest[1:]
        elif address.count(":") == 1:
            host, port_str = address.split(":")

        if not host:
            raise InvalidArgumentError(f"invalid host address: {address}")

        port = DEFAULT_SSH_PORT
        if port_str:
            try:
                port = int(port_str)
            except ValueError:
                raise InvalidArgumentError(f"invalid port in address: {address}") from None
            if not 0 < port < 65536:
                raise InvalidArgumentError(f"port out of range: {port}")

        return cls(user=user, host=host, port=port)

    def __str__(self) -> str:
        return f"{self.user}@{self.host}:{self.port}"
