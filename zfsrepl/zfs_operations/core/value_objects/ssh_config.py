import shlex
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class SSHConfig:
    """SSH configuration value object"""
    host: str
    user: str = "root"
    port: int = 22
    key_file: Optional[str] = None
    timeout: int = 30

    def __post_init__(self):
        if not self.host:
            raise ValueError("Host cannot be empty")
        if not (1 <= self.port <= 65535):
            raise ValueError("Port must be between 1 and 65535")
        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")
        if not self.user:
            raise ValueError("User cannot be empty")

    @property
    def connection_string(self) -> str:
        return f"{self.user}@{self.host}:{self.port}"

    def wrap(self, argv: List[str]) -> List[str]:
        """Return the ssh invocation that runs argv on the remote host.

        ssh hands its command to the remote shell as one string, so argv is
        quoted into a single argument.
        """
        ssh_cmd = [
            "ssh",
            "-o", "StrictHostKeyChecking=yes",
            "-o", f"ConnectTimeout={self.timeout}",
            "-o", "BatchMode=yes",  # never prompt for passwords/passphrases
            "-p", str(self.port),
            "-l", self.user,
        ]
        if self.key_file:
            ssh_cmd.extend(["-i", self.key_file])
        ssh_cmd.append(self.host)
        return ssh_cmd + [shlex.join(argv)]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return {
            'host': self.host,
            'user': self.user,
            'port': self.port,
            'key_file': self.key_file,
            'timeout': self.timeout
        }
