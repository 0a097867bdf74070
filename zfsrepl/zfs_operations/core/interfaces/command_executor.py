from abc import ABC, abstractmethod
from typing import List, Optional
from dataclasses import dataclass

from ..exceptions.zfs_exceptions import CommandInvocationError


@dataclass
class CommandResult:
    """Result of a command execution"""
    returncode: int
    stdout: str
    stderr: str
    success: Optional[bool] = None

    def __post_init__(self):
        if self.success is None:
            self.success = self.returncode == 0


class IReadPipe(ABC):
    """Read end of a worker's stdout, usable as an async context manager."""

    @abstractmethod
    async def read(self, size: int) -> bytes:
        """Read up to size bytes; b'' means end of stream."""
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    async def __aenter__(self) -> 'IReadPipe':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


class IWritePipe(ABC):
    """Write end of a worker's stdin. Closing it signals end of input."""

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Write data and wait until the pipe has room again."""
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    async def __aenter__(self) -> 'IWritePipe':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


class ICommandWorker(ABC):
    """Handle on a single external command invocation."""

    @property
    @abstractmethod
    def argv(self) -> List[str]:
        """Full argument vector as it will be executed"""
        pass

    @property
    @abstractmethod
    def started(self) -> bool:
        pass

    @abstractmethod
    def invocation_error(self) -> Optional[CommandInvocationError]:
        """Return why the command cannot be executed, or None if it can"""
        pass

    @abstractmethod
    async def run(self) -> CommandResult:
        """Run to completion with stdout captured"""
        pass

    @abstractmethod
    async def start(self) -> None:
        """Spawn the process without waiting for it"""
        pass

    @abstractmethod
    async def wait(self) -> CommandResult:
        """Wait for a started process to exit, discarding unread stdout"""
        pass

    @abstractmethod
    def stdout_pipe(self) -> IReadPipe:
        """Attach a pipe to stdout; must be requested before start()"""
        pass

    @abstractmethod
    def stdin_pipe(self) -> IWritePipe:
        """Attach a pipe to stdin; must be requested before start()"""
        pass

    @abstractmethod
    def kill(self) -> None:
        pass


class ICommandExecutor(ABC):
    """Interface for building and executing external commands"""

    @abstractmethod
    def command(self, *args: str) -> ICommandWorker:
        """Build a worker for the configured zfs binary"""
        pass

    @abstractmethod
    async def execute_zfs(self, *args: str) -> CommandResult:
        """Validate and run a zfs command, capturing its output"""
        pass
