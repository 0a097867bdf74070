"""
Concrete implementation of the command executor interface on top of
asyncio subprocesses.
"""
import asyncio
import logging
import shutil
from typing import FrozenSet, List, Optional

from ..core.interfaces.command_executor import (
    CommandResult,
    ICommandExecutor,
    ICommandWorker,
    IReadPipe,
    IWritePipe,
)
from ..core.exceptions.zfs_exceptions import CommandInvocationError, PipeError
from ..core.value_objects.ssh_config import SSHConfig


logger = logging.getLogger(__name__)

# zfs subcommands this package is allowed to issue
ALLOWED_ZFS_COMMANDS: FrozenSet[str] = frozenset({
    'list', 'get', 'set', 'create', 'destroy', 'snapshot',
    'send', 'recv', 'receive', 'rename',
})

TIMEOUT_EXIT_CODE = 124

DISCARD_CHUNK_SIZE = 64 * 1024


class ProcessReadPipe(IReadPipe):
    """Stdout of a worker. Reads fail until the worker has been started."""

    def __init__(self, worker: 'CommandWorker'):
        self._worker = worker
        self._closed = False

    async def read(self, size: int) -> bytes:
        if self._closed:
            return b""
        process = self._worker._require_process("stdout")
        return await process.stdout.read(size)

    async def close(self) -> None:
        self._closed = True


class ProcessWritePipe(IWritePipe):
    """Stdin of a worker. Closing it delivers end-of-input to the process."""

    def __init__(self, worker: 'CommandWorker'):
        self._worker = worker
        self._closed = False

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise PipeError(self._worker.argv, "stdin", "pipe already closed")
        process = self._worker._require_process("stdin")
        process.stdin.write(data)
        await process.stdin.drain()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        process = self._worker._process
        if process is None or process.stdin is None:
            return
        process.stdin.close()
        try:
            await process.stdin.wait_closed()
        except (BrokenPipeError, ConnectionResetError) as e:
            # reader already exited; its exit status reports the real failure
            logger.debug(f"stdin of {self._worker.argv[0]} closed by peer: {e}")


class CommandWorker(ICommandWorker):
    """A single external command that can be run, or started and piped."""

    def __init__(self,
                 argv: List[str],
                 timeout: Optional[float] = None,
                 allowed_subcommands: Optional[FrozenSet[str]] = None,
                 subcommand: Optional[str] = None):
        self._argv = list(argv)
        self._timeout = timeout
        self._allowed_subcommands = allowed_subcommands
        self._subcommand = subcommand
        self._process: Optional[asyncio.subprocess.Process] = None
        self._stdout_pipe: Optional[ProcessReadPipe] = None
        self._stdin_pipe: Optional[ProcessWritePipe] = None
        self._stderr_task: Optional[asyncio.Future] = None

    @property
    def argv(self) -> List[str]:
        return list(self._argv)

    @property
    def started(self) -> bool:
        return self._process is not None

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process else None

    def invocation_error(self) -> Optional[CommandInvocationError]:
        if not self._argv or not self._argv[0]:
            return CommandInvocationError(self._argv, "empty program name")
        if self._allowed_subcommands is not None and self._subcommand not in self._allowed_subcommands:
            return CommandInvocationError(self._argv, f"ZFS command '{self._subcommand}' not allowed")
        if shutil.which(self._argv[0]) is None:
            return CommandInvocationError(self._argv, "executable not found")
        return None

    def stdout_pipe(self) -> IReadPipe:
        if self._stdout_pipe is None:
            if self.started:
                raise PipeError(self._argv, "stdout", "process already started")
            self._stdout_pipe = ProcessReadPipe(self)
        return self._stdout_pipe

    def stdin_pipe(self) -> IWritePipe:
        if self._stdin_pipe is None:
            if self.started:
                raise PipeError(self._argv, "stdin", "process already started")
            self._stdin_pipe = ProcessWritePipe(self)
        return self._stdin_pipe

    async def run(self) -> CommandResult:
        """Run the command to completion with stdout and stderr captured."""
        if self.started:
            raise CommandInvocationError(self._argv, "process already started")
        logger.debug(f"Executing command: {' '.join(self._argv)}")
        self._process = await self._spawn(
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                self._process.communicate(),
                timeout=self._timeout
            )
        except asyncio.TimeoutError:
            self.kill()
            await self._process.wait()
            return CommandResult(
                returncode=TIMEOUT_EXIT_CODE,
                stdout="",
                stderr=f"Command timed out after {self._timeout} seconds"
            )

        result = CommandResult(
            returncode=self._process.returncode,
            stdout=stdout.decode('utf-8', errors='replace'),
            stderr=stderr.decode('utf-8', errors='replace').strip()
        )
        if not result.success:
            logger.warning(f"Command failed with exit code {result.returncode}: {result.stderr}")
        return result

    async def start(self) -> None:
        """Spawn the process with whichever pipes were requested beforehand."""
        if self.started:
            raise CommandInvocationError(self._argv, "process already started")
        logger.debug(f"Starting command: {' '.join(self._argv)}")
        self._process = await self._spawn(
            stdin=asyncio.subprocess.PIPE if self._stdin_pipe else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE if self._stdout_pipe else asyncio.subprocess.DEVNULL,
        )
        # drain stderr in the background so a chatty process never blocks on it
        self._stderr_task = asyncio.ensure_future(self._process.stderr.read())

    async def wait(self) -> CommandResult:
        if self._process is None:
            raise CommandInvocationError(self._argv, "process not started")
        process = self._process
        if self._stdout_pipe is not None:
            # asyncio only reports the exit once every pipe has hit EOF, so
            # stdout nobody consumed is read and dropped here
            await self._stdout_pipe.close()
            returncode, _ = await asyncio.gather(process.wait(), self._discard_stdout(process))
        else:
            returncode = await process.wait()
        stderr = b""
        if self._stderr_task is not None:
            stderr = await self._stderr_task
        result = CommandResult(
            returncode=returncode,
            stdout="",
            stderr=stderr.decode('utf-8', errors='replace').strip()
        )
        if not result.success:
            logger.warning(f"Command {self._argv[0]} exited with code {returncode}: {result.stderr}")
        return result

    def kill(self) -> None:
        if self._process is None or self._process.returncode is not None:
            return
        try:
            self._process.kill()
        except ProcessLookupError:
            pass

    async def _spawn(self, stdin: int, stdout: int) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(
                *self._argv,
                stdin=stdin,
                stdout=stdout,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise CommandInvocationError(self._argv, str(e)) from e

    @staticmethod
    async def _discard_stdout(process: asyncio.subprocess.Process) -> None:
        while await process.stdout.read(DISCARD_CHUNK_SIZE):
            pass

    def _require_process(self, stream: str) -> asyncio.subprocess.Process:
        if self._process is None:
            raise PipeError(self._argv, stream, "process not started")
        return self._process

    def __repr__(self) -> str:
        return f"CommandWorker({' '.join(self._argv)!r}, pid={self.pid})"


class CommandExecutor(ICommandExecutor):
    """Builds command workers for the zfs binary, locally or over SSH."""

    def __init__(self,
                 zfs_binary: str = "zfs",
                 timeout: Optional[float] = 30,
                 ssh_config: Optional[SSHConfig] = None):
        self.zfs_binary = zfs_binary
        self.timeout = timeout
        self.ssh_config = ssh_config

    def command(self, *args: str) -> CommandWorker:
        subcommand = args[0] if args else None
        return CommandWorker(
            self._wrap([self.zfs_binary, *args]),
            timeout=self.timeout,
            allowed_subcommands=ALLOWED_ZFS_COMMANDS,
            subcommand=subcommand
        )

    async def execute_zfs(self, *args: str) -> CommandResult:
        """Execute ZFS command with validation."""
        worker = self.command(*args)
        error = worker.invocation_error()
        if error is not None:
            return CommandResult(returncode=127, stdout="", stderr=str(error))
        return await worker.run()

    def _wrap(self, argv: List[str]) -> List[str]:
        if self.ssh_config is None:
            return argv
        return self.ssh_config.wrap(argv)
