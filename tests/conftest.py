"""
Shared fixtures for zfsrepl tests.

`zfs_responses` maps a zfs argument tuple to the CommandResult the mocked
executor returns for it; anything unmapped fails like an unknown command.
"""

import sys
from typing import Dict, Optional, Tuple
from unittest.mock import Mock, AsyncMock

import pytest

from zfsrepl.zfs_operations.core.interfaces.command_executor import CommandResult
from zfsrepl.zfs_operations.core.exceptions.zfs_exceptions import CommandInvocationError
from zfsrepl.zfs_operations.infrastructure.command_executor import CommandWorker
from zfsrepl.zfs_operations.services.property_service import PropertyService
from zfsrepl.zfs_operations.services.directory_service import DirectoryService
from zfsrepl.zfs_operations.services.dataset_service import DatasetService


NOT_FOUND_STDERR = "cannot open 'pool/missing': dataset does not exist"


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(returncode=0, stdout=stdout, stderr="")


def failed(stderr: str, returncode: int = 1) -> CommandResult:
    return CommandResult(returncode=returncode, stdout="", stderr=stderr)


def make_worker(result: Optional[CommandResult] = None,
                argv=None,
                invocation_error: Optional[CommandInvocationError] = None) -> Mock:
    worker = Mock()
    worker.argv = list(argv or ["zfs"])
    worker.started = False
    worker.invocation_error = Mock(return_value=invocation_error)
    worker.run = AsyncMock(return_value=result)
    worker.start = AsyncMock()
    worker.wait = AsyncMock(return_value=ok())
    return worker


@pytest.fixture
def zfs_responses() -> Dict[Tuple[str, ...], CommandResult]:
    return {}


@pytest.fixture
def mock_executor(zfs_responses):
    """Executor whose workers answer from zfs_responses."""
    executor = Mock()

    def command(*args):
        result = zfs_responses.get(tuple(args), failed(f"unexpected command: {' '.join(args)}"))
        return make_worker(result, argv=["zfs", *args])

    executor.command = Mock(side_effect=command)
    return executor


@pytest.fixture
def mock_logger():
    logger = Mock()
    logger.info = Mock()
    logger.error = Mock()
    logger.warning = Mock()
    logger.debug = Mock()
    return logger


@pytest.fixture
def property_service(mock_executor, mock_logger):
    return PropertyService(mock_executor, mock_logger)


@pytest.fixture
def directory_service(mock_executor, mock_logger, property_service):
    return DirectoryService(mock_executor, mock_logger, property_service)


@pytest.fixture
def dataset_service(mock_executor, mock_logger):
    return DatasetService(mock_executor, mock_logger)


# child process scripts standing in for zfs send and zfs recv
PRODUCER = """
import sys
total = int(sys.argv[1])
out = sys.stdout.buffer
block = bytes(range(256)) * 256
while total > 0:
    n = min(total, len(block))
    out.write(block[:n])
    total -= n
out.flush()
"""

COUNTER = """
import sys
count = 0
while True:
    data = sys.stdin.buffer.read(65536)
    if not data:
        break
    count += len(data)
with open(sys.argv[1], "w") as f:
    f.write(str(count))
"""

EARLY_EXIT = """
import sys
sys.stdin.buffer.read(10)
"""


def python_worker(script: str, *args: str) -> CommandWorker:
    return CommandWorker([sys.executable, "-c", script, *args])
