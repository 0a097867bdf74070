from typing import Dict, Any, List, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from ..interfaces.command_executor import CommandResult, ICommandWorker


class ZFSException(Exception):
    """Base exception for all ZFS operations"""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization"""
        return {
            'error_type': self.__class__.__name__,
            'message': str(self),
            'error_code': self.error_code,
            'details': self.details
        }


class CommandInvocationError(ZFSException):
    """The external command could not be prepared (missing binary, bad arguments)."""

    def __init__(self, argv: Sequence[str], reason: str):
        super().__init__(
            f"Cannot invoke '{' '.join(argv)}': {reason}",
            error_code="COMMAND_INVOCATION_ERROR",
            details={"argv": list(argv), "reason": reason}
        )
        self.argv: List[str] = list(argv)
        self.reason = reason


class CommandExecutionError(ZFSException):
    """The external command ran but exited non-zero or was killed by a signal."""

    def __init__(self, argv: Sequence[str], exit_code: int, stderr: str = ""):
        if exit_code < 0:
            message = f"Command '{' '.join(argv)}' terminated by signal {-exit_code}"
        else:
            message = f"Command '{' '.join(argv)}' failed (exit code {exit_code})"
        if stderr:
            message += f": {stderr}"
        super().__init__(
            message,
            error_code="COMMAND_EXECUTION_ERROR",
            details={"argv": list(argv), "exit_code": exit_code, "stderr": stderr}
        )
        self.argv: List[str] = list(argv)
        self.exit_code = exit_code
        self.stderr = stderr

    @classmethod
    def from_result(cls, argv: Sequence[str], result: 'CommandResult') -> 'CommandExecutionError':
        return cls(argv, result.returncode, result.stderr)


class SnapshotNotFoundError(ZFSException):
    """Snapshot not found exception"""

    def __init__(self, snapshot_name: str):
        super().__init__(
            f"Snapshot '{snapshot_name}' not found",
            error_code="SNAPSHOT_NOT_FOUND",
            details={"snapshot_name": snapshot_name}
        )


class PropertyVerificationError(ZFSException):
    """A property write did not read back as the requested value."""

    def __init__(self, target: str, key: str, expected: str, actual: str):
        super().__init__(
            f"cannot set property: {key}",
            error_code="PROPERTY_VERIFICATION_FAILED",
            details={"target": target, "key": key, "expected": expected, "actual": actual}
        )
        self.key = key


class PipeError(ZFSException):
    """A stdin/stdout pipe could not be attached to a command worker."""

    def __init__(self, argv: Sequence[str], stream: str, reason: str):
        super().__init__(
            f"Cannot attach {stream} of '{' '.join(argv)}': {reason}",
            error_code="PIPE_ERROR",
            details={"argv": list(argv), "stream": stream, "reason": reason}
        )


class StreamingError(ZFSException):
    """Failure while copying bytes from the send process into the receiver.

    The producer worker is attached so the caller can inspect and reap it.
    """

    def __init__(self, reason: str, producer: 'ICommandWorker', bytes_transferred: int = 0):
        super().__init__(
            f"Stream copy failed after {bytes_transferred} bytes: {reason}",
            error_code="STREAMING_ERROR",
            details={"argv": list(producer.argv), "bytes_transferred": bytes_transferred}
        )
        self.producer = producer
        self.bytes_transferred = bytes_transferred


class ReplicationError(ZFSException):
    """Replication finished but one side of the transfer failed."""

    def __init__(self, message: str, cause: Optional[ZFSException] = None):
        details: Dict[str, Any] = {}
        if cause is not None:
            details["cause"] = cause.to_dict()
        super().__init__(message, error_code="REPLICATION_FAILED", details=details)
        self.cause = cause
