"""
Exception hierarchy for ZFS operations.
"""

from .zfs_exceptions import (
    ZFSException,
    CommandInvocationError,
    CommandExecutionError,
    SnapshotNotFoundError,
    PropertyVerificationError,
    PipeError,
    StreamingError,
    ReplicationError,
)

__all__ = [
    "ZFSException",
    "CommandInvocationError",
    "CommandExecutionError",
    "SnapshotNotFoundError",
    "PropertyVerificationError",
    "PipeError",
    "StreamingError",
    "ReplicationError",
]
