"""
Interfaces for the command execution and logging seams.
"""

from .command_executor import CommandResult, ICommandExecutor, ICommandWorker, IReadPipe, IWritePipe
from .logger_interface import ILogger

__all__ = [
    "CommandResult",
    "ICommandExecutor",
    "ICommandWorker",
    "IReadPipe",
    "IWritePipe",
    "ILogger",
]
