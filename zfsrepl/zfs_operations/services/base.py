"""
Shared plumbing for services that drive the zfs binary.
"""
from typing import List

from ..core.interfaces.command_executor import ICommandExecutor
from ..core.interfaces.logger_interface import ILogger
from ..core.exceptions.zfs_exceptions import ZFSException, CommandExecutionError
from ..core.result import Result


def split_lines(stdout: str) -> List[str]:
    """Split tool output on newlines, dropping the single trailing empty line.

    No other filtering happens: blank lines in the middle are kept.
    """
    if stdout == "":
        return []
    lines = stdout.split("\n")
    if len(lines) > 1 and lines[-1] == "":
        lines = lines[:-1]
    return lines


class ZFSServiceBase:
    """Runs one zfs invocation and maps its outcome onto a Result."""

    def __init__(self, executor: ICommandExecutor, logger: ILogger):
        self._executor = executor
        self._logger = logger

    async def _run_zfs(self, *args: str) -> Result[str, ZFSException]:
        worker = self._executor.command(*args)
        invocation_error = worker.invocation_error()
        if invocation_error is not None:
            self._logger.error(str(invocation_error))
            return Result.failure(invocation_error)

        try:
            result = await worker.run()
        except ZFSException as e:
            return Result.failure(e)

        if not result.success:
            return Result.failure(CommandExecutionError.from_result(worker.argv, result))
        return Result.success(result.stdout)

    async def _run_zfs_lines(self, *args: str) -> Result[List[str], ZFSException]:
        return (await self._run_zfs(*args)).map(split_lines)
