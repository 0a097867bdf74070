"""
Streams `zfs send` output into the stdin of a receiving process.
"""
from dataclasses import dataclass
from typing import List

from ..core.interfaces.command_executor import ICommandExecutor, ICommandWorker, IReadPipe, IWritePipe
from ..core.interfaces.logger_interface import ILogger
from ..core.exceptions.zfs_exceptions import ZFSException, StreamingError
from ..core.value_objects.dataset_kind import snapshot_ref
from ..core.result import Result

DEFAULT_CHUNK_SIZE = 64 * 1024


def build_send_args(dataset: str, old_snapshot: str, new_snapshot: str = "") -> List[str]:
    """Arguments for an incremental send, or a full send when `new_snapshot` is empty."""
    if not new_snapshot:
        return ["send", snapshot_ref(dataset, old_snapshot)]
    return ["send", "-i", snapshot_ref(dataset, old_snapshot), snapshot_ref(dataset, new_snapshot)]


class StreamCopy:
    """Bounded-memory copy from a read pipe to a write pipe.

    At most one chunk is held at a time; every write waits for the
    receiving pipe to drain before the next read.
    """

    def __init__(self, reader: IReadPipe, writer: IWritePipe, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._reader = reader
        self._writer = writer
        self._chunk_size = chunk_size
        self.bytes_copied = 0

    async def run(self) -> int:
        while True:
            chunk = await self._reader.read(self._chunk_size)
            if not chunk:
                return self.bytes_copied
            await self._writer.write(chunk)
            self.bytes_copied += len(chunk)


@dataclass
class ReplicationStream:
    """A finished copy. The producer may still need to be reaped."""
    producer: ICommandWorker
    bytes_transferred: int
    incremental: bool

    def to_dict(self) -> dict:
        return {
            'producer': self.producer.argv,
            'bytes_transferred': self.bytes_transferred,
            'incremental': self.incremental,
        }


class ReplicationPipeline:
    """Connects a `zfs send` producer to a caller-owned receiver worker.

    The receiver is borrowed: this class never starts, kills or waits on it.
    The producer is started here and handed back to the caller to reap.
    """

    def __init__(self, executor: ICommandExecutor, logger: ILogger, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._executor = executor
        self._logger = logger
        self._chunk_size = chunk_size

    async def send(self,
                   dataset: str,
                   old_snapshot: str,
                   new_snapshot: str,
                   receiver: ICommandWorker) -> Result[ReplicationStream, ZFSException]:
        producer = self._executor.command(*build_send_args(dataset, old_snapshot, new_snapshot))
        invocation_error = producer.invocation_error()
        if invocation_error is not None:
            self._logger.error(f"Send not executable: {invocation_error}")
            return Result.failure(invocation_error)

        try:
            producer_out = producer.stdout_pipe()
            receiver_in = receiver.stdin_pipe()
        except ZFSException as e:
            self._logger.error(f"Cannot connect send to receiver: {e}")
            return Result.failure(e)

        self._logger.info(
            f"Streaming {' '.join(producer.argv)} into {' '.join(receiver.argv)}",
            {"dataset": dataset, "old_snapshot": old_snapshot, "new_snapshot": new_snapshot}
        )
        async with producer_out, receiver_in:
            try:
                await producer.start()
            except ZFSException as e:
                self._logger.error(f"Cannot start send: {e}")
                return Result.failure(e)

            copier = StreamCopy(producer_out, receiver_in, self._chunk_size)
            try:
                copied = await copier.run()
            except (OSError, ZFSException) as e:
                self._logger.error(f"Stream copy failed after {copier.bytes_copied} bytes: {e}")
                return Result.failure(StreamingError(str(e) or type(e).__name__, producer, copier.bytes_copied))

        self._logger.info(f"Streamed {copied} bytes from {snapshot_ref(dataset, old_snapshot)}")
        return Result.success(ReplicationStream(producer, copied, incremental=bool(new_snapshot)))
