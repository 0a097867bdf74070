"""
End-to-end local replication: start the receiver, stream the send into it,
then reap both processes.
"""
import uuid
from dataclasses import dataclass
from typing import Optional

from ..core.interfaces.command_executor import ICommandWorker
from ..core.exceptions.zfs_exceptions import (
    ZFSException,
    CommandExecutionError,
    SnapshotNotFoundError,
    ReplicationError,
)
from ..core.value_objects.dataset_kind import snapshot_ref
from ..core.result import Result
from ..infrastructure.logging.structured_logger import OperationLogger
from .dataset_service import DatasetService
from .directory_service import DirectoryService
from .replication_pipeline import ReplicationPipeline


@dataclass
class ReplicationReport:
    source: str
    base: Optional[str]
    target: str
    bytes_transferred: int
    incremental: bool

    def to_dict(self) -> dict:
        return {
            'source': self.source,
            'base': self.base,
            'target': self.target,
            'bytes_transferred': self.bytes_transferred,
            'incremental': self.incremental,
        }


class ReplicationService:
    """Runs one complete send/receive between two datasets.

    No retries and no rollback: a failed transfer leaves the pool as zfs
    left it.
    """

    def __init__(self,
                 directory: DirectoryService,
                 datasets: DatasetService,
                 pipeline: ReplicationPipeline,
                 logger: OperationLogger):
        self._directory = directory
        self._datasets = datasets
        self._pipeline = pipeline
        self._logger = logger

    async def replicate(self,
                        dataset: str,
                        old_snapshot: str,
                        new_snapshot: str,
                        target_dataset: str,
                        target_snapshot: str) -> Result[ReplicationReport, ZFSException]:
        """Send `dataset@old_snapshot` (or the delta up to `new_snapshot`) into
        `target_dataset@target_snapshot`."""
        self._logger.start_operation(
            str(uuid.uuid4()), "replicate",
            dataset=dataset, old_snapshot=old_snapshot, new_snapshot=new_snapshot,
            target=snapshot_ref(target_dataset, target_snapshot)
        )

        for snap in filter(None, (old_snapshot, new_snapshot)):
            found = await self._directory.snapshot_exists(dataset, snap)
            if found.is_failure:
                return self._fail(found.error)
            if not found.value:
                return self._fail(SnapshotNotFoundError(snapshot_ref(dataset, snap)))

        receiver = await self._datasets.prepare_receive(target_dataset, target_snapshot)
        if receiver.is_failure:
            return self._fail(receiver.error)

        streamed = await self._pipeline.send(dataset, old_snapshot, new_snapshot, receiver.value)
        if streamed.is_failure:
            await self._abort(receiver.value, getattr(streamed.error, 'producer', None))
            return self._fail(streamed.error)

        stream = streamed.value
        send_result = await stream.producer.wait()
        recv_result = await receiver.value.wait()
        if not send_result.success:
            return self._fail(ReplicationError(
                "send exited with an error",
                CommandExecutionError.from_result(stream.producer.argv, send_result)
            ))
        if not recv_result.success:
            return self._fail(ReplicationError(
                "receive exited with an error",
                CommandExecutionError.from_result(receiver.value.argv, recv_result)
            ))

        report = ReplicationReport(
            source=snapshot_ref(dataset, new_snapshot or old_snapshot),
            base=snapshot_ref(dataset, old_snapshot) if new_snapshot else None,
            target=snapshot_ref(target_dataset, target_snapshot),
            bytes_transferred=stream.bytes_transferred,
            incremental=stream.incremental,
        )
        self._logger.complete_operation(bytes_transferred=report.bytes_transferred)
        return Result.success(report)

    async def _abort(self, receiver: ICommandWorker, producer: Optional[ICommandWorker]) -> None:
        for worker in (producer, receiver):
            if worker is None or not worker.started:
                continue
            worker.kill()
            await worker.wait()

    def _fail(self, error: ZFSException) -> Result[ReplicationReport, ZFSException]:
        self._logger.fail_operation(str(error), error_code=error.error_code)
        return Result.failure(error)
