from ..core.interfaces.command_executor import ICommandWorker
from ..core.exceptions.zfs_exceptions import ZFSException
from ..core.value_objects.dataset_kind import snapshot_ref
from ..core.result import Result
from .base import ZFSServiceBase


class DatasetService(ZFSServiceBase):
    """One-command lifecycle operations on filesystems and snapshots."""

    async def create_snapshot(self, fs: str, snap: str) -> Result[str, ZFSException]:
        name = snapshot_ref(fs, snap)
        self._logger.info(f"Creating snapshot: {name}")
        return (await self._run_zfs("snapshot", name)).map(lambda _: name)

    async def create_filesystem(self, fs: str) -> Result[str, ZFSException]:
        self._logger.info(f"Creating filesystem: {fs}")
        return (await self._run_zfs("create", fs)).map(lambda _: fs)

    async def destroy(self, target: str) -> Result[str, ZFSException]:
        self._logger.info(f"Destroying: {target}")
        return (await self._run_zfs("destroy", target)).map(lambda _: target)

    async def rename_snapshot(self, fs: str, old_snap: str, new_snap: str) -> Result[str, ZFSException]:
        new_name = snapshot_ref(fs, new_snap)
        self._logger.info(f"Renaming snapshot {snapshot_ref(fs, old_snap)} to {new_name}")
        result = await self._run_zfs("rename", snapshot_ref(fs, old_snap), new_name)
        return result.map(lambda _: new_name)

    async def prepare_receive(self, fs: str, snap: str) -> Result[ICommandWorker, ZFSException]:
        """Start `zfs recv fs@snap` with its stdin piped and return the worker.

        The caller owns the returned worker and must wait on it.
        """
        worker = self._executor.command("recv", snapshot_ref(fs, snap))
        invocation_error = worker.invocation_error()
        if invocation_error is not None:
            return Result.failure(invocation_error)
        try:
            worker.stdin_pipe()
            await worker.start()
        except ZFSException as e:
            self._logger.error(f"Cannot start receive into {snapshot_ref(fs, snap)}: {e}")
            return Result.failure(e)
        self._logger.info(f"Receiver started for {snapshot_ref(fs, snap)}", {"pid": getattr(worker, 'pid', None)})
        return Result.success(worker)
