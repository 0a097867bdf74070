"""
Dataset and snapshot directory: listings, existence checks and
recency-ordered snapshot selection.
"""
from typing import Callable, List, Optional, Union

from ..core.interfaces.command_executor import ICommandExecutor
from ..core.interfaces.logger_interface import ILogger
from ..core.exceptions.zfs_exceptions import ZFSException
from ..core.value_objects.dataset_kind import DatasetKind, snapshot_ref
from ..core.result import Result
from .base import ZFSServiceBase
from .property_service import PropertyService

NotFoundPredicate = Callable[[str], bool]

DEFAULT_NOT_FOUND_MARKER = "dataset does not exist"
WILDCARD = "*"
PROPERTY_TRUE = "true"


def marker_predicate(marker: str = DEFAULT_NOT_FOUND_MARKER) -> NotFoundPredicate:
    """Classify an error as "target absent" when its text contains `marker`."""
    def is_not_found(error_text: str) -> bool:
        return marker in error_text
    return is_not_found


def _kind_value(kind: Union[DatasetKind, str]) -> str:
    return kind.value if isinstance(kind, DatasetKind) else kind


class DirectoryService(ZFSServiceBase):
    """Lists datasets and snapshots and picks replication endpoints."""

    def __init__(self,
                 executor: ICommandExecutor,
                 logger: ILogger,
                 property_service: PropertyService,
                 is_not_found: Optional[NotFoundPredicate] = None):
        super().__init__(executor, logger)
        self._properties = property_service
        self._is_not_found = is_not_found or marker_predicate()

    async def list_datasets(self,
                            pattern: str = "",
                            kind: Union[DatasetKind, str] = DatasetKind.FILESYSTEM,
                            recursive: bool = False) -> Result[List[str], ZFSException]:
        """List dataset or snapshot names.

        A pattern ending in ``*`` lists every filesystem and keeps the names
        that contain the pattern minus the ``*`` (substring match, not a glob).
        Snapshot entries are never matched this way. An empty pattern lists
        everything of `kind`.
        """
        if pattern.endswith(WILDCARD):
            return await self._list_matching(pattern.rstrip(WILDCARD))

        args = ["list", "-Ho", "name", "-t", _kind_value(kind)]
        if recursive:
            args.append("-r")
        # an empty target argument is not the same as no target for zfs list
        if pattern:
            args.append(pattern)
        return await self._run_zfs_lines(*args)

    async def _list_matching(self, needle: str) -> Result[List[str], ZFSException]:
        everything = await self.list_datasets("", DatasetKind.FILESYSTEM, recursive=False)
        if everything.is_failure:
            return everything
        return Result.success([name for name in everything.value if needle in name])

    async def list_snapshots_of_dataset(self, dataset: str) -> Result[List[str], ZFSException]:
        """List the snapshots directly attached to `dataset`."""
        return await self._run_zfs_lines("list", "-Ho", "name", "-d1", "-t", "snapshot", dataset)

    async def exists(self, target: str, kind: Union[DatasetKind, str] = DatasetKind.FILESYSTEM) -> Result[bool, ZFSException]:
        """Probe `target`; only a recognised not-found failure yields False."""
        listing = await self.list_datasets(target, kind, recursive=False)
        if listing.is_success:
            return Result.success(True)
        if self._is_not_found(str(listing.error)):
            self._logger.debug(f"{_kind_value(kind)} {target} does not exist")
            return Result.success(False)
        return Result.failure(listing.error)

    async def filesystem_exists(self, fs: str) -> Result[bool, ZFSException]:
        return await self.exists(fs, DatasetKind.FILESYSTEM)

    async def snapshot_exists(self, fs: str, snap: str) -> Result[bool, ZFSException]:
        return await self.exists(snapshot_ref(fs, snap), DatasetKind.SNAPSHOT)

    async def most_recent_snapshot(self, pattern: str, property_key: str = "") -> Result[str, ZFSException]:
        """Return the newest snapshot under `pattern`, optionally requiring
        `property_key` to read ``"true"``.

        Ordering comes from ``zfs list -S creation`` and is not re-checked.
        A candidate whose property cannot be read is skipped, not fatal.
        An empty string means nothing qualified.
        """
        args = ["list", "-Hro", "name", "-t", "snapshot", "-S", "creation"]
        if pattern:
            args.append(pattern)
        listing = await self._run_zfs_lines(*args)
        if listing.is_failure:
            return Result.failure(listing.error)

        for snapshot in listing.value:
            if not property_key:
                return Result.success(snapshot)

            value = await self._properties.get(snapshot, property_key)
            if value.is_failure:
                self._logger.warning(
                    f"Skipping {snapshot}: cannot read {property_key}: {value.error}"
                )
                continue
            if value.value == PROPERTY_TRUE:
                return Result.success(snapshot)

        return Result.success("")
