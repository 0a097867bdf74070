
from ..core.exceptions.zfs_exceptions import ZFSException, PropertyVerificationError
from ..core.result import Result
from .base import ZFSServiceBase


class PropertyService(ZFSServiceBase):
    """Reads and writes single properties on datasets and snapshots.

    Values are opaque text. Nothing is cached: every read queries zfs.
    """

    async def get(self, target: str, key: str) -> Result[str, ZFSException]:
        """Return the trimmed value of `key` on `target`."""
        self._logger.debug(f"Reading property {key} of {target}")
        result = await self._run_zfs("get", "-Ho", "value", key, target)
        return result.map(lambda out: out.strip())

    async def set(self, target: str, key: str, value: str) -> Result[str, ZFSException]:
        """Write `key=value` on `target` and verify it by reading it back.

        The write is only trusted once the read-back equals `value` exactly;
        on success the verified value is returned.
        """
        self._logger.info(f"Setting property {key}={value} on {target}")
        written = await self._run_zfs("set", f"{key}={value}", target)
        if written.is_failure:
            return Result.failure(written.error)

        current = await self.get(target, key)
        if current.is_failure:
            return Result.failure(current.error)
        if current.value != value:
            self._logger.error(
                f"Property {key} on {target} reads back as {current.value!r}, expected {value!r}"
            )
            return Result.failure(PropertyVerificationError(target, key, value, current.value))
        return Result.success(current.value)
