from enum import Enum


class DatasetKind(str, Enum):
    """Listing filter passed to `zfs list -t`."""
    FILESYSTEM = "filesystem"
    SNAPSHOT = "snapshot"


def snapshot_ref(dataset: str, label: str) -> str:
    """Render a snapshot reference as dataset@label."""
    return f"{dataset}@{label}"
