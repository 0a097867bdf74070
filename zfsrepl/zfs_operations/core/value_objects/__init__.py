"""
Value objects for ZFS operations.
"""

from .dataset_kind import DatasetKind, snapshot_ref
from .ssh_config import SSHConfig

__all__ = ["DatasetKind", "SSHConfig", "snapshot_ref"]
