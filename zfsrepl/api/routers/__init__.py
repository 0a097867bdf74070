"""
API routers for zfsrepl.
"""

from .dataset_router import router as dataset_router
from .snapshot_router import router as snapshot_router
from .property_router import router as property_router
from .replication_router import router as replication_router

__all__ = [
    "dataset_router",
    "snapshot_router",
    "property_router",
    "replication_router",
]
