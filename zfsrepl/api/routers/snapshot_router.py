"""
Snapshot listing and selection endpoints.
"""
from fastapi import APIRouter, Depends, Query

from ..dependencies import get_directory_service
from ..middleware import create_error_response
from ..models import DatasetListResponse, RecentSnapshotResponse
from ...zfs_operations.services.directory_service import DirectoryService


router = APIRouter(prefix="/api/v1/snapshots", tags=["snapshots"])


@router.get("/", response_model=DatasetListResponse)
async def list_snapshots(
    dataset: str = Query(..., min_length=1, description="Dataset whose snapshots to list"),
    directory: DirectoryService = Depends(get_directory_service)
):
    """List the snapshots directly under a dataset."""
    result = await directory.list_snapshots_of_dataset(dataset)
    if result.is_failure:
        return create_error_response(result.error)
    return DatasetListResponse(datasets=result.value, count=len(result.value))


@router.get("/recent", response_model=RecentSnapshotResponse)
async def most_recent_snapshot(
    pattern: str = Query(..., min_length=1, description="Dataset or snapshot pattern"),
    property: str = Query("", description="Boolean property the snapshot must have set to true"),
    directory: DirectoryService = Depends(get_directory_service)
):
    """Newest snapshot, optionally restricted to those with property=true."""
    result = await directory.most_recent_snapshot(pattern, property)
    if result.is_failure:
        return create_error_response(result.error)
    return RecentSnapshotResponse(pattern=pattern, property=property, snapshot=result.value or None)
