"""
Dataset listing and existence endpoints.
"""
from fastapi import APIRouter, Depends, Query

from ..dependencies import get_directory_service
from ..middleware import create_error_response
from ..models import DatasetListResponse, ExistsResponse
from ...zfs_operations.core.value_objects.dataset_kind import DatasetKind
from ...zfs_operations.services.directory_service import DirectoryService


router = APIRouter(prefix="/api/v1/datasets", tags=["datasets"])


@router.get("/", response_model=DatasetListResponse)
async def list_datasets(
    pattern: str = Query("", description="Dataset name, or prefix ending in *"),
    kind: DatasetKind = Query(DatasetKind.FILESYSTEM, description="Listing type"),
    recursive: bool = Query(False, description="Recursive listing"),
    directory: DirectoryService = Depends(get_directory_service)
):
    """List datasets or snapshots."""
    result = await directory.list_datasets(pattern, kind, recursive)
    if result.is_failure:
        return create_error_response(result.error)
    return DatasetListResponse(datasets=result.value, count=len(result.value))


@router.get("/exists", response_model=ExistsResponse)
async def dataset_exists(
    target: str = Query(..., min_length=1, description="Dataset or snapshot name"),
    kind: DatasetKind = Query(DatasetKind.FILESYSTEM, description="Listing type"),
    directory: DirectoryService = Depends(get_directory_service)
):
    result = await directory.exists(target, kind)
    if result.is_failure:
        return create_error_response(result.error)
    return ExistsResponse(target=target, kind=kind.value, exists=result.value)
