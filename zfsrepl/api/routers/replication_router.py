"""
Replication endpoint: send a snapshot (or delta) into another dataset.
"""
from fastapi import APIRouter, Depends

from ..dependencies import get_replication_service
from ..middleware import create_error_response
from ..models import ReplicationRequest, ReplicationResponse
from ...zfs_operations.services.replication_service import ReplicationService


router = APIRouter(prefix="/api/v1/replications", tags=["replications"])


@router.post("/", response_model=ReplicationResponse, status_code=201)
async def replicate(
    request: ReplicationRequest,
    replication: ReplicationService = Depends(get_replication_service)
):
    """Run one send/receive to completion."""
    result = await replication.replicate(
        request.dataset,
        request.old_snapshot,
        request.new_snapshot,
        request.target_dataset,
        request.target_snapshot
    )
    if result.is_failure:
        return create_error_response(result.error)
    return ReplicationResponse(replication=result.value.to_dict())
