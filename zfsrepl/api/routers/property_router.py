"""
Property read/write endpoints.
"""
from fastapi import APIRouter, Depends, Query

from ..dependencies import get_property_service
from ..middleware import create_error_response
from ..models import PropertyResponse, PropertySetRequest
from ...zfs_operations.services.property_service import PropertyService


router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


@router.get("/", response_model=PropertyResponse)
async def get_property(
    target: str = Query(..., min_length=1),
    key: str = Query(..., min_length=1),
    properties: PropertyService = Depends(get_property_service)
):
    result = await properties.get(target, key)
    if result.is_failure:
        return create_error_response(result.error)
    return PropertyResponse(target=target, key=key, value=result.value)


@router.put("/", response_model=PropertyResponse)
async def set_property(
    request: PropertySetRequest,
    properties: PropertyService = Depends(get_property_service)
):
    """Set a property; fails unless the value reads back unchanged."""
    result = await properties.set(request.target, request.key, request.value)
    if result.is_failure:
        return create_error_response(result.error)
    return PropertyResponse(target=request.target, key=request.key, value=result.value)
