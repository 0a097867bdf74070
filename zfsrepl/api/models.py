"""
Pydantic models for API request/response validation.
"""
from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field


class APIError(BaseModel):
    """API error response model."""
    success: bool = False
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None


class DatasetListResponse(BaseModel):
    success: bool = True
    datasets: List[str]
    count: int


class ExistsResponse(BaseModel):
    success: bool = True
    target: str
    kind: str
    exists: bool


class RecentSnapshotResponse(BaseModel):
    """`snapshot` is None when no snapshot qualified."""
    success: bool = True
    pattern: str
    property: str = ""
    snapshot: Optional[str] = None


class PropertyResponse(BaseModel):
    success: bool = True
    target: str
    key: str
    value: str


class PropertySetRequest(BaseModel):
    target: str = Field(..., min_length=1, description="Dataset or snapshot name")
    key: str = Field(..., min_length=1, description="Property name")
    value: str = Field(..., description="Property value")


class ReplicationRequest(BaseModel):
    """Full send when new_snapshot is empty, incremental otherwise."""
    dataset: str = Field(..., min_length=1, description="Source dataset")
    old_snapshot: str = Field(..., min_length=1, description="Base snapshot, or the snapshot to send in full")
    new_snapshot: str = Field(default="", description="Newest snapshot for an incremental send")
    target_dataset: str = Field(..., min_length=1, description="Receiving dataset")
    target_snapshot: str = Field(..., min_length=1, description="Snapshot name to receive as")


class ReplicationResponse(BaseModel):
    success: bool = True
    replication: Dict[str, Any]
