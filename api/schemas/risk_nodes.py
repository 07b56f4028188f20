"""
Pydantic schemas for the risk node API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from risk_nodes.data.geometry import polygon_to_shape
from risk_nodes.data.models import RiskNode


class CreateNodesRequest(BaseModel):
    """Request model for creating a batch of risk nodes."""
    model_config = ConfigDict(populate_by_name=True)

    points: List[RiskNode] = Field(..., min_length=1, description="Nodes to create")
    batch_id: Optional[str] = Field(default=None, alias="batchId",
                                    description="Batch identifier applied to every node")


class CnnLookupRequest(BaseModel):
    """Request model for bulk lookup by CNN."""
    cnns: List[str] = Field(..., description="CNNs to look up")


class PolygonRequest(BaseModel):
    """Request model for polygon queries."""
    polygon: Dict[str, Any] = Field(..., description="GeoJSON Polygon or MultiPolygon")

    @field_validator('polygon')
    @classmethod
    def validate_polygon(cls, v):
        """Reject polygons that are not valid GeoJSON."""
        polygon_to_shape(v)
        return v


class CacheStats(BaseModel):
    """Node cache statistics."""
    size: int = Field(..., description="Cached nodes")
    max_entries: int = Field(..., description="Cache capacity")
    hits: int = Field(..., description="Cache hits since startup")
    misses: int = Field(..., description="Cache misses since startup")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    store_backend: str = Field(..., description="Configured store backend")
    cache: CacheStats = Field(..., description="Node cache statistics")


class ErrorResponse(BaseModel):
    """Error response model."""
    success: bool = Field(False, description="Always false for error responses")
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Detailed error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
