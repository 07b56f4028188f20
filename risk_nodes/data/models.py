"""
Pydantic models for risk nodes and the records that cross the store boundary.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GeoPoint(BaseModel):
    """GeoJSON Point with ``[longitude, latitude]`` coordinates."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(default="Point", description="GeoJSON geometry type")
    coordinates: Tuple[float, float] = Field(..., description="[longitude, latitude]")

    @field_validator('type')
    @classmethod
    def validate_type(cls, v):
        if v != "Point":
            raise ValueError(f"location must be a GeoJSON Point, got {v!r}")
        return v

    @field_validator('coordinates')
    @classmethod
    def validate_coordinates(cls, v):
        lon, lat = v
        if not -180.0 <= lon <= 180.0:
            raise ValueError('Longitude must be between -180 and 180')
        if not -90.0 <= lat <= 90.0:
            raise ValueError('Latitude must be between -90 and 90')
        return v

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]

    @classmethod
    def from_lon_lat(cls, lon: float, lat: float) -> 'GeoPoint':
        return cls(coordinates=(lon, lat))

    @classmethod
    def coerce(cls, value: Union['GeoPoint', Mapping[str, Any], Sequence[float]]) -> 'GeoPoint':
        """Accept a GeoPoint, a GeoJSON Point mapping or a ``(lon, lat)`` pair."""
        if isinstance(value, GeoPoint):
            return value
        if isinstance(value, Mapping):
            return cls.model_validate(dict(value))
        lon, lat = value
        return cls.from_lon_lat(lon, lat)


class Edge(BaseModel):
    """Reference from a node to a neighboring node."""

    model_config = ConfigDict(frozen=True)

    cnn: str = Field(..., min_length=1, description="CNN of the neighboring node")


class RiskNode(BaseModel):
    """
    A risk-scored geographic node.

    Nodes are immutable once built, so the same instance can be handed out by
    the store, held in the cache and returned to callers.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cnn: str = Field(..., min_length=1, description="Unique node identifier")
    risk: float = Field(..., description="Risk score for the node")
    location: GeoPoint = Field(..., description="GeoJSON Point location")
    edges: Tuple[Edge, ...] = Field(default=(), description="Neighboring node references")
    batch_id: Optional[str] = Field(default=None, alias="batchId",
                                    description="Batch the node was created in")

    @property
    def neighbor_cnns(self) -> List[str]:
        return [edge.cnn for edge in self.edges]

    def with_batch(self, batch_id: Optional[str]) -> 'RiskNode':
        return self.model_copy(update={'batch_id': batch_id})

    def to_record(self) -> Dict[str, Any]:
        """Return the wire record (``batchId`` key, lists instead of tuples)."""
        return self.model_dump(by_alias=True, mode='json')


class RiskPoint(BaseModel):
    """Location and risk of a node, without its identifier."""

    model_config = ConfigDict(frozen=True)

    location: GeoPoint
    risk: float


NodeInput = Union[RiskNode, Mapping[str, Any]]


def build_risk_node(point: NodeInput, batch_id: Optional[str] = None) -> RiskNode:
    """Build a node from a model or a wire record and tag it with ``batch_id``."""
    if isinstance(point, RiskNode):
        return point.with_batch(batch_id)
    record = dict(point)
    record.pop('batch_id', None)
    record['batchId'] = batch_id
    return RiskNode.model_validate(record)
