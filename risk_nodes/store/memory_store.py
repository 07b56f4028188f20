"""
Dictionary-backed risk node store.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from shapely.geometry import Point

from .base_store import BaseRiskNodeStore
from ..data.distance_utils import haversine_distances
from ..data.geometry import polygon_to_shape
from ..data.models import GeoPoint, RiskNode
from ..exceptions import StoreError

logger = logging.getLogger(__name__)


class InMemoryRiskNodeStore(BaseRiskNodeStore):
    """
    Risk node store that keeps every node in process memory.
    
    Used for tests, demos and small seeded deployments.
    """
    
    name = "memory"
    
    def __init__(self):
        self._nodes: Dict[str, RiskNode] = {}
    
    def __len__(self) -> int:
        return len(self._nodes)
    
    async def insert_many(self, nodes: Sequence[RiskNode]) -> List[RiskNode]:
        nodes = list(nodes)
        seen = set()
        for node in nodes:
            if node.cnn in self._nodes or node.cnn in seen:
                raise StoreError(f"Duplicate CNN: {node.cnn}")
            seen.add(node.cnn)
        
        for node in nodes:
            self._nodes[node.cnn] = node
        
        logger.debug(f"Inserted {len(nodes)} nodes ({len(self._nodes)} stored)")
        return nodes
    
    async def find_one(self, cnn: str) -> Optional[RiskNode]:
        return self._nodes.get(cnn)
    
    async def find_many(self, cnns: Sequence[str]) -> List[RiskNode]:
        wanted = set(cnns)
        return [node for cnn, node in self._nodes.items() if cnn in wanted]
    
    async def find_near(self, point: GeoPoint, max_distance: float,
                        min_distance: float = 0.0) -> List[RiskNode]:
        if max_distance < 0 or min_distance < 0:
            raise StoreError("Distances must be non-negative")
        if not self._nodes:
            return []
        
        nodes = list(self._nodes.values())
        distances = haversine_distances(
            point.latitude, point.longitude,
            [node.location.latitude for node in nodes],
            [node.location.longitude for node in nodes]
        )
        
        # Stable sort keeps insertion order for equidistant nodes
        order = distances.argsort(kind='stable')
        return [
            nodes[i] for i in order
            if min_distance <= distances[i] <= max_distance
        ]
    
    async def find_within_polygon(self, polygon: Mapping[str, Any],
                                  projection: Sequence[str]) -> List[Dict[str, Any]]:
        try:
            boundary = polygon_to_shape(polygon)
        except ValueError as e:
            raise StoreError(str(e)) from e
        
        return [
            self.project_record(node, projection)
            for node in self._nodes.values()
            if boundary.covers(Point(node.location.coordinates))
        ]
