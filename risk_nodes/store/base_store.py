"""
Base abstract class for risk node stores.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..data.models import GeoPoint, RiskNode


class BaseRiskNodeStore(ABC):
    """
    Abstract base class for durable risk node storage.
    
    This defines the interface the service consumes. Implementations raise
    ``StoreError`` for every failure they detect.
    """
    
    name = "base"
    
    @abstractmethod
    async def insert_many(self, nodes: Sequence[RiskNode]) -> List[RiskNode]:
        """
        Insert a batch of nodes.
        
        Args:
            nodes: Nodes to insert; CNNs must be unique
            
        Returns:
            The created nodes
        """
        pass
    
    @abstractmethod
    async def find_one(self, cnn: str) -> Optional[RiskNode]:
        """Find the node with the given CNN, or None."""
        pass
    
    @abstractmethod
    async def find_many(self, cnns: Sequence[str]) -> List[RiskNode]:
        """Find every stored node whose CNN is in ``cnns``."""
        pass
    
    @abstractmethod
    async def find_near(self, point: GeoPoint, max_distance: float,
                        min_distance: float = 0.0) -> List[RiskNode]:
        """
        Find nodes within a distance band around a point.
        
        Args:
            point: Query location
            max_distance: Maximum distance in meters (inclusive)
            min_distance: Minimum distance in meters (inclusive)
            
        Returns:
            Nodes ordered nearest first
        """
        pass
    
    @abstractmethod
    async def find_within_polygon(self, polygon: Mapping[str, Any],
                                  projection: Sequence[str]) -> List[Dict[str, Any]]:
        """
        Find nodes located inside a GeoJSON polygon (boundary inclusive).
        
        Args:
            polygon: GeoJSON Polygon or MultiPolygon
            projection: Record fields to keep in each result
            
        Returns:
            Projected wire records
        """
        pass
    
    async def close(self) -> None:
        """Release store resources."""
        return None
    
    @staticmethod
    def project_record(node: RiskNode, projection: Iterable[str]) -> Dict[str, Any]:
        """Reduce a node to the requested wire record fields."""
        record = node.to_record()
        return {field: record[field] for field in projection if field in record}
