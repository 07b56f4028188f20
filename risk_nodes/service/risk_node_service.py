"""
Read-through cached access to risk nodes.

Every read and write of risk nodes goes through ``RiskNodeService``. It checks
the injected ``NodeCache`` before the store, and fills the cache from the
results of proximity queries and neighbor prefetches. Cache semantics differ
per read path:

- ``find_node_by_cnn`` is served from the cache on a hit, but a store miss
  does not populate the cache.
- ``find_nodes_by_cnns`` only fetches keys that are not cached and returns
  just those fetched records.
- ``find_nodes_near`` / ``find_nodes_near_cnn`` cache every node they return.
- ``find_node_and_cache_neighbors`` warms the cache with the node's neighbors
  in a detached background task.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from ..cache.node_cache import NodeCache
from ..config.service_config import ServiceConfig
from ..data.models import GeoPoint, NodeInput, RiskNode, RiskPoint, build_risk_node
from ..exceptions import NodeNotFoundError
from ..store.base_store import BaseRiskNodeStore

logger = logging.getLogger(__name__)

# Fields returned by polygon queries; identifiers are left out on purpose
POLYGON_PROJECTION = ('location', 'risk')


class RiskNodeService:
    """
    Service that orchestrates cached lookups of risk nodes.
    """
    
    def __init__(self, store: BaseRiskNodeStore, cache: Optional[NodeCache] = None,
                 config: Optional[ServiceConfig] = None):
        """
        Initialize the service.
        
        Args:
            store: Durable risk node store
            cache: Node cache owned by this service (built from config if omitted)
            config: Service configuration
        """
        self.config = config or ServiceConfig()
        self.store = store
        self.cache = cache if cache is not None else NodeCache(self.config.cache_size)
        
        # Strong references so detached prefetches are not garbage collected
        self._prefetch_tasks: Set[asyncio.Task] = set()
    
    async def create_nodes(self, points: Iterable[NodeInput],
                           batch_id: Optional[str] = None) -> List[RiskNode]:
        """
        Tag points with a batch id and insert them into the store.
        
        Created nodes are not cached.
        
        Args:
            points: RiskNode models or wire records
            batch_id: Batch identifier shared by every point (may be None)
            
        Returns:
            The created nodes
        """
        nodes = [build_risk_node(point, batch_id) for point in points]
        created = await self.store.insert_many(nodes)
        logger.info(f"Created {len(created)} risk nodes (batch: {batch_id})")
        return created
    
    async def find_node_by_cnn(self, cnn: str) -> Optional[RiskNode]:
        """
        Find a node, serving it from the cache when possible.
        
        Returns:
            The node, or None if the store has no node with this CNN
        """
        cached = self.cache.get(cnn)
        if cached is not None:
            logger.debug(f"Cache hit for {cnn}")
            return cached
        
        logger.debug(f"Cache miss for {cnn}")
        return await self.store.find_one(cnn)
    
    async def find_nodes_by_cnns(self, cnns: Iterable[str]) -> List[RiskNode]:
        """
        Fetch the requested nodes that are not already cached.
        
        Only freshly fetched nodes are returned; nodes already in the cache
        are left out of the result. Results are not written to the cache.
        """
        uncached = [cnn for cnn in cnns if self.cache.get(cnn) is None]
        if not uncached:
            return []
        return await self.store.find_many(uncached)
    
    async def find_nodes_near(self, point: Any,
                              max_distance: Optional[float] = None) -> List[RiskNode]:
        """
        Find nodes near a point and cache every one of them.
        
        Args:
            point: GeoPoint, GeoJSON Point mapping or ``(lon, lat)`` pair
            max_distance: Maximum distance in meters (default from config, 100)
            
        Returns:
            Nodes ordered nearest first
        """
        if max_distance is None:
            max_distance = self.config.default_max_distance
        
        nodes = await self.store.find_near(
            GeoPoint.coerce(point), max_distance, self.config.min_distance
        )
        self._cache_nodes(nodes)
        return nodes
    
    async def find_nodes_near_cnn(self, cnn: str,
                                  max_distance: Optional[float] = None) -> List[RiskNode]:
        """
        Find nodes near the node identified by ``cnn``.
        
        Raises:
            NodeNotFoundError: If no node has this CNN
        """
        node = await self.find_node_by_cnn(cnn)
        if node is None:
            raise NodeNotFoundError(cnn)
        
        nodes = await self.find_nodes_near(node.location, max_distance)
        self._cache_nodes(nodes)
        return nodes
    
    async def find_node_and_cache_neighbors(self, cnn: str) -> RiskNode:
        """
        Find a node and start warming the cache with its neighbors.
        
        The neighbor prefetch runs in the background; the node is returned
        without waiting for it and prefetch failures are only logged.
        
        Raises:
            NodeNotFoundError: If no node has this CNN
        """
        node = await self.find_node_by_cnn(cnn)
        if node is None:
            raise NodeNotFoundError(cnn)
        
        if node.edges:
            task = asyncio.ensure_future(self._cache_neighbors(node.neighbor_cnns))
            self._prefetch_tasks.add(task)
            task.add_done_callback(self._on_prefetch_done)
        
        return node
    
    async def find_nodes_within_polygon(self, polygon: Mapping[str, Any]) -> List[RiskPoint]:
        """
        Find the location and risk of every node inside a GeoJSON polygon.
        
        Does not read or write the cache.
        """
        records = await self.store.find_within_polygon(polygon, POLYGON_PROJECTION)
        return [RiskPoint.model_validate(record) for record in records]
    
    async def wait_for_prefetches(self) -> None:
        """Wait for in-flight neighbor prefetches; their failures stay swallowed."""
        while self._prefetch_tasks:
            await asyncio.gather(*list(self._prefetch_tasks), return_exceptions=True)
    
    async def aclose(self) -> None:
        await self.wait_for_prefetches()
        await self.store.close()
    
    def cache_stats(self) -> Dict[str, int]:
        return self.cache.stats()
    
    def _cache_nodes(self, nodes: Iterable[RiskNode]) -> None:
        for node in nodes:
            self.cache.set(node.cnn, node)
    
    async def _cache_neighbors(self, cnns: List[str]) -> int:
        neighbors = await self.find_nodes_by_cnns(cnns)
        self._cache_nodes(neighbors)
        logger.debug(f"Prefetched {len(neighbors)} of {len(cnns)} neighbors")
        return len(neighbors)
    
    def _on_prefetch_done(self, task: asyncio.Task) -> None:
        self._prefetch_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Neighbor prefetch failed: {exc}")
