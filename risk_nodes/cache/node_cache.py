"""
In-memory LRU cache of risk nodes keyed by CNN.
"""

import logging
from typing import Dict, Optional

from cachetools import LRUCache

from ..data.models import RiskNode

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 500


class NodeCache:
    """
    Bounded CNN -> RiskNode mapping with least-recently-used eviction.
    
    Reads and writes never touch the store and never suspend, so callers on
    the event loop always see whole entries.
    """
    
    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        """
        Initialize the node cache.
        
        Args:
            max_entries: Maximum number of cached nodes
        """
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._nodes: LRUCache = LRUCache(maxsize=max_entries)
        self.hits = 0
        self.misses = 0
    
    def get(self, cnn: str) -> Optional[RiskNode]:
        """
        Get a cached node and mark it as recently used.
        
        Args:
            cnn: Node identifier
            
        Returns:
            The cached node, or None if absent
        """
        node = self._nodes.get(cnn)
        if node is None:
            self.misses += 1
        else:
            self.hits += 1
        return node
    
    def set(self, cnn: str, node: RiskNode) -> None:
        """Insert or overwrite a node, evicting the least recently used one when full."""
        self._nodes[cnn] = node
    
    def __contains__(self, cnn: str) -> bool:
        # Membership checks do not change recency
        return cnn in self._nodes
    
    def __len__(self) -> int:
        return len(self._nodes)
    
    @property
    def max_entries(self) -> int:
        return int(self._nodes.maxsize)
    
    def clear(self) -> None:
        self._nodes.clear()
        self.hits = 0
        self.misses = 0
        logger.debug("Node cache cleared")
    
    def stats(self) -> Dict[str, int]:
        """Get cache size, capacity and hit/miss counters."""
        return {
            'size': len(self._nodes),
            'max_entries': self.max_entries,
            'hits': self.hits,
            'misses': self.misses
        }
