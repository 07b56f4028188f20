"""
Caching layer for risk node lookups.
"""

from .node_cache import NodeCache, DEFAULT_MAX_ENTRIES

__all__ = [
    'NodeCache',
    'DEFAULT_MAX_ENTRIES'
]
