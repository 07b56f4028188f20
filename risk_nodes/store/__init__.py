"""
Risk node storage backends.
"""

from .base_store import BaseRiskNodeStore
from .memory_store import InMemoryRiskNodeStore
from .sqlite_store import SQLiteRiskNodeStore
from .store_factory import StoreBackend, create_store, get_available_backends

__all__ = [
    'BaseRiskNodeStore',
    'InMemoryRiskNodeStore',
    'SQLiteRiskNodeStore',
    'StoreBackend',
    'create_store',
    'get_available_backends'
]
