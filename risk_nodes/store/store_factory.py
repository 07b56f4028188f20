"""
Factory for creating risk node stores.

Lets deployments switch storage backends through configuration rather than
code changes.
"""

from enum import Enum
from typing import Dict, Optional

from .base_store import BaseRiskNodeStore
from .memory_store import InMemoryRiskNodeStore
from .sqlite_store import SQLiteRiskNodeStore
from ..config.service_config import ServiceConfig


class StoreBackend(Enum):
    """Available storage backends."""
    MEMORY = "memory"
    SQLITE = "sqlite"


def create_store(config: Optional[ServiceConfig] = None) -> BaseRiskNodeStore:
    """
    Create the store selected by ``config.store_backend``.
    
    Args:
        config: Service configuration (defaults to in-memory)
        
    Returns:
        Configured store instance
        
    Raises:
        ValueError: If the backend is not supported
    """
    if config is None:
        config = ServiceConfig()
    
    try:
        backend = StoreBackend(config.store_backend)
    except ValueError:
        raise ValueError(f"Unsupported store backend: {config.store_backend}")
    
    if backend == StoreBackend.SQLITE:
        return SQLiteRiskNodeStore(config.sqlite_path)
    return InMemoryRiskNodeStore()


def get_available_backends() -> Dict[str, str]:
    """Get available backends with descriptions."""
    return {
        StoreBackend.MEMORY.value: "Process-local dictionary store (tests, demos, seeded data)",
        StoreBackend.SQLITE.value: "SQLite database file with lat/lon indexes"
    }
