"""
Configuration management for the risk node service.
"""

import os
from dataclasses import dataclass
from typing import Optional

STORE_BACKENDS = ('memory', 'sqlite')


@dataclass
class ServiceConfig:
    """Configuration parameters for node lookup, caching and storage."""

    # Cache
    cache_size: int = 500  # max cached nodes before LRU eviction

    # Proximity queries
    default_max_distance: float = 100.0  # meters
    min_distance: float = 0.0  # meters - 0 lets the query point itself match

    # Storage
    store_backend: str = 'memory'  # 'memory' or 'sqlite'
    sqlite_path: Optional[str] = 'risk_nodes.db'

    # Startup seeding
    seed_data_path: Optional[str] = None  # GeoJSON FeatureCollection of nodes
    seed_batch_id: Optional[str] = None

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.cache_size <= 0:
            raise ValueError("cache_size must be positive")
        if self.default_max_distance < 0:
            raise ValueError("default_max_distance must be >= 0")
        if self.min_distance < 0:
            raise ValueError("min_distance must be >= 0")
        if self.min_distance > self.default_max_distance:
            raise ValueError("min_distance must not exceed default_max_distance")
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(f"store_backend must be one of {STORE_BACKENDS}")
        if self.store_backend == 'sqlite' and not self.sqlite_path:
            raise ValueError("sqlite_path is required for the sqlite backend")

    @classmethod
    def from_env(cls) -> 'ServiceConfig':
        """
        Build a configuration from RISK_NODES_* environment variables.

        Unset variables keep their defaults.
        """
        defaults = cls()
        return cls(
            cache_size=int(os.getenv('RISK_NODES_CACHE_SIZE', defaults.cache_size)),
            default_max_distance=float(
                os.getenv('RISK_NODES_DEFAULT_MAX_DISTANCE', defaults.default_max_distance)
            ),
            store_backend=os.getenv('RISK_NODES_STORE_BACKEND', defaults.store_backend),
            sqlite_path=os.getenv('RISK_NODES_SQLITE_PATH', defaults.sqlite_path),
            seed_data_path=os.getenv('RISK_NODES_SEED_DATA') or None,
            seed_batch_id=os.getenv('RISK_NODES_SEED_BATCH_ID') or None,
        )

    @classmethod
    def create_default_config(cls) -> 'ServiceConfig':
        """Create the default in-memory configuration."""
        return cls()

    @classmethod
    def create_sqlite_config(cls, sqlite_path: str) -> 'ServiceConfig':
        """Create a configuration backed by a SQLite database file."""
        return cls(store_backend='sqlite', sqlite_path=sqlite_path)

    @classmethod
    def create_testing_config(cls) -> 'ServiceConfig':
        """Create a small in-memory configuration for tests and demos."""
        return cls(cache_size=8, store_backend='memory')
