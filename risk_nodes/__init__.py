"""
Risk Node Service

Cached access to risk-scored geographic nodes: points with a risk level and
references to their neighboring nodes. Lookups go through an LRU cache
before the durable store, and proximity queries and neighbor prefetches keep
the cache warm.

## Quick Start

```python
import asyncio
from risk_nodes import RiskNodeService, InMemoryRiskNodeStore, NodeCache

service = RiskNodeService(InMemoryRiskNodeStore(), NodeCache(500))

async def main():
    await service.create_nodes([
        {"cnn": "A", "risk": 1, "location": {"type": "Point", "coordinates": [-122.41, 37.77]},
         "edges": [{"cnn": "B"}]},
        {"cnn": "B", "risk": 2, "location": {"type": "Point", "coordinates": [-122.42, 37.77]}},
    ], batch_id="batch-1")
    nearby = await service.find_nodes_near((-122.41, 37.77), max_distance=100)

asyncio.run(main())
```

## Main Components

- **RiskNodeService**: all read/write access to risk nodes
- **NodeCache**: bounded LRU cache keyed by CNN
- **InMemoryRiskNodeStore** / **SQLiteRiskNodeStore**: store backends
- **ServiceConfig**: configuration management

## Architecture

- `service/`: cached lookup orchestration
- `cache/`: node cache
- `store/`: storage backends and factory
- `data/`: models, distance and GeoJSON utilities, seed loading
- `config/`: configuration management
"""

from .service import RiskNodeService
from .cache import NodeCache
from .store import BaseRiskNodeStore, InMemoryRiskNodeStore, SQLiteRiskNodeStore, create_store
from .config import ServiceConfig
from .data import GeoPoint, Edge, RiskNode, RiskPoint, load_risk_nodes
from .exceptions import RiskNodeError, NodeNotFoundError, StoreError

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    'RiskNodeService',
    'NodeCache',
    'ServiceConfig',

    # Storage
    'BaseRiskNodeStore',
    'InMemoryRiskNodeStore',
    'SQLiteRiskNodeStore',
    'create_store',

    # Models
    'GeoPoint',
    'Edge',
    'RiskNode',
    'RiskPoint',
    'load_risk_nodes',

    # Errors
    'RiskNodeError',
    'NodeNotFoundError',
    'StoreError',

    '__version__'
]
