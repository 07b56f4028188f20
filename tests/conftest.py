"""
Shared fixtures for risk node tests.
"""

from collections import Counter

import pytest

from risk_nodes.cache.node_cache import NodeCache
from risk_nodes.data.models import RiskNode
from risk_nodes.exceptions import StoreError
from risk_nodes.service.risk_node_service import RiskNodeService
from risk_nodes.store.base_store import BaseRiskNodeStore
from risk_nodes.store.memory_store import InMemoryRiskNodeStore

# Downtown San Francisco; 0.001 deg longitude ~ 88 m, 0.001 deg latitude ~ 111 m
ORIGIN = (-122.4194, 37.7749)


def make_node(cnn, risk=1.0, lon=ORIGIN[0], lat=ORIGIN[1], edges=(), batch_id=None) -> RiskNode:
    """Build a node with edges given as plain CNNs."""
    return RiskNode(
        cnn=cnn,
        risk=risk,
        location={"type": "Point", "coordinates": [lon, lat]},
        edges=[{"cnn": edge} for edge in edges],
        batch_id=batch_id
    )


class CountingStore(BaseRiskNodeStore):
    """Store wrapper that records every call and can be told to fail."""

    name = "counting"

    def __init__(self, inner: BaseRiskNodeStore):
        self.inner = inner
        self.calls = Counter()
        self.fail_on = set()

    def _record(self, method: str) -> None:
        self.calls[method] += 1
        if method in self.fail_on:
            raise StoreError(f"{method} unavailable")

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    async def insert_many(self, nodes):
        self._record('insert_many')
        return await self.inner.insert_many(nodes)

    async def find_one(self, cnn):
        self._record('find_one')
        return await self.inner.find_one(cnn)

    async def find_many(self, cnns):
        self._record('find_many')
        return await self.inner.find_many(cnns)

    async def find_near(self, point, max_distance, min_distance=0.0):
        self._record('find_near')
        return await self.inner.find_near(point, max_distance, min_distance)

    async def find_within_polygon(self, polygon, projection):
        self._record('find_within_polygon')
        return await self.inner.find_within_polygon(polygon, projection)


@pytest.fixture
def sample_nodes():
    """A and B ~53 m apart, C ~122 m north of A, D several km away."""
    return [
        make_node("A", risk=1.0, edges=["B", "C"]),
        make_node("B", risk=2.0, lon=-122.4200, edges=["A"]),
        make_node("C", risk=3.0, lat=37.7760),
        make_node("D", risk=4.0, lon=-122.5000, lat=37.8000),
    ]


@pytest.fixture
def store():
    return CountingStore(InMemoryRiskNodeStore())


@pytest.fixture
def service(store):
    return RiskNodeService(store=store, cache=NodeCache(500))


@pytest.fixture
def square_polygon():
    """Square around A, B and C but not D."""
    return {
        "type": "Polygon",
        "coordinates": [[
            [-122.4210, 37.7740],
            [-122.4180, 37.7740],
            [-122.4180, 37.7770],
            [-122.4210, 37.7770],
            [-122.4210, 37.7740]
        ]]
    }
