import asyncio

import pytest

from risk_nodes.config.service_config import ServiceConfig
from risk_nodes.data.models import GeoPoint
from risk_nodes.exceptions import StoreError
from risk_nodes.store import (
    InMemoryRiskNodeStore,
    SQLiteRiskNodeStore,
    create_store,
    get_available_backends,
)

from conftest import ORIGIN, make_node


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, tmp_path):
    """Run the shared contract tests against both backends."""
    if request.param == "memory":
        return InMemoryRiskNodeStore()
    return SQLiteRiskNodeStore(str(tmp_path / "nodes.db"))


def test_insert_and_find_one_preserve_node_fields(any_store) -> None:
    node = make_node("A", risk=1.5, edges=["B", "C"], batch_id="b1")

    async def scenario():
        created = await any_store.insert_many([node])
        return created, await any_store.find_one("A"), await any_store.find_one("Z")

    created, found, missing = asyncio.run(scenario())
    assert created == [node]
    assert found == node
    assert found.neighbor_cnns == ["B", "C"]
    assert found.to_record()["batchId"] == "b1"
    assert missing is None


def test_duplicate_batch_is_rejected_without_partial_insert(any_store) -> None:
    async def scenario():
        await any_store.insert_many([make_node("A")])
        with pytest.raises(StoreError):
            await any_store.insert_many([make_node("B"), make_node("A")])
        return await any_store.find_one("B")

    assert asyncio.run(scenario()) is None


def test_find_many_returns_only_existing_nodes(any_store, sample_nodes) -> None:
    async def scenario():
        await any_store.insert_many(sample_nodes)
        return await any_store.find_many(["C", "A", "missing"])

    assert sorted(n.cnn for n in asyncio.run(scenario())) == ["A", "C"]


def test_find_near_orders_by_distance_within_band(any_store, sample_nodes) -> None:
    point = GeoPoint.from_lon_lat(*ORIGIN)

    async def scenario():
        await any_store.insert_many(sample_nodes)
        return (
            await any_store.find_near(point, 150, 0),
            await any_store.find_near(point, 150, 10),
        )

    full, ring = asyncio.run(scenario())
    assert [n.cnn for n in full] == ["A", "B", "C"]
    assert [n.cnn for n in ring] == ["B", "C"]


def test_find_near_rejects_negative_distance(any_store) -> None:
    with pytest.raises(StoreError):
        asyncio.run(any_store.find_near(GeoPoint.from_lon_lat(*ORIGIN), -1))


def test_find_within_polygon_projects_fields(any_store, sample_nodes, square_polygon) -> None:
    async def scenario():
        await any_store.insert_many(sample_nodes)
        return await any_store.find_within_polygon(square_polygon, ("location", "risk"))

    records = asyncio.run(scenario())
    assert sorted(r["risk"] for r in records) == [1.0, 2.0, 3.0]
    assert all(set(r) == {"location", "risk"} for r in records)
    assert records[0]["location"]["type"] == "Point"


def test_polygon_boundary_is_inclusive(any_store) -> None:
    polygon = {
        "type": "Polygon",
        "coordinates": [[[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0], [0.0, 0.0]]]
    }

    async def scenario():
        await any_store.insert_many([make_node("edge", lon=1.0, lat=0.5), make_node("out", lon=1.5, lat=0.5)])
        return await any_store.find_within_polygon(polygon, ("risk", "location"))

    records = asyncio.run(scenario())
    assert [r["location"]["coordinates"] for r in records] == [[1.0, 0.5]]


@pytest.mark.parametrize("polygon", [
    {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1]]]},
    {"type": "Polygon"},
    {"type": "MultiPolygon", "coordinates": []},
])
def test_invalid_polygon_raises_store_error(any_store, polygon) -> None:
    with pytest.raises(StoreError):
        asyncio.run(any_store.find_within_polygon(polygon, ("risk",)))


def test_sqlite_store_persists_across_instances(tmp_path) -> None:
    db_path = str(tmp_path / "persist.db")
    asyncio.run(SQLiteRiskNodeStore(db_path).insert_many([make_node("A", risk=7.0)]))

    reopened = SQLiteRiskNodeStore(db_path)
    assert asyncio.run(reopened.find_one("A")).risk == 7.0
    assert asyncio.run(reopened.count()) == 1


def test_sqlite_find_many_handles_large_key_lists(tmp_path) -> None:
    store = SQLiteRiskNodeStore(str(tmp_path / "many.db"))
    nodes = [make_node(f"n{i}", lon=ORIGIN[0] + i * 1e-5) for i in range(1200)]

    async def scenario():
        await store.insert_many(nodes)
        return await store.find_many([n.cnn for n in nodes])

    assert len(asyncio.run(scenario())) == 1200


def test_sqlite_store_rejects_in_memory_database() -> None:
    with pytest.raises(ValueError):
        SQLiteRiskNodeStore(":memory:")


def test_create_store_picks_configured_backend(tmp_path) -> None:
    assert isinstance(create_store(ServiceConfig()), InMemoryRiskNodeStore)
    sqlite_store = create_store(ServiceConfig.create_sqlite_config(str(tmp_path / "f.db")))
    assert isinstance(sqlite_store, SQLiteRiskNodeStore)
    assert set(get_available_backends()) == {"memory", "sqlite"}


def test_create_store_rejects_unknown_backend() -> None:
    with pytest.raises(ValueError, match="Unsupported store backend"):
        create_store(ServiceConfig(store_backend="mongo"))
