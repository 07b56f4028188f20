import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.services.node_service import build_node_service, get_node_service
from risk_nodes.config.service_config import ServiceConfig

NODES = [
    {"cnn": "A", "risk": 1.0, "location": {"type": "Point", "coordinates": [-122.4194, 37.7749]},
     "edges": [{"cnn": "B"}]},
    {"cnn": "B", "risk": 2.0, "location": {"type": "Point", "coordinates": [-122.4200, 37.7749]}},
    {"cnn": "D", "risk": 4.0, "location": {"type": "Point", "coordinates": [-122.5000, 37.8000]}},
]


@pytest.fixture
def service():
    return build_node_service(ServiceConfig.create_testing_config())


@pytest.fixture
def client(service):
    app.dependency_overrides[get_node_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(client):
    response = client.post("/api/risk-nodes", json={"batchId": "batch-1", "points": NODES})
    assert response.status_code == 201
    return client


def test_create_nodes_returns_tagged_records(client) -> None:
    response = client.post("/api/risk-nodes", json={"batchId": "batch-1", "points": NODES[:1]})
    assert response.status_code == 201
    body = response.json()
    assert body == [{
        "cnn": "A",
        "risk": 1.0,
        "location": {"type": "Point", "coordinates": [-122.4194, 37.7749]},
        "edges": [{"cnn": "B"}],
        "batchId": "batch-1",
    }]


def test_duplicate_create_returns_store_error(seeded_client) -> None:
    response = seeded_client.post("/api/risk-nodes", json={"points": NODES[:1]})
    assert response.status_code == 500
    assert response.json()["error"] == "store_error"


def test_get_node_and_not_found(seeded_client) -> None:
    assert seeded_client.get("/api/risk-nodes/nodes/B").json()["risk"] == 2.0

    response = seeded_client.get("/api/risk-nodes/nodes/missing")
    assert response.status_code == 404
    assert response.json()["error"] == "node_not_found"
    assert response.json()["details"] == {"cnn": "missing"}


def test_near_point_caches_results(seeded_client, service) -> None:
    response = seeded_client.get("/api/risk-nodes/near", params={"lon": -122.4194, "lat": 37.7749})
    assert response.status_code == 200
    assert [n["cnn"] for n in response.json()] == ["A", "B"]
    assert "A" in service.cache and "B" in service.cache


def test_near_point_validates_query(seeded_client) -> None:
    response = seeded_client.get("/api/risk-nodes/near", params={"lon": 500, "lat": 37.7})
    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


def test_near_node_missing_returns_404(seeded_client) -> None:
    response = seeded_client.get("/api/risk-nodes/nodes/ghost/near")
    assert response.status_code == 404


def test_near_node_with_distance(seeded_client) -> None:
    response = seeded_client.get("/api/risk-nodes/nodes/B/near", params={"max_distance": 60})
    assert [n["cnn"] for n in response.json()] == ["B", "A"]


def test_lookup_returns_uncached_subset(seeded_client) -> None:
    seeded_client.get("/api/risk-nodes/near", params={"lon": -122.4194, "lat": 37.7749, "max_distance": 1})
    response = seeded_client.post("/api/risk-nodes/lookup", json={"cnns": ["A", "B"]})
    assert [n["cnn"] for n in response.json()] == ["B"]


def test_neighbors_endpoint_prefetches(seeded_client, service) -> None:
    assert "B" not in service.cache
    response = seeded_client.get("/api/risk-nodes/nodes/A/neighbors")
    assert response.status_code == 200
    assert response.json()["cnn"] == "A"

    seeded_client.portal.call(service.wait_for_prefetches)
    assert "B" in service.cache
    assert seeded_client.get("/api/risk-nodes/nodes/ghost/neighbors").status_code == 404


@pytest.mark.parametrize("cnn", ["near", "health", "lookup"])
def test_node_routes_accept_cnns_named_like_fixed_routes(client, cnn) -> None:
    point = {"cnn": cnn, "risk": 3.0, "location": {"type": "Point", "coordinates": [-122.4194, 37.7749]}}
    assert client.post("/api/risk-nodes", json={"points": [point]}).status_code == 201

    response = client.get(f"/api/risk-nodes/nodes/{cnn}")
    assert response.status_code == 200
    assert response.json()["cnn"] == cnn
    assert response.json()["risk"] == 3.0

    near = client.get(f"/api/risk-nodes/nodes/{cnn}/near")
    assert [node["cnn"] for node in near.json()] == [cnn]


def test_within_polygon_list_and_geojson(seeded_client) -> None:
    polygon = {
        "type": "Polygon",
        "coordinates": [[[-122.43, 37.77], [-122.41, 37.77], [-122.41, 37.78],
                         [-122.43, 37.78], [-122.43, 37.77]]]
    }
    points = seeded_client.post("/api/risk-nodes/within", json={"polygon": polygon}).json()
    assert sorted(p["risk"] for p in points) == [1.0, 2.0]
    assert all("cnn" not in p for p in points)

    collection = seeded_client.post(
        "/api/risk-nodes/within", params={"as_geojson": True}, json={"polygon": polygon}
    ).json()
    assert collection["type"] == "FeatureCollection"
    assert len(collection["features"]) == 2


def test_within_rejects_invalid_polygon(seeded_client) -> None:
    response = seeded_client.post(
        "/api/risk-nodes/within",
        json={"polygon": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1]]]}}
    )
    assert response.status_code == 422


def test_health_reports_cache_stats(seeded_client) -> None:
    seeded_client.get("/api/risk-nodes/near", params={"lon": -122.4194, "lat": 37.7749})
    body = seeded_client.get("/api/risk-nodes/health").json()
    assert body["status"] == "healthy"
    assert body["store_backend"] == "memory"
    assert body["cache"]["size"] == 2
    assert body["cache"]["max_entries"] == 8


def test_root_endpoint(client) -> None:
    assert client.get("/").json()["status"] == "operational"
