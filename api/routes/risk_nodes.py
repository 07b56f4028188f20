"""
FastAPI routes for risk node lookups.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from risk_nodes.data.geometry import risk_points_to_feature_collection
from risk_nodes.data.models import GeoPoint, RiskNode, RiskPoint
from risk_nodes.exceptions import NodeNotFoundError
from risk_nodes.service.risk_node_service import RiskNodeService
from api.schemas.risk_nodes import (
    CnnLookupRequest,
    CreateNodesRequest,
    ErrorResponse,
    HealthResponse,
    PolygonRequest
)
from api.services.node_service import get_health_status, get_node_service

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api/risk-nodes", tags=["risk-nodes"])


@router.get("/health", response_model=HealthResponse, summary="Health Check")
async def health_check(service: RiskNodeService = Depends(get_node_service)):
    """
    Check the health status of the risk node service.
    
    Returns:
        HealthResponse: Store backend and cache statistics
    """
    return get_health_status(service)


@router.post("", response_model=List[RiskNode], status_code=status.HTTP_201_CREATED,
             summary="Create Risk Nodes")
async def create_nodes(request: CreateNodesRequest,
                       service: RiskNodeService = Depends(get_node_service)):
    """
    Create a batch of risk nodes, tagging each with the request's ``batchId``.
    
    Example:
        ```json
        {
            "batchId": "2024-05-01",
            "points": [
                {
                    "cnn": "A",
                    "risk": 1.0,
                    "location": {"type": "Point", "coordinates": [-122.41, 37.77]},
                    "edges": [{"cnn": "B"}]
                }
            ]
        }
        ```
    """
    logger.info(f"Create request: {len(request.points)} nodes (batch: {request.batch_id})")
    return await service.create_nodes(request.points, request.batch_id)


@router.get("/near", response_model=List[RiskNode], summary="Find Nodes Near a Point")
async def find_nodes_near(
    lon: float = Query(..., ge=-180, le=180, description="Longitude"),
    lat: float = Query(..., ge=-90, le=90, description="Latitude"),
    max_distance: Optional[float] = Query(None, ge=0, description="Max distance in meters"),
    service: RiskNodeService = Depends(get_node_service)
):
    """
    Find nodes within ``max_distance`` meters of a point, nearest first.
    """
    return await service.find_nodes_near(GeoPoint.from_lon_lat(lon, lat), max_distance)


@router.post("/lookup", response_model=List[RiskNode], summary="Bulk Lookup by CNN")
async def lookup_nodes(request: CnnLookupRequest,
                       service: RiskNodeService = Depends(get_node_service)):
    """
    Fetch nodes by CNN.
    
    Only nodes that are not already cached are fetched and returned.
    """
    return await service.find_nodes_by_cnns(request.cnns)


@router.post("/within", summary="Find Risk Points Within a Polygon")
async def find_nodes_within_polygon(
    request: PolygonRequest,
    as_geojson: bool = Query(False, description="Return a GeoJSON FeatureCollection"),
    service: RiskNodeService = Depends(get_node_service)
):
    """
    Find the location and risk of every node inside a polygon.
    
    Returns:
        List of risk points, or a FeatureCollection when ``as_geojson`` is set
    """
    points: List[RiskPoint] = await service.find_nodes_within_polygon(request.polygon)
    if as_geojson:
        return risk_points_to_feature_collection(points)
    return [point.model_dump() for point in points]


@router.get("/nodes/{cnn}", response_model=RiskNode, summary="Get Risk Node",
            responses={404: {"model": ErrorResponse}})
async def get_node(cnn: str, service: RiskNodeService = Depends(get_node_service)):
    """
    Get a single node, served from the cache when possible.
    """
    node = await service.find_node_by_cnn(cnn)
    if node is None:
        raise NodeNotFoundError(cnn)
    return node


@router.get("/nodes/{cnn}/near", response_model=List[RiskNode], summary="Find Nodes Near a Node",
            responses={404: {"model": ErrorResponse}})
async def find_nodes_near_cnn(
    cnn: str,
    max_distance: Optional[float] = Query(None, ge=0, description="Max distance in meters"),
    service: RiskNodeService = Depends(get_node_service)
):
    """
    Find nodes near the node identified by ``cnn``.
    """
    return await service.find_nodes_near_cnn(cnn, max_distance)


@router.get("/nodes/{cnn}/neighbors", response_model=RiskNode, summary="Get Node and Prefetch Neighbors",
            responses={404: {"model": ErrorResponse}})
async def get_node_and_cache_neighbors(cnn: str,
                                       service: RiskNodeService = Depends(get_node_service)):
    """
    Get a node and warm the cache with its neighbors in the background.
    """
    return await service.find_node_and_cache_neighbors(cnn)


@router.get("/", summary="API Information")
async def get_api_info():
    """
    Get information about the Risk Node API.
    """
    return {
        "api": "Risk Node API",
        "endpoints": {
            "POST /api/risk-nodes": "Create a batch of risk nodes",
            "GET /api/risk-nodes/near": "Find nodes near a point (caches results)",
            "POST /api/risk-nodes/lookup": "Fetch uncached nodes by CNN",
            "POST /api/risk-nodes/within": "Find risk points within a polygon",
            "GET /api/risk-nodes/health": "Check service health status",
            "GET /api/risk-nodes/nodes/{cnn}": "Get a node (cache first)",
            "GET /api/risk-nodes/nodes/{cnn}/near": "Find nodes near a node",
            "GET /api/risk-nodes/nodes/{cnn}/neighbors": "Get a node and prefetch its neighbors"
        }
    }
