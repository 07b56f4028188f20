"""
GeoJSON helpers: polygon validation and FeatureCollection export.
"""

from typing import Any, Iterable, Mapping

import geojson
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from .models import RiskNode, RiskPoint

POLYGON_TYPES = ('Polygon', 'MultiPolygon')


def polygon_to_shape(polygon: Any) -> BaseGeometry:
    """
    Validate a GeoJSON Polygon or MultiPolygon and convert it to shapely.
    
    Args:
        polygon: GeoJSON mapping or an existing shapely geometry
        
    Returns:
        Shapely geometry for containment tests
        
    Raises:
        ValueError: If the polygon is not valid GeoJSON
    """
    if isinstance(polygon, BaseGeometry):
        if polygon.geom_type not in POLYGON_TYPES:
            raise ValueError(f"Expected a polygon geometry, got {polygon.geom_type}")
        return polygon
    
    if not isinstance(polygon, Mapping):
        raise ValueError("Polygon must be a GeoJSON mapping")
    
    geometry_type = polygon.get('type')
    if geometry_type not in POLYGON_TYPES:
        raise ValueError(f"Polygon must be one of {POLYGON_TYPES}, got {geometry_type!r}")
    
    if not polygon.get('coordinates'):
        raise ValueError(f"{geometry_type} has no coordinates")
    
    geometry_class = geojson.Polygon if geometry_type == 'Polygon' else geojson.MultiPolygon
    try:
        candidate = geometry_class(polygon.get('coordinates'))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid {geometry_type} coordinates: {e}") from e

    if not candidate.is_valid:
        raise ValueError(f"Invalid {geometry_type}: {candidate.errors()}")
    
    boundary = shape(candidate)
    if boundary.is_empty:
        raise ValueError(f"{geometry_type} is empty")
    return boundary


def nodes_to_feature_collection(nodes: Iterable[RiskNode]) -> geojson.FeatureCollection:
    """Convert risk nodes to a GeoJSON FeatureCollection of Points."""
    features = []
    for node in nodes:
        features.append(geojson.Feature(
            geometry=geojson.Point(list(node.location.coordinates)),
            properties={
                "cnn": node.cnn,
                "risk": node.risk,
                "edges": node.neighbor_cnns,
                "batchId": node.batch_id
            }
        ))
    return geojson.FeatureCollection(features)


def risk_points_to_feature_collection(points: Iterable[RiskPoint]) -> geojson.FeatureCollection:
    """Convert identifier-free risk points to a FeatureCollection (heatmap input)."""
    return geojson.FeatureCollection([
        geojson.Feature(
            geometry=geojson.Point(list(point.location.coordinates)),
            properties={"risk": point.risk}
        )
        for point in points
    ])
