"""
Data models and geographic utilities for risk nodes.

This module contains:
- Risk node models and wire records
- Distance calculations
- GeoJSON polygon validation and export
- Seed data loading
"""

from .models import GeoPoint, Edge, RiskNode, RiskPoint, build_risk_node
from .distance_utils import haversine_distances, bounding_box
from .geometry import (
    polygon_to_shape,
    nodes_to_feature_collection,
    risk_points_to_feature_collection
)
from .data_loader import load_risk_nodes

__all__ = [
    'GeoPoint',
    'Edge',
    'RiskNode',
    'RiskPoint',
    'build_risk_node',
    'haversine_distances',
    'bounding_box',
    'polygon_to_shape',
    'nodes_to_feature_collection',
    'risk_points_to_feature_collection',
    'load_risk_nodes'
]
