"""
Service layer for cached risk node access.
"""

from .risk_node_service import RiskNodeService, POLYGON_PROJECTION

__all__ = [
    'RiskNodeService',
    'POLYGON_PROJECTION'
]
