"""
Service wiring for the risk node API.
"""

import logging
from typing import Optional

from risk_nodes import __version__
from risk_nodes.cache.node_cache import NodeCache
from risk_nodes.config.service_config import ServiceConfig
from risk_nodes.data.data_loader import load_risk_nodes
from risk_nodes.service.risk_node_service import RiskNodeService
from risk_nodes.store.store_factory import create_store
from api.schemas.risk_nodes import CacheStats, HealthResponse

logger = logging.getLogger(__name__)


def build_node_service(config: Optional[ServiceConfig] = None) -> RiskNodeService:
    """
    Build a service with its own store and cache.
    
    Args:
        config: Service configuration (read from the environment if omitted)
        
    Returns:
        Ready-to-use RiskNodeService
    """
    config = config or ServiceConfig.from_env()
    config.validate()
    
    store = create_store(config)
    logger.info(f"Risk node service using '{store.name}' store with cache size {config.cache_size}")
    return RiskNodeService(store=store, cache=NodeCache(config.cache_size), config=config)


async def seed_node_service(service: RiskNodeService) -> int:
    """
    Load the configured seed file into the store.
    
    Returns:
        Number of nodes created (0 when no seed file is configured)
    """
    seed_path = service.config.seed_data_path
    if not seed_path:
        return 0
    
    records = load_risk_nodes(seed_path)
    created = await service.create_nodes(records, service.config.seed_batch_id)
    return len(created)


def get_health_status(service: RiskNodeService) -> HealthResponse:
    """Get the health status of the risk node service."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        store_backend=service.store.name,
        cache=CacheStats(**service.cache_stats())
    )


# Global service instance
node_service = build_node_service()


def get_node_service() -> RiskNodeService:
    """FastAPI dependency returning the global service."""
    return node_service
