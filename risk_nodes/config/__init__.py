"""
Configuration management for the risk node service.
"""

from .service_config import ServiceConfig, STORE_BACKENDS

__all__ = [
    'ServiceConfig',
    'STORE_BACKENDS'
]
