"""
Risk Node API - FastAPI Main Application

A RESTful API for cached lookups of risk-scored geographic nodes.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
import uvicorn

from risk_nodes import __version__
from risk_nodes.exceptions import NodeNotFoundError, StoreError
from api.routes.risk_nodes import router as risk_nodes_router
from api.services.node_service import get_node_service, seed_node_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def active_node_service(app: FastAPI):
    """Resolve the service the routes use, honouring dependency overrides."""
    provider = app.dependency_overrides.get(get_node_service, get_node_service)
    return provider()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle - startup and shutdown events.
    """
    # Startup
    logger.info("Starting Risk Node API...")
    service = active_node_service(app)
    
    seeded = await seed_node_service(service)
    if seeded:
        logger.info(f"✓ Seeded store with {seeded} risk nodes")
    else:
        logger.info("No seed data configured - store starts with existing contents")
    
    yield
    
    # Shutdown
    logger.info("Shutting down Risk Node API...")
    await service.aclose()


# Create FastAPI application
app = FastAPI(
    title="Risk Node API",
    description="""
    **Cached lookups of risk-scored geographic nodes**
    
    Each node is a point with a risk score and references to its neighboring
    nodes. Lookups are served from an LRU cache before the store; proximity
    queries and neighbor prefetches keep the cache warm.
    
    ## Quick Start
    
    1. Check service health: `GET /api/risk-nodes/health`
    2. Create nodes: `POST /api/risk-nodes`
    3. Query nodes near a point: `GET /api/risk-nodes/near?lon=..&lat=..`
    """,
    version=__version__,
    lifespan=lifespan
)

# Add CORS middleware for web applications
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Custom exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle request validation errors with detailed information.
    """
    logger.warning(f"Validation error for {request.url}: {exc}")
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": "validation_error",
            "message": "Request validation failed",
            "details": {"errors": jsonable_encoder(exc.errors())}
        }
    )


@app.exception_handler(NodeNotFoundError)
async def node_not_found_handler(request: Request, exc: NodeNotFoundError):
    """
    Handle lookups whose anchor node does not exist.
    """
    logger.info(f"Node not found for {request.url}: {exc.cnn}")
    return JSONResponse(
        status_code=404,
        content={
            "success": False,
            "error": "node_not_found",
            "message": str(exc),
            "details": {"cnn": exc.cnn}
        }
    )


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    """
    Handle failures reported by the risk node store.
    """
    logger.error(f"Store error for {request.url}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "store_error",
            "message": str(exc),
            "details": None
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected errors gracefully.
    """
    logger.error(f"Unexpected error for {request.url}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "internal_server_error",
            "message": "An unexpected error occurred",
            "details": None
        }
    )


# Include routers
app.include_router(risk_nodes_router)


@app.get("/", tags=["general"])
async def root():
    """
    API root endpoint with basic information.
    """
    return {
        "api": "Risk Node API",
        "version": __version__,
        "status": "operational",
        "documentation": "/docs",
        "health_check": "/api/risk-nodes/health"
    }


@app.get("/health", tags=["general"])
async def api_health():
    """
    Simple health check endpoint.
    """
    service = active_node_service(app)
    return {
        "api_status": "healthy",
        "store_backend": service.store.name,
        "cached_nodes": len(service.cache)
    }


# Development server configuration
if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
