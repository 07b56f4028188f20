#!/usr/bin/env python3
"""
Startup script for the Risk Node API server.

This script starts the FastAPI server with proper configuration.
"""

import os
import argparse

import uvicorn


def main():
    """Start the FastAPI server."""
    parser = argparse.ArgumentParser(description="Risk Node API Server")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"], 
                       help="Log level")
    parser.add_argument("--store", choices=["memory", "sqlite"],
                       help="Store backend (overrides RISK_NODES_STORE_BACKEND)")
    parser.add_argument("--sqlite-path", help="SQLite database file (overrides RISK_NODES_SQLITE_PATH)")
    parser.add_argument("--seed", help="GeoJSON file of nodes to load at startup (overrides RISK_NODES_SEED_DATA)")
    
    args = parser.parse_args()
    
    # The service is configured from the environment when api.main is imported
    if args.store:
        os.environ["RISK_NODES_STORE_BACKEND"] = args.store
    if args.sqlite_path:
        os.environ["RISK_NODES_SQLITE_PATH"] = os.path.abspath(args.sqlite_path)
    if args.seed:
        os.environ["RISK_NODES_SEED_DATA"] = os.path.abspath(args.seed)
    
    print("🚀 Starting Risk Node API Server")
    print(f"📍 URL: http://{args.host}:{args.port}")
    print(f"📚 Documentation: http://{args.host}:{args.port}/docs")
    print(f"🔍 Health check: http://{args.host}:{args.port}/api/risk-nodes/health")
    print("-" * 50)
    
    # Ensure we're in the right directory
    os.chdir(os.path.dirname(os.path.abspath(__file__)))
    
    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        access_log=True
    )

if __name__ == "__main__":
    main()
