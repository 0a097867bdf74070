#!/usr/bin/env python3
"""
zfsrepl API Service

FastAPI application exposing dataset listing, property access and
snapshot replication.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_config
from .zfs_operations.factories.service_factory import ServiceFactory, create_service_factory_from_config
from .api.middleware import ErrorHandlingMiddleware, LoggingMiddleware
from .api.routers import dataset_router, snapshot_router, property_router, replication_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting zfsrepl API service...")
    yield
    logger.info("Shutting down zfsrepl API service...")


def create_app(service_factory: Optional[ServiceFactory] = None) -> FastAPI:
    """Build the application around one ServiceFactory."""
    config = get_config()
    app = FastAPI(
        title="zfsrepl API",
        description="ZFS dataset directory and snapshot replication",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if config.server.enable_docs else None,
    )
    app.state.service_factory = service_factory or create_service_factory_from_config(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)

    app.include_router(dataset_router)
    app.include_router(snapshot_router)
    app.include_router(property_router)
    app.include_router(replication_router)

    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "name": "zfsrepl",
            "version": "1.0.0",
            "description": "ZFS dataset directory and snapshot replication",
            "docs": "/docs",
        }

    return app


def run() -> None:
    import uvicorn

    config = get_config()
    logging.basicConfig(
        level=config.server.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    uvicorn.run(create_app(), host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    run()
