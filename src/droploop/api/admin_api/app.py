"""FastAPI application configuration (Admin API)."""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CollectorRegistry, make_asgi_app, multiprocess

from .dependencies import get_settings_dependency
from .errors import register_error_handlers
from .routers import state_tree, treasury


def _metrics_app():
    if os.environ.get("PROMETHEUS_MULTIPROC_DIR"):
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        return make_asgi_app(registry=registry)
    return make_asgi_app()


def create_admin_app() -> FastAPI:
    settings = get_settings_dependency()

    app = FastAPI(
        title=f"{settings.app_name} Admin",
        version=settings.app_version,
        description="Admin key provisioning, funding and state tree bootstrap",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(state_tree.router, prefix="/api/token")
    app.include_router(treasury.router, prefix="/api/admin")
    app.mount("/metrics", _metrics_app())

    @app.get("/")
    async def root() -> dict[str, str]:
        return {
            "message": f"Welcome to {settings.app_name} Admin API",
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {
            "status": "healthy",
            "service": f"{settings.app_name} Admin",
            "cluster": settings.cluster.value,
        }

    return app


app = create_admin_app()
