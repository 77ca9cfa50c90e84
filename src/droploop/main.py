from __future__ import annotations

import asyncio
import os
import sys
import uvicorn

# Install uvloop for better async performance (Linux/macOS only)
if sys.platform != "win32":
    try:
        import uvloop

        asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
    except ImportError:
        pass

from .envs.admin_env import Settings, get_settings


def _setup_prometheus_multiproc_dir() -> None:
    """Prepare the Prometheus multiprocess directory before Uvicorn forks workers."""
    prom_dir = os.environ.get("PROMETHEUS_MULTIPROC_DIR")
    if not prom_dir:
        return

    os.makedirs(prom_dir, exist_ok=True)
    for filename in os.listdir(prom_dir):
        file_path = os.path.join(prom_dir, filename)
        if os.path.isfile(file_path):
            os.remove(file_path)


def _credential_source(settings: Settings) -> str:
    if settings.admin_private_key is not None:
        return "ADMIN_PRIVATE_KEY"
    if settings.allow_ephemeral_admin:
        return "EPHEMERAL per request (demo only)"
    return "missing; admin routes will fail until ADMIN_PRIVATE_KEY is set"


def main() -> None:
    settings = get_settings()

    print(f"Starting {settings.app_name} Admin v{settings.app_version}")
    print(f"Cluster: {settings.cluster.value} via {settings.rpc_endpoint}")
    print(f"Admin credential: {_credential_source(settings)}")
    # credentials in the Redis URL stay out of the banner
    store = settings.database_url.rsplit("@", 1)[-1] if settings.database_url else None
    print(f"Record store: {store or 'disabled (process-local locks)'}")
    print(
        f"Admin API will be available at: http://{settings.api_host}:{settings.api_port}"
    )
    print(f"Docs: http://{settings.api_host}:{settings.api_port}/docs")

    _setup_prometheus_multiproc_dir()

    uvicorn.run(
        "droploop.api.admin_api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
        log_level="info",
    )


if __name__ == "__main__":
    main()
