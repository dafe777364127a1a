"""FastAPI web dashboard application."""

import asyncio
from datetime import datetime

from fastapi import FastAPI, HTTPException

from replicaset_monitor import __version__
from replicaset_monitor.config import Config
from replicaset_monitor.models import EngineKind
from replicaset_monitor.monitor import FleetMonitor
from replicaset_monitor.sources import BaseSource


def _parse_engine(engine: str) -> EngineKind:
    try:
        return EngineKind.parse(engine)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def create_app(config: Config, source: BaseSource | None = None) -> FastAPI:
    """Create FastAPI dashboard application.

    Args:
        config: Application configuration.
        source: Optional telemetry source override.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="Replica Set Monitor",
        description="Database replica set health and topology API",
        version=__version__,
    )

    monitor = FleetMonitor(config, source=source)

    app.state.config = config
    app.state.monitor = monitor

    @app.get("/api/health")
    async def api_health() -> dict:
        """Fresh health check of the whole fleet."""
        health = await asyncio.to_thread(monitor.check_all)
        return health.to_dict()

    @app.get("/api/health/summary")
    async def api_health_summary() -> dict:
        """Summary of the last health check."""
        return monitor.get_summary()

    @app.get("/api/clusters/{engine}")
    async def api_clusters(engine: str) -> dict:
        """Priority-ordered clusters of one engine."""
        kind = _parse_engine(engine)
        health = await asyncio.to_thread(monitor.check_all)
        report = health.reports.get(kind)
        if report is None:
            raise HTTPException(status_code=404, detail=f"Engine not monitored: {kind.value}")
        return report.to_dict()

    @app.get("/api/topology/{engine}/{cluster_id}")
    async def api_topology(engine: str, cluster_id: str) -> dict:
        """Layout of one cluster, from the last health check."""
        kind = _parse_engine(engine)
        result = await asyncio.to_thread(monitor.topology, kind, cluster_id)
        if result is None:
            raise HTTPException(status_code=404, detail=f"Cluster not found: {cluster_id}")
        return result.to_dict()

    @app.get("/health")
    async def healthcheck() -> dict:
        """Application health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "version": __version__,
        }

    return app
