"""Fleet health monitoring: source -> evaluate -> aggregate -> layout."""

import logging
from datetime import datetime
from typing import Any

from replicaset_monitor.aggregator import build_report
from replicaset_monitor.config import Config
from replicaset_monitor.layouts import layout
from replicaset_monitor.models import ClusterReport, EngineKind, FleetHealth, TopologyLayout
from replicaset_monitor.normalize import flatten_payload
from replicaset_monitor.sources import BaseSource, SourceError, create_source

logger = logging.getLogger(__name__)


class FleetMonitor:
    """Main health monitoring orchestrator.

    Every check rebuilds all reports from a fresh payload; nothing is
    carried over between checks except the last result for lookups.
    """

    def __init__(self, config: Config, source: BaseSource | None = None) -> None:
        """Initialize fleet monitor.

        Args:
            config: Configuration object.
            source: Telemetry source; built from ``config.source`` when omitted.
        """
        self.config = config
        self.source = source or create_source(config.source)
        self.engines = [EngineKind.parse(e) for e in config.engines]
        self._last_health: FleetHealth | None = None

    def evaluate_payload(self, payload: dict[str, Any]) -> FleetHealth:
        """Build one ClusterReport per configured engine from a payload."""
        reports: dict[EngineKind, ClusterReport] = {}
        for engine in self.engines:
            entries = flatten_payload(payload.get(engine.value), engine)
            reports[engine] = build_report(entries, engine, self.config.thresholds)
            logger.debug(f"{engine.display_name}: {len(entries)} nodes, {len(reports[engine].groups)} clusters")
        return FleetHealth(reports=reports, timestamp=datetime.now())

    def check_all(self) -> FleetHealth:
        """Fetch telemetry and evaluate the whole fleet.

        Returns:
            FleetHealth; on a source failure it carries the error message
            and no reports.
        """
        try:
            payload = self.source.fetch()
        except SourceError as e:
            logger.error(f"Failed to fetch telemetry: {e}")
            health = FleetHealth(timestamp=datetime.now(), error_message=str(e))
        else:
            health = self.evaluate_payload(payload)

        self._last_health = health
        return health

    def get_last_health(self) -> FleetHealth | None:
        """Get the last collected fleet health."""
        return self._last_health

    def get_report(self, engine: EngineKind | str) -> ClusterReport | None:
        health = self._last_health or self.check_all()
        return health.reports.get(EngineKind.parse(engine))

    def topology(self, engine: EngineKind | str, cluster_id: str) -> TopologyLayout | None:
        """Lay out one cluster from the last check.

        Returns:
            The layout, or None when the cluster is not known.
        """
        engine = EngineKind.parse(engine)
        report = self.get_report(engine)
        group = report.get_group(cluster_id) if report else None
        if group is None:
            logger.warning(f"No {engine.display_name} cluster named {cluster_id!r}")
            return None
        return layout(group.nodes, engine, self.config.layout, self.config.thresholds)

    def get_summary(self) -> dict:
        """Get a summary of the current fleet health."""
        if not self._last_health:
            return {
                "status": "unknown",
                "message": "No health check has been performed yet",
            }

        health = self._last_health
        return {
            "status": health.status,
            "timestamp": health.timestamp.isoformat(),
            "nodes": {
                "total": health.total,
                "healthy": health.healthy_count,
                "warning": health.warning_count,
                "critical": health.critical_count,
            },
            "alerts": len(health.get_all_alerts()),
        }
