"""
Replica Set Monitor - health and topology of database replica sets.

Evaluates node telemetry for MongoDB replica sets, PostgreSQL streaming
replication pairs and MSSQL AlwaysOn availability groups, groups nodes into
clusters ordered by severity, and lays each cluster out as a radial graph.
"""

__version__ = "1.0.0"

from replicaset_monitor.config import Config, LayoutGeometry, Thresholds
from replicaset_monitor.monitor import FleetMonitor
from replicaset_monitor.models import (
    ClusterGroup,
    ClusterReport,
    EngineKind,
    EvaluatedNode,
    NodeRecord,
    Severity,
    TopologyLayout,
)

__all__ = [
    "Config",
    "LayoutGeometry",
    "Thresholds",
    "FleetMonitor",
    "ClusterGroup",
    "ClusterReport",
    "EngineKind",
    "EvaluatedNode",
    "NodeRecord",
    "Severity",
    "TopologyLayout",
]
