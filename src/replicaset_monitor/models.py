"""Data models for replica set health and topology."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any


class EngineKind(str, Enum):
    """Database engine families the monitor understands."""

    MONGODB = "mongodb"
    POSTGRESQL = "postgresql"
    MSSQL = "mssql"

    @classmethod
    def parse(cls, value: "EngineKind | str") -> "EngineKind":
        """Parse an engine name in any case ("MongoDB", "mssql", ...)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown engine kind: {value!r}") from None

    @property
    def display_name(self) -> str:
        return {
            EngineKind.MONGODB: "MongoDB",
            EngineKind.POSTGRESQL: "PostgreSQL",
            EngineKind.MSSQL: "MSSQL",
        }[self]


class Severity(IntEnum):
    """Severity tiers. Lower value means more severe and sorts first."""

    CRITICAL = 1
    WARNING = 2
    HEALTHY = 3

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class AvailabilityReplica:
    """One replica of an AlwaysOn availability group."""

    name: str
    role: str
    synchronization_mode: str | None = None
    connection_state: str | None = None


@dataclass(frozen=True)
class AvailabilityDatabase:
    """Per-replica database synchronization row."""

    replica_name: str
    database_name: str | None = None
    synchronization_state: str | None = None


@dataclass(frozen=True)
class AvailabilityListener:
    """Availability group listener (the client-facing endpoint)."""

    name: str
    dns_name: str | None = None
    port: int | None = None
    state: str | None = None
    ip_addresses: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "dns_name": self.dns_name,
            "port": self.port,
            "state": self.state,
            "ip_addresses": list(self.ip_addresses),
        }


@dataclass(frozen=True)
class AvailabilityGroup:
    """AlwaysOn metrics reported by an MSSQL node."""

    cluster_name: str | None = None
    primary_replica: str | None = None
    health_state: str | None = None
    replicas: tuple[AvailabilityReplica, ...] = ()
    databases: tuple[AvailabilityDatabase, ...] = ()
    listeners: tuple[AvailabilityListener, ...] = ()

    def synchronization_state(self, replica_name: str) -> str | None:
        """State of the first database row reported for a replica."""
        wanted = replica_name.lower()
        for db in self.databases:
            if db.replica_name.lower() == wanted:
                return db.synchronization_state
        return None


@dataclass(frozen=True)
class NodeRecord:
    """A normalized telemetry record for one database instance."""

    hostname: str
    cluster_id: str
    engine: EngineKind
    role: str = "N/A"
    ha_role: str | None = None
    service_status: str | None = None
    free_disk_percent: float | None = None
    replication_lag_seconds: float | None = None

    # Display-only
    ip: str | None = None
    port: str | None = None
    version: str | None = None
    location: str | None = None

    availability_group: AvailabilityGroup | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_standalone(self) -> bool:
        return self.role == "STANDALONE" or self.ha_role == "STANDALONE"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "hostname": self.hostname,
            "cluster_id": self.cluster_id,
            "engine": self.engine.value,
            "role": self.role,
            "ha_role": self.ha_role,
            "service_status": self.service_status,
            "free_disk_percent": self.free_disk_percent,
            "replication_lag_seconds": self.replication_lag_seconds,
            "ip": self.ip,
            "port": self.port,
            "version": self.version,
            "location": self.location,
        }


@dataclass(frozen=True)
class EvaluatedNode:
    """A node together with its severity and the reason for it."""

    node: NodeRecord
    severity: Severity
    reason: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = self.node.to_dict()
        data["severity"] = self.severity.label
        data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class NodeIssue:
    """Flat (hostname, reason) entry for summary displays."""

    hostname: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"hostname": self.hostname, "reason": self.reason}


@dataclass(frozen=True)
class ClusterGroup:
    """Evaluated nodes sharing one cluster identity."""

    cluster_id: str
    nodes: tuple[EvaluatedNode, ...]
    severity: Severity

    def to_dict(self) -> dict[str, Any]:
        return {
            "cluster_id": self.cluster_id,
            "severity": self.severity.label,
            "nodes": [n.to_dict() for n in self.nodes],
        }


@dataclass(frozen=True)
class ClusterReport:
    """Aggregated health for every cluster of one engine."""

    engine: EngineKind
    groups: tuple[ClusterGroup, ...] = ()
    critical_nodes: tuple[NodeIssue, ...] = ()
    warning_nodes: tuple[NodeIssue, ...] = ()

    @property
    def critical_count(self) -> int:
        return len(self.critical_nodes)

    @property
    def warning_count(self) -> int:
        return len(self.warning_nodes)

    @property
    def total(self) -> int:
        return sum(len(g.nodes) for g in self.groups)

    @property
    def healthy_count(self) -> int:
        return self.total - self.critical_count - self.warning_count

    @property
    def severity(self) -> Severity | None:
        """Most severe cluster, or None when there are no clusters."""
        if not self.groups:
            return None
        return min(g.severity for g in self.groups)

    def get_group(self, cluster_id: str) -> ClusterGroup | None:
        for group in self.groups:
            if group.cluster_id == cluster_id:
                return group
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "engine": self.engine.value,
            "summary": {
                "total": self.total,
                "healthy": self.healthy_count,
                "warning": self.warning_count,
                "critical": self.critical_count,
            },
            "critical_nodes": [i.to_dict() for i in self.critical_nodes],
            "warning_nodes": [i.to_dict() for i in self.warning_nodes],
            "clusters": [g.to_dict() for g in self.groups],
        }


@dataclass
class FleetHealth:
    """Health of every monitored engine at one point in time."""

    reports: dict[EngineKind, ClusterReport] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    error_message: str | None = None

    @property
    def status(self) -> str:
        """Overall fleet status: the most severe node, or "unknown"."""
        severities = [r.severity for r in self.reports.values() if r.severity is not None]
        if not severities:
            return "unknown"
        return min(severities).label

    @property
    def total(self) -> int:
        return sum(r.total for r in self.reports.values())

    @property
    def critical_count(self) -> int:
        return sum(r.critical_count for r in self.reports.values())

    @property
    def warning_count(self) -> int:
        return sum(r.warning_count for r in self.reports.values())

    @property
    def healthy_count(self) -> int:
        return sum(r.healthy_count for r in self.reports.values())

    def get_all_alerts(self) -> list[tuple[str, str]]:
        """Get all critical then warning issues as (hostname, reason) tuples."""
        alerts = []
        for report in self.reports.values():
            for issue in report.critical_nodes:
                alerts.append((issue.hostname, issue.reason))
        for report in self.reports.values():
            for issue in report.warning_nodes:
                alerts.append((issue.hostname, issue.reason))
        return alerts

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "status": self.status,
            "error_message": self.error_message,
            "summary": {
                "total": self.total,
                "healthy": self.healthy_count,
                "warning": self.warning_count,
                "critical": self.critical_count,
            },
            "engines": {e.value: r.to_dict() for e, r in self.reports.items()},
            "alerts": [{"node": n, "message": m} for n, m in self.get_all_alerts()],
        }


class LayoutRole(str, Enum):
    """Position class of a node in a topology layout."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    ARBITER = "arbiter"
    LISTENER = "listener"
    OTHER = "other"


class SyncState(str, Enum):
    """Edge styling tier.

    Lag tiers (MongoDB, PostgreSQL): HEALTHY < DELAYED < CRITICAL.
    Commit-mode tiers (MSSQL), best first: SYNCHRONIZED, SYNCHRONIZING,
    ASYNCHRONOUS, NOT_SYNCHRONIZED.
    ARBITER and LISTENER tag the non-replicating edges.
    """

    HEALTHY = "healthy"
    DELAYED = "delayed"
    CRITICAL = "critical"

    SYNCHRONIZED = "synchronized"
    SYNCHRONIZING = "synchronizing"
    ASYNCHRONOUS = "asynchronous"
    NOT_SYNCHRONIZED = "not_synchronized"

    ARBITER = "arbiter"
    LISTENER = "listener"


@dataclass(frozen=True)
class LayoutNode:
    """A positioned node. (x, y) is the node center in screen coordinates."""

    id: str
    role: LayoutRole
    x: float
    y: float
    payload: NodeRecord | AvailabilityListener | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "x": self.x,
            "y": self.y,
            "payload": self.payload.to_dict() if self.payload is not None else None,
        }


@dataclass(frozen=True)
class LayoutEdge:
    """A directed edge from hub to follower (or listener to hub)."""

    source_id: str
    target_id: str
    weight: SyncState
    label: str = ""

    @property
    def edge_id(self) -> str:
        return f"{self.source_id}->{self.target_id}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.edge_id,
            "source": self.source_id,
            "target": self.target_id,
            "weight": self.weight.value,
            "label": self.label,
        }


@dataclass(frozen=True)
class TopologyLayout:
    """Render-agnostic graph model for one cluster."""

    engine: EngineKind
    nodes: tuple[LayoutNode, ...] = ()
    edges: tuple[LayoutEdge, ...] = ()

    @property
    def hub(self) -> LayoutNode | None:
        for node in self.nodes:
            if node.role == LayoutRole.PRIMARY:
                return node
        return None

    def get_node(self, node_id: str) -> LayoutNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "engine": self.engine.value,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }
