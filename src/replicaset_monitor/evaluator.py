"""Node health classification."""

from collections.abc import Mapping
from typing import Any

from replicaset_monitor.config import Thresholds
from replicaset_monitor.models import EngineKind, EvaluatedNode, NodeRecord, Severity
from replicaset_monitor.normalize import UNKNOWN_ROLE, normalize_node

HEALTHY_ROLES = frozenset({"PRIMARY", "MASTER", "SECONDARY", "SLAVE"})
RUNNING = "RUNNING"
STANDALONE = "STANDALONE"


def format_number(value: float) -> str:
    """Render integral floats without a trailing ``.0`` (45.0 -> "45")."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def is_healthy_role(node: NodeRecord) -> bool:
    if node.role in HEALTHY_ROLES:
        return True
    return node.engine == EngineKind.MSSQL and node.ha_role == STANDALONE


def as_record(node: NodeRecord | EvaluatedNode | Mapping[str, Any], engine: EngineKind | str) -> NodeRecord:
    """Accept a record, an evaluated node or a raw mapping."""
    if isinstance(node, EvaluatedNode):
        return node.node
    if isinstance(node, NodeRecord):
        return node
    return normalize_node(node, engine)


def evaluate(
    node: NodeRecord | Mapping[str, Any],
    engine: EngineKind | str | None = None,
    thresholds: Thresholds | None = None,
) -> EvaluatedNode:
    """Classify one node.

    The first matching rule sets the severity: service down, then unhealthy
    role, then low disk. High replication lag is checked independently and
    either downgrades a healthy node to warning or is appended to the
    existing reason.

    Args:
        node: A NodeRecord or a raw telemetry mapping.
        engine: Engine kind; required for raw mappings, defaults to the
            record's own engine otherwise.
        thresholds: Policy thresholds (defaults apply when omitted).

    Returns:
        EvaluatedNode with severity and a human-readable reason.
    """
    if engine is None:
        if not isinstance(node, NodeRecord):
            raise ValueError("engine is required when evaluating a raw mapping")
        engine = node.engine
    record = as_record(node, engine)
    thresholds = thresholds or Thresholds()

    severity = Severity.HEALTHY
    reason = ""

    if record.service_status is not None and record.service_status != RUNNING:
        severity = Severity.CRITICAL
        reason = "Service is not running"
    elif not is_healthy_role(record):
        severity = Severity.CRITICAL
        if record.role == UNKNOWN_ROLE:
            reason = "Node status unknown"
        else:
            reason = f"Node is in unhealthy state: {record.role}"
    elif (
        record.free_disk_percent is not None
        and 100.0 - record.free_disk_percent > thresholds.disk_used_warning_percent
    ):
        severity = Severity.WARNING
        reason = f"Low disk space ({record.free_disk_percent:.1f}% free)"

    lag = record.replication_lag_seconds
    if lag is not None and lag > thresholds.replication_lag_warning_seconds:
        lag_reason = f"High replication lag: {format_number(lag)}s"
        if severity == Severity.HEALTHY:
            severity = Severity.WARNING
            reason = lag_reason
        else:
            reason = f"{reason}, {lag_reason}"

    return EvaluatedNode(node=record, severity=severity, reason=reason)
