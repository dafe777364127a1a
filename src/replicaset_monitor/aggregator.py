"""Grouping of evaluated nodes into priority-ordered clusters."""

from collections.abc import Iterable
from typing import Any

from replicaset_monitor.config import Thresholds
from replicaset_monitor.evaluator import RUNNING, evaluate
from replicaset_monitor.models import (
    ClusterGroup,
    ClusterReport,
    EngineKind,
    EvaluatedNode,
    NodeIssue,
    NodeRecord,
    Severity,
)
from replicaset_monitor.normalize import UNKNOWN_CLUSTER, coerce_records

STANDALONE_CLUSTER = "Standalone"

# Role a node must hold to be offered as a promotion/failover target
PROMOTABLE_ROLES = {
    EngineKind.MONGODB: "SECONDARY",
    EngineKind.POSTGRESQL: "SLAVE",
    EngineKind.MSSQL: "SECONDARY",
}


def cluster_key(node: NodeRecord) -> str:
    """Cluster a node is grouped under.

    MSSQL nodes without a cluster, or running standalone, are grouped into
    the "Standalone" pseudo-cluster. This is decided per record.
    """
    if node.engine == EngineKind.MSSQL and (
        node.cluster_id == UNKNOWN_CLUSTER or node.is_standalone
    ):
        return STANDALONE_CLUSTER
    return node.cluster_id or UNKNOWN_CLUSTER


def _evaluate_all(nodes: Iterable[Any], engine: EngineKind, thresholds: Thresholds | None) -> list[EvaluatedNode]:
    return [evaluate(record, engine, thresholds) for record in coerce_records(nodes, engine)]


def _group(evaluated: list[EvaluatedNode]) -> list[ClusterGroup]:
    grouped: dict[str, list[EvaluatedNode]] = {}
    for item in evaluated:
        grouped.setdefault(cluster_key(item.node), []).append(item)

    groups = []
    for cluster_id, members in grouped.items():
        # sorted() is stable: equal severities keep input order
        members = sorted(members, key=lambda m: m.severity)
        groups.append(ClusterGroup(
            cluster_id=cluster_id,
            nodes=tuple(members),
            severity=min(m.severity for m in members),
        ))

    return sorted(groups, key=lambda g: g.severity)


def aggregate(
    nodes: Iterable[Any],
    engine: EngineKind | str,
    thresholds: Thresholds | None = None,
) -> list[ClusterGroup]:
    """Evaluate nodes and group them into clusters, most severe first.

    Args:
        nodes: Raw telemetry mappings, NodeRecords or EvaluatedNodes.
        engine: Engine kind the nodes belong to.
        thresholds: Policy thresholds for evaluation.

    Returns:
        Cluster groups sorted by severity; ties keep first-seen order.
    """
    engine = EngineKind.parse(engine)
    return _group(_evaluate_all(nodes, engine, thresholds))


def build_report(
    nodes: Iterable[Any],
    engine: EngineKind | str,
    thresholds: Thresholds | None = None,
) -> ClusterReport:
    """Aggregate nodes and collect the flat critical/warning summaries."""
    engine = EngineKind.parse(engine)
    evaluated = _evaluate_all(nodes, engine, thresholds)

    critical = tuple(
        NodeIssue(hostname=e.node.hostname, reason=e.reason)
        for e in evaluated if e.severity == Severity.CRITICAL
    )
    warning = tuple(
        NodeIssue(hostname=e.node.hostname, reason=e.reason)
        for e in evaluated if e.severity == Severity.WARNING
    )

    return ClusterReport(
        engine=engine,
        groups=tuple(_group(evaluated)),
        critical_nodes=critical,
        warning_nodes=warning,
    )


def promotable_targets(
    nodes: ClusterGroup | Iterable[EvaluatedNode],
    engine: EngineKind | str,
) -> list[EvaluatedNode]:
    """Nodes eligible as promotion/failover targets.

    A target holds the engine's follower role and reports its service as
    running.
    """
    engine = EngineKind.parse(engine)
    members = nodes.nodes if isinstance(nodes, ClusterGroup) else nodes
    role = PROMOTABLE_ROLES[engine]
    return [
        m for m in members
        if m.node.role == role and m.node.service_status == RUNNING
    ]

