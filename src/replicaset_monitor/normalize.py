"""Normalization of loosely-typed telemetry into NodeRecord objects.

Telemetry varies by engine and by collector version, so the same logical
field may arrive under several key spellings. Every "which key wins"
decision lives in the preference tables below; the evaluator and layout
engines only ever see the normalized ``NodeRecord``.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from replicaset_monitor.models import (
    AvailabilityDatabase,
    AvailabilityGroup,
    AvailabilityListener,
    AvailabilityReplica,
    EngineKind,
    EvaluatedNode,
    NodeRecord,
)

logger = logging.getLogger(__name__)

UNKNOWN_CLUSTER = "Unknown"
UNKNOWN_HOSTNAME = "Unknown"
UNKNOWN_ROLE = "N/A"

_COMMON_FIELDS: dict[str, tuple[str, ...]] = {
    "hostname": ("Hostname", "nodename", "hostname"),
    "cluster": ("ClusterName", "clusterId"),
    "used_disk": ("FDPercent", "usedDiskPercent"),
    "free_disk": ("freediskpercent", "freeDiskPercent"),
    "lag": ("ReplicationLagSec", "replicationLagSeconds"),
    "ip": ("IP", "ip"),
    "port": ("Port", "port"),
    "location": ("dc", "DC", "Location"),
}

FIELD_PREFERENCES: dict[EngineKind, dict[str, tuple[str, ...]]] = {
    EngineKind.MONGODB: {
        **_COMMON_FIELDS,
        "hostname": ("nodename", "Hostname", "hostname"),
        "cluster": ("ClusterName", "replsetname", "ReplicaSetName", "clusterId"),
        "role": ("status", "NodeStatus", "role"),
        "service": ("MongoStatus", "serviceStatus"),
        "version": ("MongoVersion", "version", "Version"),
    },
    EngineKind.POSTGRESQL: {
        **_COMMON_FIELDS,
        "role": ("NodeStatus", "status", "role"),
        "service": ("PGServiceStatus", "serviceStatus"),
        "version": ("PGVersion", "Version", "version"),
    },
    EngineKind.MSSQL: {
        **_COMMON_FIELDS,
        "role": ("NodeStatus", "status", "role"),
        "service": ("Status", "serviceStatus"),
        "version": ("Version", "version"),
    },
}


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def first_present(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    """Return the first non-empty value among ``keys``, or None."""
    for key in keys:
        value = raw.get(key)
        if not _is_empty(value):
            return value
    return None


def to_float(value: Any) -> float | None:
    """Coerce a telemetry value to float, or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            result = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            result = float(value.strip().rstrip("%"))
        except ValueError:
            return None
    else:
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _to_str(value: Any) -> str | None:
    if _is_empty(value):
        return None
    return str(value).strip()


def _first_float(raw: Mapping[str, Any], keys: tuple[str, ...]) -> float | None:
    for key in keys:
        number = to_float(raw.get(key))
        if number is not None:
            return number
    return None


def resolve_free_disk(raw: Mapping[str, Any], engine: EngineKind) -> float | None:
    """Free disk percentage; a used-percent field wins and is inverted."""
    fields = FIELD_PREFERENCES[engine]
    used = _first_float(raw, fields["used_disk"])
    if used is not None:
        return 100.0 - used
    return _first_float(raw, fields["free_disk"])


def _rows(data: Mapping[str, Any], key: str) -> list[Any]:
    rows = data.get(key)
    if rows is None:
        return []
    if not isinstance(rows, list):
        logger.warning(f"Ignoring AlwaysOn {key}: expected a list, got {type(rows).__name__}")
        return []
    return rows


def parse_availability_group(data: Any) -> AvailabilityGroup | None:
    """Parse an ``AlwaysOnMetrics`` block. Malformed rows are dropped."""
    if not isinstance(data, Mapping):
        return None

    replicas = []
    for item in _rows(data, "Replicas"):
        if not isinstance(item, Mapping) or _is_empty(item.get("ReplicaName")):
            continue
        replicas.append(AvailabilityReplica(
            name=str(item["ReplicaName"]).strip(),
            role=(_to_str(item.get("Role")) or "").upper(),
            synchronization_mode=_to_str(
                first_present(item, ("SynchronizationMode", "AvailabilityMode"))
            ),
            connection_state=_to_str(item.get("ConnectionState")),
        ))

    databases = []
    for item in _rows(data, "Databases"):
        if not isinstance(item, Mapping) or _is_empty(item.get("ReplicaName")):
            continue
        databases.append(AvailabilityDatabase(
            replica_name=str(item["ReplicaName"]).strip(),
            database_name=_to_str(item.get("DatabaseName")),
            synchronization_state=_to_str(item.get("SynchronizationState")),
        ))

    listeners = []
    for item in _rows(data, "Listeners"):
        if not isinstance(item, Mapping) or _is_empty(item.get("ListenerName")):
            continue
        port = to_float(item.get("Port"))
        addresses = item.get("IpAddresses")
        if not isinstance(addresses, list):
            addresses = [addresses] if addresses else []
        listeners.append(AvailabilityListener(
            name=str(item["ListenerName"]).strip(),
            dns_name=_to_str(item.get("DnsName")),
            port=int(port) if port is not None else None,
            state=_to_str(item.get("ListenerState")),
            ip_addresses=tuple(str(ip) for ip in addresses),
        ))

    return AvailabilityGroup(
        cluster_name=_to_str(data.get("ClusterName")),
        primary_replica=_to_str(data.get("PrimaryReplica")),
        health_state=_to_str(data.get("HealthState")),
        replicas=tuple(replicas),
        databases=tuple(databases),
        listeners=tuple(listeners),
    )


def normalize_node(raw: Mapping[str, Any], engine: EngineKind | str) -> NodeRecord:
    """Build a strict NodeRecord from one raw telemetry mapping.

    Missing fields fall back to the least informative default; this never
    raises for bad field values.
    """
    engine = EngineKind.parse(engine)
    fields = FIELD_PREFERENCES[engine]

    role = _to_str(first_present(raw, fields["role"]))
    ha_role = _to_str(raw.get("HARole")) if engine == EngineKind.MSSQL else None
    service_status = _to_str(first_present(raw, fields["service"]))

    return NodeRecord(
        hostname=_to_str(first_present(raw, fields["hostname"])) or UNKNOWN_HOSTNAME,
        cluster_id=_to_str(first_present(raw, fields["cluster"])) or UNKNOWN_CLUSTER,
        engine=engine,
        role=role.upper() if role else UNKNOWN_ROLE,
        ha_role=ha_role.upper() if ha_role else None,
        service_status=service_status.upper() if service_status else None,
        free_disk_percent=resolve_free_disk(raw, engine),
        replication_lag_seconds=_first_float(raw, fields["lag"]),
        ip=_to_str(first_present(raw, fields["ip"])),
        port=_to_str(first_present(raw, fields["port"])),
        version=_to_str(first_present(raw, fields["version"])),
        location=_to_str(first_present(raw, fields["location"])),
        availability_group=(
            parse_availability_group(raw.get("AlwaysOnMetrics"))
            if engine == EngineKind.MSSQL else None
        ),
        raw=dict(raw),
    )


def _is_cluster_group(entry: Mapping[str, Any]) -> bool:
    return bool(entry) and all(isinstance(v, list) for v in entry.values())


def flatten_payload(entries: Any, engine: EngineKind | str) -> list[dict[str, Any]]:
    """Flatten one engine's payload into a list of raw node mappings.

    ``entries`` holds node mappings and/or cluster groups shaped
    ``{cluster_name: [node, ...]}``. Grouped nodes without a cluster field
    inherit the group name. Malformed entries are skipped with a warning.
    """
    engine = EngineKind.parse(engine)
    if entries is None:
        return []
    if not isinstance(entries, list):
        logger.warning(f"{engine.display_name} payload is not a list: {type(entries).__name__}")
        return []

    cluster_keys = FIELD_PREFERENCES[engine]["cluster"]
    flattened: list[dict[str, Any]] = []

    for entry in entries:
        if not isinstance(entry, Mapping):
            logger.warning(f"Skipping invalid {engine.display_name} entry: {entry!r}")
            continue

        if not _is_cluster_group(entry):
            flattened.append(dict(entry))
            continue

        for cluster_name, nodes in entry.items():
            for node in nodes:
                if not isinstance(node, Mapping):
                    logger.warning(
                        f"Skipping invalid {engine.display_name} node in {cluster_name!r}: {node!r}"
                    )
                    continue
                record = dict(node)
                if first_present(record, cluster_keys) is None:
                    record["ClusterName"] = cluster_name
                flattened.append(record)

    return flattened


def coerce_records(nodes: Iterable[Any], engine: EngineKind) -> list[NodeRecord]:
    """Turn raw mappings, NodeRecords or EvaluatedNodes into NodeRecords.

    Entries of any other type are skipped with a warning.
    """
    records = []
    for index, node in enumerate(nodes):
        if isinstance(node, EvaluatedNode):
            records.append(node.node)
        elif isinstance(node, NodeRecord):
            records.append(node)
        elif isinstance(node, Mapping):
            records.append(normalize_node(node, engine))
        else:
            logger.warning(f"Skipping malformed {engine.display_name} node record #{index}: {node!r}")
    return records
