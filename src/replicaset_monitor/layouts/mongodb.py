"""MongoDB replica set layout."""

from replicaset_monitor.evaluator import format_number
from replicaset_monitor.layouts.base import BaseLayout, Entry
from replicaset_monitor.models import EngineKind, LayoutEdge, LayoutNode, LayoutRole, SyncState


class MongoLayout(BaseLayout):
    """PRIMARY at the center, SECONDARY members on the outer circle and
    ARBITER members on a smaller arc above the primary."""

    engine = EngineKind.MONGODB

    def build(self, entries: list[Entry]) -> tuple[list, list]:
        hub: Entry | None = None
        secondaries: list[Entry] = []
        arbiters: list[Entry] = []
        others: list[Entry] = []

        for entry in entries:
            role = entry[1].role
            if role == "PRIMARY" and hub is None:
                hub = entry
            elif role == "SECONDARY":
                secondaries.append(entry)
            elif role == "ARBITER":
                arbiters.append(entry)
            else:
                others.append(entry)

        nodes: list[LayoutNode] = []
        if hub is not None:
            nodes.append(self.hub_node(hub))

        for (x, y), (node_id, record) in zip(
            self.circle(len(secondaries), self.geometry.follower_radius), secondaries
        ):
            nodes.append(LayoutNode(id=node_id, role=LayoutRole.SECONDARY, x=x, y=y, payload=record))

        for (x, y), (node_id, record) in zip(
            self.upper_arc(len(arbiters), self.geometry.arbiter_radius), arbiters
        ):
            nodes.append(LayoutNode(id=node_id, role=LayoutRole.ARBITER, x=x, y=y, payload=record))

        nodes.extend(self.overflow_row(others))

        edges: list[LayoutEdge] = []
        if hub is not None:
            hub_id = hub[0]
            for node_id, record in secondaries:
                lag = record.replication_lag_seconds or 0.0
                edges.append(LayoutEdge(
                    source_id=hub_id,
                    target_id=node_id,
                    weight=self.lag_tier(
                        lag,
                        self.thresholds.mongodb_lag_delayed_seconds,
                        self.thresholds.mongodb_lag_critical_seconds,
                    ),
                    label=f"{format_number(lag)}s",
                ))
            for node_id, _ in arbiters:
                edges.append(LayoutEdge(source_id=hub_id, target_id=node_id, weight=SyncState.ARBITER))

        return nodes, edges
