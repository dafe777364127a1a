"""PostgreSQL primary/standby layout."""

from replicaset_monitor.layouts.base import BaseLayout, Entry
from replicaset_monitor.models import EngineKind, LayoutEdge, LayoutNode, LayoutRole


class PostgresLayout(BaseLayout):
    """MASTER at the center, SLAVE standbys on one circle."""

    engine = EngineKind.POSTGRESQL

    def build(self, entries: list[Entry]) -> tuple[list, list]:
        hub: Entry | None = None
        standbys: list[Entry] = []
        others: list[Entry] = []

        for entry in entries:
            role = entry[1].role
            if role == "MASTER" and hub is None:
                hub = entry
            elif role == "SLAVE":
                standbys.append(entry)
            else:
                others.append(entry)

        nodes: list[LayoutNode] = []
        if hub is not None:
            nodes.append(self.hub_node(hub))

        for (x, y), (node_id, record) in zip(
            self.circle(len(standbys), self.geometry.follower_radius), standbys
        ):
            nodes.append(LayoutNode(id=node_id, role=LayoutRole.SECONDARY, x=x, y=y, payload=record))

        nodes.extend(self.overflow_row(others))

        edges: list[LayoutEdge] = []
        if hub is not None:
            for node_id, record in standbys:
                lag = record.replication_lag_seconds or 0.0
                edges.append(LayoutEdge(
                    source_id=hub[0],
                    target_id=node_id,
                    weight=self.lag_tier(
                        lag,
                        self.thresholds.postgresql_lag_delayed_seconds,
                        self.thresholds.postgresql_lag_critical_seconds,
                    ),
                    label=f"{lag:.1f}s",
                ))

        return nodes, edges
