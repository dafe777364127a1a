"""Base layout: shared radial geometry."""

import math
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from replicaset_monitor.config import LayoutGeometry, Thresholds
from replicaset_monitor.models import (
    EngineKind,
    LayoutNode,
    LayoutRole,
    NodeRecord,
    SyncState,
    TopologyLayout,
)
from replicaset_monitor.normalize import coerce_records

# (layout id, record) in input order
Entry = tuple[str, NodeRecord]


class BaseLayout(ABC):
    """Abstract base class for engine-specific topology layouts.

    The hub sits at the geometry center, followers sit on a circle around
    it, and anything that is neither goes to an overflow row below.
    """

    engine: EngineKind

    def __init__(
        self,
        geometry: LayoutGeometry | None = None,
        thresholds: Thresholds | None = None,
    ) -> None:
        self.geometry = geometry or LayoutGeometry()
        self.thresholds = thresholds or Thresholds()

    def layout(self, nodes: Iterable[Any]) -> TopologyLayout:
        """Lay out one cluster's nodes.

        Args:
            nodes: Raw mappings, NodeRecords or EvaluatedNodes, in display
                order. Malformed entries are skipped.

        Returns:
            TopologyLayout with absolute coordinates.
        """
        entries = self.assign_ids(coerce_records(nodes, self.engine))
        layout_nodes, edges = self.build(entries)
        return TopologyLayout(engine=self.engine, nodes=tuple(layout_nodes), edges=tuple(edges))

    @abstractmethod
    def build(self, entries: list[Entry]) -> tuple[list, list]:
        """Place nodes and create edges.

        Returns:
            Tuple of (layout nodes, layout edges).
        """
        ...

    @staticmethod
    def assign_ids(records: list[NodeRecord]) -> list[Entry]:
        """Use hostnames as ids, suffixing repeats with #2, #3, ..."""
        seen: dict[str, int] = {}
        entries = []
        for record in records:
            count = seen.get(record.hostname, 0) + 1
            seen[record.hostname] = count
            node_id = record.hostname if count == 1 else f"{record.hostname}#{count}"
            entries.append((node_id, record))
        return entries

    @property
    def center(self) -> tuple[float, float]:
        return self.geometry.center_x, self.geometry.center_y

    def circle(self, count: int, radius: float, offset: float = 0.0) -> list[tuple[float, float]]:
        """Points at equal angular spacing: theta_i = 2*pi*i/count + offset."""
        cx, cy = self.center
        points = []
        for i in range(count):
            angle = 2 * math.pi * i / count + offset
            points.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
        return points

    def upper_arc(self, count: int, radius: float) -> list[tuple[float, float]]:
        """Points spread over the half-arc above the center, ends excluded."""
        cx, cy = self.center
        points = []
        for j in range(count):
            # y grows downward, so angles in (pi, 2*pi) are above the hub
            angle = math.pi + math.pi * (j + 1) / (count + 1)
            points.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
        return points

    def overflow_row(self, entries: list[Entry]) -> list[LayoutNode]:
        """Evenly spaced row below the circle, centered on the hub."""
        cx, cy = self.center
        y = cy + self.geometry.overflow_offset
        middle = (len(entries) - 1) / 2
        return [
            LayoutNode(
                id=node_id,
                role=LayoutRole.OTHER,
                x=cx + (i - middle) * self.geometry.overflow_spacing,
                y=y,
                payload=record,
            )
            for i, (node_id, record) in enumerate(entries)
        ]

    def hub_node(self, entry: Entry) -> LayoutNode:
        node_id, record = entry
        cx, cy = self.center
        return LayoutNode(id=node_id, role=LayoutRole.PRIMARY, x=cx, y=cy, payload=record)

    @staticmethod
    def lag_tier(lag: float, delayed: float, critical: float) -> SyncState:
        if lag > critical:
            return SyncState.CRITICAL
        if lag > delayed:
            return SyncState.DELAYED
        return SyncState.HEALTHY
