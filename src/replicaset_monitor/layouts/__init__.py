"""Radial topology layouts, one per engine."""

from collections.abc import Iterable
from typing import Any

from replicaset_monitor.config import LayoutGeometry, Thresholds
from replicaset_monitor.layouts.base import BaseLayout
from replicaset_monitor.layouts.mongodb import MongoLayout
from replicaset_monitor.layouts.mssql import MssqlLayout
from replicaset_monitor.layouts.postgresql import PostgresLayout
from replicaset_monitor.models import EngineKind, TopologyLayout

LAYOUTS: dict[EngineKind, type[BaseLayout]] = {
    EngineKind.MONGODB: MongoLayout,
    EngineKind.POSTGRESQL: PostgresLayout,
    EngineKind.MSSQL: MssqlLayout,
}


def layout(
    nodes: Iterable[Any],
    engine: EngineKind | str,
    geometry: LayoutGeometry | None = None,
    thresholds: Thresholds | None = None,
) -> TopologyLayout:
    """Lay out one cluster with the strategy for its engine."""
    layout_cls = LAYOUTS[EngineKind.parse(engine)]
    return layout_cls(geometry, thresholds).layout(nodes)


__all__ = ["BaseLayout", "MongoLayout", "MssqlLayout", "PostgresLayout", "LAYOUTS", "layout"]
