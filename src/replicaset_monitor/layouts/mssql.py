"""MSSQL AlwaysOn availability group layout."""

import math

from replicaset_monitor.layouts.base import BaseLayout, Entry
from replicaset_monitor.models import (
    AvailabilityGroup,
    EngineKind,
    LayoutEdge,
    LayoutNode,
    LayoutRole,
    SyncState,
)

SYNCHRONOUS_COMMIT = "SYNCHRONOUS_COMMIT"
ASYNCHRONOUS_COMMIT = "ASYNCHRONOUS_COMMIT"

PRIMARY_ROLES = ("PRIMARY", "PRIMARY_ROLE")
SECONDARY_ROLES = ("SECONDARY", "SECONDARY_ROLE")

# Keeps followers off the vertical listener -> primary edge
FOLLOWER_ANGLE_OFFSET = math.pi / 6


def sync_tier(mode: str | None, state: str | None) -> SyncState:
    """Combine commit mode and database sync state into one tier."""
    mode = (mode or "").upper()
    state = (state or "").upper()
    if state == "SYNCHRONIZED" and mode == SYNCHRONOUS_COMMIT:
        return SyncState.SYNCHRONIZED
    if state == "SYNCHRONIZING":
        return SyncState.SYNCHRONIZING
    if mode == ASYNCHRONOUS_COMMIT:
        return SyncState.ASYNCHRONOUS
    return SyncState.NOT_SYNCHRONIZED


def sync_label(mode: str | None) -> str:
    return "Synchronous" if (mode or "").upper() == SYNCHRONOUS_COMMIT else "Asynchronous"


class MssqlLayout(BaseLayout):
    """Primary replica at the center, secondaries around it, and the
    availability group listener (if any) above the primary."""

    engine = EngineKind.MSSQL

    @staticmethod
    def _find_group(entries: list[Entry]) -> AvailabilityGroup | None:
        for _, record in entries:
            if record.availability_group is not None:
                return record.availability_group
        return None

    @staticmethod
    def _match(entries: list[Entry], replica_name: str, taken: set[str]) -> Entry | None:
        wanted = replica_name.lower()
        for entry in entries:
            if entry[0] not in taken and entry[1].hostname.lower() == wanted:
                return entry
        return None

    def _resolve(self, entries: list[Entry], group: AvailabilityGroup | None):
        """Resolve (hub, [(follower, mode, state), ...])."""
        hub: Entry | None = None
        followers: list[tuple[Entry, str | None, str | None]] = []
        taken: set[str] = set()

        if group is not None and group.replicas:
            primary = next((r for r in group.replicas if r.role == "PRIMARY"), None)
            if primary is not None:
                hub = self._match(entries, primary.name, taken)
                if hub is not None:
                    taken.add(hub[0])
            for replica in group.replicas:
                if replica.role != "SECONDARY":
                    continue
                entry = self._match(entries, replica.name, taken)
                if entry is None:
                    continue
                taken.add(entry[0])
                followers.append((
                    entry,
                    replica.synchronization_mode,
                    group.synchronization_state(replica.name),
                ))
        else:
            for entry in entries:
                role = entry[1].role
                if role in PRIMARY_ROLES and hub is None:
                    hub = entry
                elif role in SECONDARY_ROLES:
                    followers.append((entry, None, None))

        return hub, followers

    def build(self, entries: list[Entry]) -> tuple[list, list]:
        group = self._find_group(entries)
        hub, followers = self._resolve(entries, group)

        placed = {follower[0][0] for follower in followers}
        if hub is not None:
            placed.add(hub[0])
        others = [entry for entry in entries if entry[0] not in placed]

        nodes: list[LayoutNode] = []
        edges: list[LayoutEdge] = []

        if hub is not None:
            nodes.append(self.hub_node(hub))

        listener = group.listeners[0] if group is not None and group.listeners else None
        if listener is not None:
            cx, cy = self.center
            listener_id = f"listener-{listener.name}"
            nodes.append(LayoutNode(
                id=listener_id,
                role=LayoutRole.LISTENER,
                x=cx,
                y=cy - self.geometry.listener_offset,
                payload=listener,
            ))
            if hub is not None:
                edges.append(LayoutEdge(source_id=listener_id, target_id=hub[0], weight=SyncState.LISTENER))

        points = self.circle(len(followers), self.geometry.follower_radius, offset=FOLLOWER_ANGLE_OFFSET)
        for (x, y), ((node_id, record), mode, state) in zip(points, followers):
            nodes.append(LayoutNode(id=node_id, role=LayoutRole.SECONDARY, x=x, y=y, payload=record))
            if hub is not None:
                edges.append(LayoutEdge(
                    source_id=hub[0],
                    target_id=node_id,
                    weight=sync_tier(mode, state),
                    label=sync_label(mode),
                ))

        nodes.extend(self.overflow_row(others))
        return nodes, edges
