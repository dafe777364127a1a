"""JSON dashboard API."""

from replicaset_monitor.dashboard.app import create_app

__all__ = ["create_app"]
