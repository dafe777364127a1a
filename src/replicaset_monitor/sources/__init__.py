"""Telemetry sources."""

from replicaset_monitor.config import SourceConfig
from replicaset_monitor.sources.base import BaseSource, SourceError
from replicaset_monitor.sources.file import FileSource
from replicaset_monitor.sources.remote import HttpSource


def create_source(config: SourceConfig) -> BaseSource:
    """Build the source described by a SourceConfig."""
    if config.type == "file":
        if not config.path:
            raise ValueError("File source requires 'path'")
        return FileSource(config.path)
    if config.type == "http":
        if not config.url:
            raise ValueError("HTTP source requires 'url'")
        return HttpSource(config.url, token=config.token, timeout=config.timeout)
    raise ValueError(f"Unknown source type: {config.type}")


__all__ = ["BaseSource", "FileSource", "HttpSource", "SourceError", "create_source"]
