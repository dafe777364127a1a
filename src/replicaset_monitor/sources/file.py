"""Telemetry source reading a JSON or YAML document."""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from replicaset_monitor.sources.base import BaseSource, SourceError

logger = logging.getLogger(__name__)


class FileSource(BaseSource):
    """Read telemetry snapshots from a local file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def fetch(self) -> dict[str, Any]:
        """Load the payload; the format follows the file suffix."""
        if not self.path.exists():
            raise SourceError(f"Payload file not found: {self.path}")

        try:
            with open(self.path) as f:
                if self.path.suffix.lower() in (".yaml", ".yml"):
                    payload = yaml.safe_load(f)
                else:
                    payload = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise SourceError(f"Failed to read {self.path}: {e}") from e

        logger.debug(f"Loaded telemetry payload from {self.path}")
        return self.check_payload(payload, str(self.path))
