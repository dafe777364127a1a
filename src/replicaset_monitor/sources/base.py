"""Base telemetry source interface."""

from abc import ABC, abstractmethod
from typing import Any


class SourceError(Exception):
    """Raised when a telemetry payload cannot be fetched or parsed."""


class BaseSource(ABC):
    """Abstract base class for telemetry sources.

    A source returns one payload per call, keyed by engine name::

        {"mongodb": [...], "postgresql": [...], "mssql": [...]}
    """

    @abstractmethod
    def fetch(self) -> dict[str, Any]:
        """Fetch the current telemetry payload.

        Returns:
            Mapping of engine name to that engine's node entries.

        Raises:
            SourceError: If the payload cannot be retrieved.
        """
        ...

    @staticmethod
    def check_payload(payload: Any, origin: str) -> dict[str, Any]:
        """Validate the top-level payload shape."""
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        if not isinstance(payload, dict):
            raise SourceError(f"Unexpected payload from {origin}: expected an object")
        return payload
