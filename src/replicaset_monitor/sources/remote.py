"""Telemetry source polling a monitoring API over HTTP."""

import logging
from typing import Any

import httpx

from replicaset_monitor.sources.base import BaseSource, SourceError

logger = logging.getLogger(__name__)


class HttpSource(BaseSource):
    """Fetch the node health payload from an HTTP endpoint."""

    def __init__(self, url: str, token: str | None = None, timeout: int = 10) -> None:
        """Initialize HTTP source.

        Args:
            url: Node health endpoint URL.
            token: Optional bearer token.
            timeout: Request timeout in seconds.
        """
        self.url = url
        self.token = token
        self.timeout = timeout

    def fetch(self) -> dict[str, Any]:
        """GET the payload and decode it as JSON."""
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = httpx.get(self.url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise SourceError(f"Node health request failed: {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise SourceError(f"Failed to fetch node health from {self.url}: {e}") from e

        logger.info(f"Fetched node health from {self.url}")
        return self.check_payload(payload, self.url)
