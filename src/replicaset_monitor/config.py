"""Configuration management for Replica Set Monitor."""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

# Health classification policy
DISK_USED_WARNING_PERCENT = 80.0
REPLICATION_LAG_WARNING_SECONDS = 30.0

# Topology edge tiers, per engine
MONGODB_LAG_DELAYED_SECONDS = 10.0
MONGODB_LAG_CRITICAL_SECONDS = 100.0
POSTGRESQL_LAG_DELAYED_SECONDS = 100.0
POSTGRESQL_LAG_CRITICAL_SECONDS = 300.0


@dataclass(frozen=True)
class Thresholds:
    """Health and replication thresholds.

    A node warns on disk when used space is strictly above
    ``disk_used_warning_percent`` and on lag when it is strictly above
    ``replication_lag_warning_seconds``. The per-engine lag tiers only
    drive topology edge styling.
    """

    disk_used_warning_percent: float = DISK_USED_WARNING_PERCENT
    replication_lag_warning_seconds: float = REPLICATION_LAG_WARNING_SECONDS
    mongodb_lag_delayed_seconds: float = MONGODB_LAG_DELAYED_SECONDS
    mongodb_lag_critical_seconds: float = MONGODB_LAG_CRITICAL_SECONDS
    postgresql_lag_delayed_seconds: float = POSTGRESQL_LAG_DELAYED_SECONDS
    postgresql_lag_critical_seconds: float = POSTGRESQL_LAG_CRITICAL_SECONDS

    def to_dict(self) -> dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Thresholds":
        """Create from dictionary."""
        defaults = cls()
        return cls(**{
            name: float(data.get(name, getattr(defaults, name)))
            for name in defaults.to_dict()
        })


@dataclass(frozen=True)
class LayoutGeometry:
    """Fixed geometry of the radial topology layout (screen coordinates)."""

    center_x: float = 400.0
    center_y: float = 250.0
    follower_radius: float = 220.0
    arbiter_radius: float = 180.0
    overflow_offset: float = 300.0  # below the center
    overflow_spacing: float = 150.0
    listener_offset: float = 300.0  # above the center

    def to_dict(self) -> dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LayoutGeometry":
        defaults = cls()
        return cls(**{
            name: float(data.get(name, getattr(defaults, name)))
            for name in defaults.to_dict()
        })


@dataclass
class SourceConfig:
    """Where telemetry payloads come from."""

    type: str = "file"  # "file" or "http"
    path: str | None = None
    url: str | None = None
    token: str | None = None
    timeout: int = 10

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SourceConfig":
        return cls(
            type=data.get("type", "file"),
            path=data.get("path"),
            url=data.get("url"),
            token=data.get("token"),
            timeout=float(data.get("timeout", 10)),
        )


@dataclass
class DashboardConfig:
    """Web dashboard configuration."""

    host: str = "0.0.0.0"
    port: int = 8080

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DashboardConfig":
        return cls(
            host=data.get("host", "0.0.0.0"),
            port=float(data.get("port", 8080)),
        )


@dataclass
class Config:
    """Main configuration for Replica Set Monitor."""

    source: SourceConfig = field(default_factory=SourceConfig)
    thresholds: Thresholds = field(default_factory=Thresholds)
    layout: LayoutGeometry = field(default_factory=LayoutGeometry)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    engines: list[str] = field(default_factory=lambda: ["mongodb", "postgresql", "mssql"])
    refresh_interval: int = 10  # seconds
    log_level: str = "INFO"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create configuration from dictionary."""
        return cls(
            source=SourceConfig.from_dict(data.get("source", {})),
            thresholds=Thresholds.from_dict(data.get("thresholds", {})),
            layout=LayoutGeometry.from_dict(data.get("layout", {})),
            dashboard=DashboardConfig.from_dict(data.get("dashboard", {})),
            engines=data.get("engines", ["mongodb", "postgresql", "mssql"]),
            refresh_interval=float(data.get("refresh_interval", 10)),
            log_level=data.get("log_level", "INFO"),
        )

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self._to_dict(), f, default_flow_style=False, sort_keys=False)

    def _to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        source: dict[str, Any] = {"type": self.source.type}
        for key in ("path", "url", "token"):
            value = getattr(self.source, key)
            if value:
                source[key] = value
        if self.source.type == "http":
            source["timeout"] = self.source.timeout

        return {
            "source": source,
            "engines": list(self.engines),
            "thresholds": self.thresholds.to_dict(),
            "layout": self.layout.to_dict(),
            "dashboard": {"host": self.dashboard.host, "port": self.dashboard.port},
            "refresh_interval": self.refresh_interval,
            "log_level": self.log_level,
        }


def create_example_config() -> Config:
    """Create an example configuration for documentation."""
    return Config(
        source=SourceConfig(
            type="http",
            url="https://monitor.example.com/api/v1/status/nodeshealth",
            token="change-me",
        ),
        refresh_interval=10,
    )
