"""Configuration loading helpers for the network quality tester."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeedTestConfig:
    """Measurement settings, fixed for the lifetime of one tester."""

    download_duration: float = 5
    upload_duration: float = 5
    latency_probe_count: int = 5
    upload_payload_bytes: int = 100 * 1024

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"{item.name} must be a positive number, got {value!r}")
        for name in ("latency_probe_count", "upload_payload_bytes"):
            if not float(getattr(self, name)).is_integer():
                raise ValueError(f"{name} must be a whole number")
            object.__setattr__(self, name, int(getattr(self, name)))

    @classmethod
    def from_overrides(cls, overrides: Optional[Mapping[str, Any]] = None) -> "SpeedTestConfig":
        """Merge ``overrides`` over the defaults, ignoring unknown keys."""

        if not overrides:
            return cls()
        known = {item.name for item in fields(cls)}
        ignored = sorted(str(key) for key in overrides if key not in known)
        if ignored:
            LOGGER.debug("Ignoring unknown speedtest options: %s", ", ".join(ignored))
        return cls(**{key: value for key, value in overrides.items() if key in known})


@dataclass
class HttpConfig:
    timeout_seconds: float = 10.0
    user_agent: str = "netgauge/1.0"


@dataclass
class PathsConfig:
    logs_dir: Path


@dataclass
class WebConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    reverse_proxy_headers: bool = False


@dataclass
class SchedulerConfig:
    enabled: bool = False
    interval_minutes: int = 30


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    root_dir: Path
    paths: PathsConfig
    speedtest: SpeedTestConfig = field(default_factory=SpeedTestConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    web: WebConfig = field(default_factory=WebConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _as_path(base: Path, maybe_path: Optional[str]) -> Path:
    if not maybe_path:
        raise ValueError("Path configuration entries cannot be empty")
    return (base / maybe_path).resolve()


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load application configuration from a YAML file.

    An explicit ``path`` must exist. Without one, ``config.yaml`` in the
    working directory is used when present, otherwise every section takes
    its defaults.
    """

    if path:
        source_path = Path(path)
        if not source_path.exists():
            raise FileNotFoundError(f"Missing configuration file at {source_path}")
        root_dir = source_path.resolve().parent
    else:
        root_dir = Path.cwd()
        source_path = root_dir / "config.yaml"

    data = {}
    if source_path.exists():
        with source_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    else:
        LOGGER.debug("No configuration file at %s, using defaults", source_path)

    paths_data = data.get("paths") or {}
    return AppConfig(
        root_dir=root_dir,
        paths=PathsConfig(logs_dir=_as_path(root_dir, paths_data.get("logs_dir", "logs"))),
        speedtest=SpeedTestConfig.from_overrides(data.get("speedtest")),
        http=HttpConfig(**(data.get("http") or {})),
        web=WebConfig(**(data.get("web") or {})),
        scheduler=SchedulerConfig(**(data.get("scheduler") or {})),
        logging=LoggingConfig(**(data.get("logging") or {})),
    )
