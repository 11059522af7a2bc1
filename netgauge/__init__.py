"""Application bootstrap helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import AppConfig, SpeedTestConfig, load_config
from .logging_setup import configure_logging
from .measurements.manager import MeasurementManager
from .measurements.models import (
    AllProbesFailedError,
    LatencyStats,
    MeasurementResult,
    NetGaugeError,
    NetworkStatus,
    ProviderInfo,
    QualityAssessment,
    QuickCheckResult,
)
from .measurements.provider import normalize_provider_name
from .measurements.quality import classify_quality
from .measurements.tester import NetworkTester, get_network_status, is_network_good
from .scheduler import SchedulerService
from .web.app import create_web_app

__all__ = [
    "AllProbesFailedError",
    "ApplicationContext",
    "LatencyStats",
    "MeasurementResult",
    "NetGaugeError",
    "NetworkStatus",
    "NetworkTester",
    "ProviderInfo",
    "QualityAssessment",
    "QuickCheckResult",
    "SpeedTestConfig",
    "bootstrap",
    "classify_quality",
    "get_network_status",
    "is_network_good",
    "normalize_provider_name",
]


class ApplicationContext:
    """Holds shared singletons for the service."""

    def __init__(self, config: AppConfig):
        self.config = config
        configure_logging(config)
        self.tester = NetworkTester(
            config.speedtest,
            timeout=config.http.timeout_seconds,
            user_agent=config.http.user_agent,
        )
        self.measurements = MeasurementManager(self.tester)
        self.scheduler = SchedulerService(config, self.measurements)
        self.web_app = create_web_app(
            config=config,
            measurement_manager=self.measurements,
            scheduler=self.scheduler,
        )

    def start(self) -> None:
        self.scheduler.start()

    def close(self) -> None:
        self.scheduler.shutdown()
        self.tester.close()


def bootstrap(config_path: Optional[str] = None) -> ApplicationContext:
    """Load configuration and wire dependencies."""

    config_file = Path(config_path).resolve() if config_path else None
    config = load_config(str(config_file)) if config_file else load_config()
    return ApplicationContext(config)
