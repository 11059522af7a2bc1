"""Measurement orchestration with in-memory latest results."""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

from .models import MeasurementResult, NetworkStatus, ProviderInfo, QualityAssessment, QuickCheckResult
from .tester import NetworkTester

LOGGER = logging.getLogger(__name__)


class MeasurementManager:
    """Serialises runs on one tester and remembers the most recent outcome."""

    def __init__(self, tester: NetworkTester):
        self.tester = tester
        self._run_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._latest: Optional[MeasurementResult] = None
        self._latest_quality: Optional[QualityAssessment] = None
        self._provider: Optional[ProviderInfo] = None

    @property
    def busy(self) -> bool:
        return self._run_lock.locked()

    def run_speedtest(self) -> QualityAssessment:
        with self._run_lock:
            LOGGER.info("Starting speed test")
            result = self.tester.run_speed_test()
            quality = self.tester.analyze_quality(result)
        with self._state_lock:
            self._latest = result
            self._latest_quality = quality
        LOGGER.info(
            "Speed test finished: %s (down %.2f Mbps / up %.2f Mbps / %.1f ms)",
            quality.tier,
            result.download_mbps,
            result.upload_mbps,
            result.latency_ms,
        )
        return quality

    def quick_check(self) -> QuickCheckResult:
        with self._run_lock:
            return self.tester.quick_check()

    def refresh_provider(self) -> ProviderInfo:
        with self._run_lock:
            provider = self.tester.get_network_provider()
        with self._state_lock:
            self._provider = provider
        return provider

    def provider(self) -> ProviderInfo:
        with self._state_lock:
            cached = self._provider
        return cached if cached is not None else self.refresh_provider()

    def latest(self) -> Optional[MeasurementResult]:
        with self._state_lock:
            return self._latest

    def status(self) -> Optional[NetworkStatus]:
        """Status bundle for the latest run, or ``None`` before the first one."""

        with self._state_lock:
            result, quality = self._latest, self._latest_quality
        if result is None or quality is None:
            return None
        return NetworkStatus(
            is_good=quality.is_good,
            quality=quality.tier,
            speed=result.download_mbps,
            provider=self.provider().name,
        )

    def to_dict(self) -> Dict[str, Any]:
        with self._state_lock:
            result, quality = self._latest, self._latest_quality
        return {
            "result": result.to_dict() if result else None,
            "quality": quality.to_dict() if quality else None,
            "running": self.busy,
        }
