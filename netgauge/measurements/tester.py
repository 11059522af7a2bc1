"""Network tester facade: latency, throughput, quality and provider."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union

import requests

from ..config import SpeedTestConfig
from .latency_runner import LATENCY_ENDPOINTS, probe_once, run_latency_test
from .models import (
    LatencyStats,
    MeasurementResult,
    NetworkStatus,
    ProviderInfo,
    QualityAssessment,
    QuickCheckResult,
)
from .provider import PROVIDER_SERVICES, resolve_provider
from .quality import classify_quality
from .throughput_runner import DOWNLOAD_ENDPOINTS, UPLOAD_ENDPOINT, run_download_test, run_upload_test

LOGGER = logging.getLogger(__name__)

QUICK_CHECK_URL = "https://www.google.com/generate_204"
DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "netgauge/1.0"


class NetworkTester:
    """Runs the measurement sub-tests one after another.

    ``options`` may be a :class:`SpeedTestConfig` or a mapping of overrides
    merged over the defaults. A single instance must not run sub-tests
    concurrently; separate instances are independent.
    """

    def __init__(
        self,
        options: Union[SpeedTestConfig, Mapping[str, Any], None] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.perf_counter,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        if isinstance(options, SpeedTestConfig):
            self.options = options
        else:
            self.options = SpeedTestConfig.from_overrides(options)
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = user_agent
        self.session = session
        self.timeout = timeout
        self.clock = clock

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "NetworkTester":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def run_speed_test(self) -> MeasurementResult:
        """Latency, then download, then upload; never overlapped."""

        latency = self.test_latency()
        download = self.test_download_speed()
        upload = self.test_upload_speed()
        return MeasurementResult(
            download_mbps=download,
            upload_mbps=upload,
            latency_ms=latency.avg_ms,
            jitter_ms=latency.jitter_ms,
            timestamp=datetime.now(timezone.utc),
        )

    def test_latency(self) -> LatencyStats:
        return run_latency_test(
            self.session,
            self.options.latency_probe_count,
            endpoints=LATENCY_ENDPOINTS,
            timeout=self.timeout,
            clock=self.clock,
        )

    def test_download_speed(self) -> float:
        return run_download_test(
            self.session,
            self.options.download_duration,
            endpoints=DOWNLOAD_ENDPOINTS,
            timeout=self.timeout,
            clock=self.clock,
        )

    def test_upload_speed(self) -> float:
        return run_upload_test(
            self.session,
            self.options.upload_duration,
            self.options.upload_payload_bytes,
            endpoint=UPLOAD_ENDPOINT,
            timeout=self.timeout,
            clock=self.clock,
        )

    @staticmethod
    def analyze_quality(result: MeasurementResult) -> QualityAssessment:
        return classify_quality(result)

    def get_network_provider(self) -> ProviderInfo:
        return resolve_provider(self.session, services=PROVIDER_SERVICES, timeout=self.timeout)

    def quick_check(self) -> QuickCheckResult:
        try:
            latency = probe_once(self.session, QUICK_CHECK_URL, self.timeout, self.clock)
        except requests.RequestException as exc:
            LOGGER.info("Quick check failed: %s", exc)
            return QuickCheckResult(is_online=False, latency_ms=-1.0)
        return QuickCheckResult(is_online=True, latency_ms=latency)


def is_network_good(tester: Optional[NetworkTester] = None) -> bool:
    """Run a full test and report whether the tier is excellent or good."""

    tester = tester or NetworkTester()
    result = tester.run_speed_test()
    return tester.analyze_quality(result).is_good


def get_network_status(tester: Optional[NetworkTester] = None) -> NetworkStatus:
    tester = tester or NetworkTester()
    result = tester.run_speed_test()
    provider = tester.get_network_provider()
    quality = tester.analyze_quality(result)
    return NetworkStatus(
        is_good=quality.is_good,
        quality=quality.tier,
        speed=result.download_mbps,
        provider=provider.name,
    )
