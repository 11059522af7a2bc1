"""Shared pytest fixtures: a controllable clock, a scripted HTTP session and a stub tester."""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

import pytest
import requests

from netgauge.measurements.models import (
    AllProbesFailedError,
    MeasurementResult,
    ProviderInfo,
    QualityAssessment,
    QuickCheckResult,
)
from netgauge.measurements.quality import classify_quality


class FakeClock:
    """Stands in for ``time.perf_counter``; only moves when told to."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        chunks: Iterable[bytes] = (),
        payload=None,
        clock: Optional[FakeClock] = None,
        seconds_per_chunk: float = 0.0,
    ):
        self.status_code = status_code
        self.chunks = list(chunks)
        self.payload = payload
        self.clock = clock
        self.seconds_per_chunk = seconds_per_chunk
        self.chunks_read = 0
        self.closed = False

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error", response=self)

    def iter_content(self, chunk_size: int = 1):
        for chunk in self.chunks:
            if self.clock is not None:
                self.clock.advance(self.seconds_per_chunk)
            self.chunks_read += 1
            yield chunk

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


Handler = Callable[..., object]


class FakeSession:
    """Routes HEAD/GET/POST to per-method handlers and records every call.

    A handler receives ``(url, **kwargs)`` and returns a response, or an
    exception instance which is raised in its place.
    """

    def __init__(self):
        self.handlers: Dict[str, Handler] = {}
        self.calls: List[tuple] = []
        self.headers: Dict[str, str] = {}
        self.closed = False

    def on(self, method: str, handler: Handler) -> "FakeSession":
        self.handlers[method] = handler
        return self

    def _dispatch(self, method: str, url: str, **kwargs):
        self.calls.append((method, url, kwargs))
        outcome = self.handlers[method](url, **kwargs)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def head(self, url, **kwargs):
        return self._dispatch("HEAD", url, **kwargs)

    def get(self, url, **kwargs):
        return self._dispatch("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._dispatch("POST", url, **kwargs)

    def close(self) -> None:
        self.closed = True

    def methods(self) -> List[str]:
        return [call[0] for call in self.calls]

    def urls(self, method: str) -> List[str]:
        return [call[1] for call in self.calls if call[0] == method]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def restore_root_logging():
    """Undo handler changes made by ``configure_logging``."""

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class StubTester:
    """Returns canned results instead of touching the network."""

    def __init__(self, download=60.0, upload=15.0, latency=20.0, provider="MTN"):
        self.result = MeasurementResult(
            download_mbps=download,
            upload_mbps=upload,
            latency_ms=latency,
            jitter_ms=2.0,
            timestamp=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        )
        self.provider_info = ProviderInfo(name=provider, country="Nigeria")
        self.provider_calls = 0
        self.fail = False

    def run_speed_test(self):
        if self.fail:
            raise AllProbesFailedError(5)
        return self.result

    @staticmethod
    def analyze_quality(result) -> QualityAssessment:
        return classify_quality(result)

    def get_network_provider(self):
        self.provider_calls += 1
        return self.provider_info

    def quick_check(self):
        return QuickCheckResult(is_online=True, latency_ms=12.0)
