"""Round-trip latency sampling against a rotating set of trace endpoints."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Sequence

import requests

from .models import AllProbesFailedError, LatencyStats

LOGGER = logging.getLogger(__name__)

LATENCY_ENDPOINTS = (
    "https://www.cloudflare.com/cdn-cgi/trace",
    "https://www.google.com/generate_204",
    "https://1.1.1.1/cdn-cgi/trace",
)
NO_CACHE_HEADERS = {"Cache-Control": "no-cache"}


def compute_latency_stats(samples: Sequence[float]) -> LatencyStats:
    """Summarise round-trip samples; jitter is the mean absolute deviation."""

    if not samples:
        raise ValueError("At least one latency sample is required")
    avg = sum(samples) / len(samples)
    jitter = sum(abs(sample - avg) for sample in samples) / len(samples)
    return LatencyStats(avg_ms=avg, jitter_ms=jitter, min_ms=min(samples), max_ms=max(samples))


def probe_once(
    session: requests.Session,
    url: str,
    timeout: float,
    clock: Callable[[], float] = time.perf_counter,
) -> float:
    """Issue one HEAD request and return its round-trip time in ms."""

    started = clock()
    response = session.head(url, headers=NO_CACHE_HEADERS, timeout=timeout, allow_redirects=False)
    elapsed_ms = (clock() - started) * 1000.0
    response.close()
    return elapsed_ms


def run_latency_test(
    session: requests.Session,
    probe_count: int,
    endpoints: Sequence[str] = LATENCY_ENDPOINTS,
    timeout: float = 10.0,
    clock: Callable[[], float] = time.perf_counter,
) -> LatencyStats:
    samples: List[float] = []
    for index in range(probe_count):
        url = endpoints[index % len(endpoints)]
        try:
            samples.append(probe_once(session, url, timeout, clock))
        except requests.RequestException as exc:
            LOGGER.warning("Latency probe to %s failed: %s", url, exc)

    if not samples:
        raise AllProbesFailedError(probe_count)

    stats = compute_latency_stats(samples)
    LOGGER.info(
        "Latency %.1f ms (jitter %.1f ms) over %d/%d probes",
        stats.avg_ms,
        stats.jitter_ms,
        len(samples),
        probe_count,
    )
    return stats
