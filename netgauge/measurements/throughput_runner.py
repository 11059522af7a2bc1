"""Deadline-bounded download and upload throughput sampling."""

from __future__ import annotations

import logging
import os
import time
from typing import Callable, Sequence

import requests

LOGGER = logging.getLogger(__name__)

DOWNLOAD_ENDPOINTS = (
    "https://speed.cloudflare.com/__down?bytes=10000000",
    "https://proof.ovh.net/files/10Mb.dat",
)
UPLOAD_ENDPOINT = "https://httpbin.org/post"

CHUNK_SIZE = 65536
NO_CACHE_HEADERS = {"Cache-Control": "no-cache"}


def bytes_to_mbps(total_bytes: int, elapsed_seconds: float) -> float:
    """Convert a byte count over a window to binary megabits per second."""

    if total_bytes <= 0 or elapsed_seconds <= 0:
        return 0.0
    return round((total_bytes / elapsed_seconds) * 8 / (1024 * 1024), 2)


def run_download_test(
    session: requests.Session,
    duration: float,
    endpoints: Sequence[str] = DOWNLOAD_ENDPOINTS,
    timeout: float = 10.0,
    clock: Callable[[], float] = time.perf_counter,
) -> float:
    """Fetch the download endpoints in turn until ``duration`` seconds pass."""

    total_bytes = 0
    start = clock()
    deadline = start + duration

    while clock() < deadline:
        for url in endpoints:
            if clock() >= deadline:
                break
            try:
                with session.get(url, headers=NO_CACHE_HEADERS, timeout=timeout, stream=True) as response:
                    response.raise_for_status()
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        total_bytes += len(chunk)
                        if clock() >= deadline:
                            break
            except requests.RequestException as exc:
                LOGGER.warning("Download from %s failed: %s", url, exc)

    elapsed = clock() - start
    speed = bytes_to_mbps(total_bytes, elapsed)
    LOGGER.info("Download: %d bytes in %.2fs (%.2f Mbps)", total_bytes, elapsed, speed)
    return speed


def run_upload_test(
    session: requests.Session,
    duration: float,
    payload_bytes: int,
    endpoint: str = UPLOAD_ENDPOINT,
    timeout: float = 10.0,
    clock: Callable[[], float] = time.perf_counter,
) -> float:
    """POST one random payload repeatedly until ``duration`` seconds pass.

    Each request that does not error counts as the whole payload sent. The
    first failing request ends the run.
    """

    payload = os.urandom(payload_bytes)
    headers = {"Content-Type": "application/octet-stream", **NO_CACHE_HEADERS}
    total_bytes = 0
    start = clock()
    deadline = start + duration

    while clock() < deadline:
        try:
            response = session.post(endpoint, data=payload, headers=headers, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            LOGGER.warning("Upload to %s failed, stopping upload test: %s", endpoint, exc)
            break
        total_bytes += len(payload)

    elapsed = clock() - start
    speed = bytes_to_mbps(total_bytes, elapsed)
    LOGGER.info("Upload: %d bytes in %.2fs (%.2f Mbps)", total_bytes, elapsed, speed)
    return speed
