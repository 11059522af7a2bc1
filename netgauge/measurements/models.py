"""Shared dataclasses for measurements."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional

QUALITY_TIERS = ("excellent", "good", "fair", "poor", "very-poor")
GOOD_TIERS = ("excellent", "good")


class NetGaugeError(Exception):
    """Base class for errors raised by the measurement engine."""


class AllProbesFailedError(NetGaugeError):
    """Every latency probe failed, so no latency figure can be reported."""

    def __init__(self, attempts: int):
        super().__init__(f"All {attempts} latency probes failed")
        self.attempts = attempts


@dataclass(frozen=True)
class LatencyStats:
    avg_ms: float
    jitter_ms: float
    min_ms: float
    max_ms: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class MeasurementResult:
    download_mbps: float
    upload_mbps: float
    latency_ms: float
    jitter_ms: float
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "download_mbps": self.download_mbps,
            "upload_mbps": self.upload_mbps,
            "latency_ms": self.latency_ms,
            "jitter_ms": self.jitter_ms,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class QualityAssessment:
    tier: str
    download_mbps: float
    upload_mbps: float
    latency_ms: float
    recommendation: str

    @property
    def is_good(self) -> bool:
        return self.tier in GOOD_TIERS

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProviderInfo:
    name: Optional[str] = None
    country: Optional[str] = None
    isp: Optional[str] = None
    asn: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


@dataclass(frozen=True)
class QuickCheckResult:
    is_online: bool
    latency_ms: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NetworkStatus:
    is_good: bool
    quality: str
    speed: float
    provider: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
