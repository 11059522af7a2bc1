"""Connection quality classification."""

from __future__ import annotations

from typing import NamedTuple, Optional

from .models import MeasurementResult, QualityAssessment


class TierRule(NamedTuple):
    tier: str
    min_download: float
    min_upload: float
    max_latency: Optional[float]
    recommendation: str

    def matches(self, result: MeasurementResult) -> bool:
        if result.download_mbps < self.min_download or result.upload_mbps < self.min_upload:
            return False
        return self.max_latency is None or result.latency_ms <= self.max_latency


# Checked in order, strictest first. Latency is not considered for "poor".
TIER_RULES = (
    TierRule("excellent", 50, 10, 30, "Perfect for 4K streaming, gaming, and large file transfers."),
    TierRule("good", 25, 5, 50, "Suitable for HD streaming, video calls, and online gaming."),
    TierRule(
        "fair",
        10,
        2,
        100,
        "Good for browsing and SD streaming. May experience delays in video calls.",
    ),
    TierRule("poor", 5, 1, None, "Basic browsing only. Video streaming and calls will be problematic."),
)
FALLBACK_TIER = "very-poor"
FALLBACK_RECOMMENDATION = "Very slow connection. Consider switching networks or contacting your ISP."


def classify_quality(result: MeasurementResult) -> QualityAssessment:
    rule = next((rule for rule in TIER_RULES if rule.matches(result)), None)
    tier = rule.tier if rule else FALLBACK_TIER
    recommendation = rule.recommendation if rule else FALLBACK_RECOMMENDATION
    return QualityAssessment(
        tier=tier,
        download_mbps=result.download_mbps,
        upload_mbps=result.upload_mbps,
        latency_ms=result.latency_ms,
        recommendation=recommendation,
    )
