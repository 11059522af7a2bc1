from datetime import datetime, timezone

import pytest

from netgauge.measurements.models import QUALITY_TIERS, MeasurementResult
from netgauge.measurements.quality import FALLBACK_RECOMMENDATION, TIER_RULES, classify_quality


def make_result(download, upload, latency):
    return MeasurementResult(
        download_mbps=download,
        upload_mbps=upload,
        latency_ms=latency,
        jitter_ms=0.0,
        timestamp=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


@pytest.mark.parametrize(
    "download, upload, latency, tier",
    [
        (50, 10, 30, "excellent"),
        (300, 100, 5, "excellent"),
        (49.9, 10, 30, "good"),
        (50, 10, 30.1, "good"),
        (25, 5, 50, "good"),
        (100, 4.9, 10, "fair"),
        (10, 2, 100, "fair"),
        (100, 50, 100.5, "poor"),
        (5, 1, 5000, "poor"),
        (4.99, 100, 1, "very-poor"),
        (100, 0.5, 1, "very-poor"),
        (0, 0, 0, "very-poor"),
    ],
)
def test_tier_thresholds(download, upload, latency, tier):
    assert classify_quality(make_result(download, upload, latency)).tier == tier


def test_assessment_carries_measurements_and_recommendation():
    assessment = classify_quality(make_result(60.5, 12.25, 18.0))

    assert assessment.download_mbps == 60.5
    assert assessment.upload_mbps == 12.25
    assert assessment.latency_ms == 18.0
    assert assessment.recommendation == TIER_RULES[0].recommendation
    assert assessment.is_good


def test_very_poor_uses_fallback_recommendation():
    assessment = classify_quality(make_result(1, 1, 1))

    assert assessment.recommendation == FALLBACK_RECOMMENDATION
    assert not assessment.is_good


def test_every_tier_has_its_own_recommendation():
    recommendations = [rule.recommendation for rule in TIER_RULES] + [FALLBACK_RECOMMENDATION]
    assert len(set(recommendations)) == len(QUALITY_TIERS)
    assert [rule.tier for rule in TIER_RULES] + ["very-poor"] == list(QUALITY_TIERS)


def test_classification_is_total_over_a_grid():
    for download in (0, 1, 5, 9.99, 10, 25, 49.99, 50, 1000):
        for upload in (0, 0.99, 1, 2, 5, 10, 500):
            for latency in (0, 30, 50, 100, 200, 10_000):
                assert classify_quality(make_result(download, upload, latency)).tier in QUALITY_TIERS
