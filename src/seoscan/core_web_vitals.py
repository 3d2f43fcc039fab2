"""
Core Web Vitals rating

Rates lab measurements from the page-speed provider against Google's
published thresholds:
- LCP (Largest Contentful Paint): loading
- FID (First Input Delay, lab proxy max-potential-fid): interactivity
- CLS (Cumulative Layout Shift): visual stability
- FCP (First Contentful Paint) and TTFB (server response time)

A value at or below the "good" threshold is good, at or below the "poor"
threshold needs improvement, anything above is poor.
"""

from dataclasses import dataclass

from seoscan.constants import (
    CLS_GOOD_THRESHOLD,
    CLS_POOR_THRESHOLD,
    FCP_GOOD_MS,
    FCP_POOR_MS,
    FID_GOOD_MS,
    FID_POOR_MS,
    LCP_GOOD_MS,
    LCP_POOR_MS,
    TTFB_GOOD_MS,
    TTFB_POOR_MS,
)
from seoscan.models import CoreWebVitals, MetricRating, Rating
from seoscan.utils import ms_to_seconds, round_half_up, round_to


@dataclass(frozen=True)
class MetricThresholds:
    good: float
    poor: float


LCP_THRESHOLDS = MetricThresholds(good=LCP_GOOD_MS, poor=LCP_POOR_MS)
FID_THRESHOLDS = MetricThresholds(good=FID_GOOD_MS, poor=FID_POOR_MS)
CLS_THRESHOLDS = MetricThresholds(good=CLS_GOOD_THRESHOLD, poor=CLS_POOR_THRESHOLD)
FCP_THRESHOLDS = MetricThresholds(good=FCP_GOOD_MS, poor=FCP_POOR_MS)
TTFB_THRESHOLDS = MetricThresholds(good=TTFB_GOOD_MS, poor=TTFB_POOR_MS)


def get_rating(value: float, thresholds: MetricThresholds) -> Rating:
    if value <= thresholds.good:
        return Rating.GOOD
    if value <= thresholds.poor:
        return Rating.NEEDS_IMPROVEMENT
    return Rating.POOR


def build_core_web_vitals(
    lcp_ms: float,
    fid_ms: float,
    cls: float,
    fcp_ms: float,
    ttfb_ms: float,
) -> CoreWebVitals:
    """Rate raw measurements and convert them to display units.

    Ratings use the raw values; LCP/FCP are then reported in seconds,
    FID/TTFB in whole milliseconds and CLS to three decimals.
    """
    return CoreWebVitals(
        lcp=MetricRating(value=ms_to_seconds(lcp_ms), rating=get_rating(lcp_ms, LCP_THRESHOLDS)),
        fid=MetricRating(value=round_half_up(fid_ms), rating=get_rating(fid_ms, FID_THRESHOLDS)),
        cls=MetricRating(value=round_to(cls, 3), rating=get_rating(cls, CLS_THRESHOLDS)),
        fcp=MetricRating(value=ms_to_seconds(fcp_ms), rating=get_rating(fcp_ms, FCP_THRESHOLDS)),
        ttfb=MetricRating(value=round_half_up(ttfb_ms), rating=get_rating(ttfb_ms, TTFB_THRESHOLDS)),
    )
