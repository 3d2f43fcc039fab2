"""Shared fixtures: provider payloads, normalized provider results and sample pages."""

import copy

import pytest

from seoscan.core_web_vitals import build_core_web_vitals
from seoscan.models import (
    AuditBuckets,
    CategoryScores,
    PageSpeedResult,
    PerformanceResults,
    ResourceSizes,
    TimingMetrics,
)


# A page that triggers no facet issue at all
CLEAN_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>Acme Widgets - Durable Widgets for Every Workshop</title>
    <meta name="description" content="Acme builds durable steel widgets for workshops, factories and hobbyists. Free shipping on every order.">
    <meta name="robots" content="index, follow">
    <link rel="canonical" href="https://example.com/">
    <meta property="og:title" content="Acme Widgets">
    <meta property="og:description" content="Durable widgets for every workshop.">
    <meta property="og:image" content="https://example.com/og.png">
    <meta name="twitter:card" content="summary_large_image">
    <script type="application/ld+json">
    {"@context": "https://schema.org", "@type": "Organization", "name": "Acme"}
    </script>
</head>
<body>
    <h1>Durable Widgets</h1>
    <h2>Steel widgets</h2>
    <h3>Sizes</h3>
    <h2>Aluminium widgets</h2>
    <img src="/images/widget.png" alt="A steel widget" width="400" height="300">
    <p>Our widgets are built to last.</p>
    <a href="/about">About Acme</a>
    <a href="https://partner.example.org/">Our partner</a>
</body>
</html>
"""


# No title, no description, one H1, three images without alt, valid Organization JSON-LD
MISSING_META_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <link rel="canonical" href="https://example.com/">
    <meta property="og:title" content="Example">
    <meta property="og:description" content="Example site">
    <meta property="og:image" content="https://example.com/og.png">
    <script type="application/ld+json">
    {"@context": "https://schema.org", "@type": "Organization", "name": "Example"}
    </script>
</head>
<body>
    <h1>Welcome</h1>
    <img src="/one.png" width="10" height="10">
    <img src="/two.png" width="10" height="10">
    <img src="/three.png" width="10" height="10">
</body>
</html>
"""


def _metric_audit(audit_id, title, numeric_value, unit="millisecond"):
    return {
        "id": audit_id,
        "title": title,
        "description": f"{title} metric.",
        "score": 1,
        "scoreDisplayMode": "numeric",
        "numericValue": numeric_value,
        "numericUnit": unit,
    }


def _psi_payload(
    url="https://example.com/",
    performance=0.9,
    accessibility=0.95,
    best_practices=0.85,
    seo=0.8,
    extra_audits=None,
):
    audits = {
        "largest-contentful-paint": _metric_audit("largest-contentful-paint", "Largest Contentful Paint", 2345.6),
        "first-contentful-paint": _metric_audit("first-contentful-paint", "First Contentful Paint", 1234),
        "cumulative-layout-shift": _metric_audit("cumulative-layout-shift", "Cumulative Layout Shift", 0.0512, "unitless"),
        "max-potential-fid": _metric_audit("max-potential-fid", "Max Potential First Input Delay", 120),
        "server-response-time": _metric_audit("server-response-time", "Initial server response time was short", 950.4),
        "total-blocking-time": _metric_audit("total-blocking-time", "Total Blocking Time", 210.6),
        "speed-index": _metric_audit("speed-index", "Speed Index", 3456),
        "interactive": _metric_audit("interactive", "Time to Interactive", 5000),
        "total-byte-weight": _metric_audit("total-byte-weight", "Avoids enormous network payloads", 2621440, "byte"),
        "resource-summary": {
            "id": "resource-summary",
            "title": "Keep request counts low and transfer sizes small",
            "score": None,
            "scoreDisplayMode": "informative",
            "details": {
                "type": "table",
                "items": [
                    {"resourceType": "total", "requestCount": 40, "transferSize": 2621440},
                    {"resourceType": "document", "requestCount": 1, "transferSize": 52428},
                    {"resourceType": "script", "requestCount": 12, "transferSize": 1048576},
                    {"resourceType": "stylesheet", "requestCount": 4, "transferSize": 209715},
                    {"resourceType": "image", "requestCount": 20, "transferSize": 524288},
                    {"resourceType": "font", "requestCount": 3, "transferSize": 100000},
                ],
            },
        },
        "third-party-summary": {
            "id": "third-party-summary",
            "title": "Minimize third-party usage",
            "score": None,
            "scoreDisplayMode": "informative",
            "details": {"type": "table", "items": [], "summary": {"wastedBytes": 314573}},
        },
    }
    if extra_audits:
        audits.update(copy.deepcopy(extra_audits))

    return {
        "id": url,
        "lighthouseResult": {
            "requestedUrl": url,
            "finalUrl": url,
            "fetchTime": "2024-05-01T12:00:00.000Z",
            "categories": {
                "performance": {"id": "performance", "score": performance},
                "accessibility": {"id": "accessibility", "score": accessibility},
                "best-practices": {"id": "best-practices", "score": best_practices},
                "seo": {"id": "seo", "score": seo},
            },
            "audits": audits,
        },
    }


def _pagespeed_result(
    strategy="mobile",
    performance=90,
    accessibility=95,
    best_practices=85,
    seo=80,
    failed=None,
    opportunities=None,
    diagnostics=None,
):
    return PageSpeedResult(
        url="https://example.com/",
        strategy=strategy,
        fetch_time="2024-05-01T12:00:00.000Z",
        scores=CategoryScores(
            performance=performance,
            accessibility=accessibility,
            best_practices=best_practices,
            seo=seo,
        ),
        core_web_vitals=build_core_web_vitals(
            lcp_ms=2345.6, fid_ms=120, cls=0.0512, fcp_ms=1234, ttfb_ms=950.4
        ),
        metrics=TimingMetrics(
            first_contentful_paint=1.23,
            largest_contentful_paint=2.35,
            total_blocking_time=211,
            cumulative_layout_shift=0.051,
            speed_index=3.46,
            time_to_interactive=5.0,
        ),
        resources=ResourceSizes(total_size=2.5),
        audits=AuditBuckets(
            failed=list(failed or []),
            opportunities=list(opportunities or []),
            diagnostics=list(diagnostics or []),
        ),
    )


@pytest.fixture
def psi_payload():
    """Factory for raw PageSpeed Insights responses."""
    return _psi_payload


@pytest.fixture
def make_pagespeed_result():
    """Factory for normalized single-device results."""
    return _pagespeed_result


@pytest.fixture
def make_performance():
    """Factory for mobile + desktop results; score kwargs apply to both devices."""
    def factory(mobile=None, desktop=None, **scores):
        return PerformanceResults(
            mobile=mobile or _pagespeed_result("mobile", **scores),
            desktop=desktop or _pagespeed_result("desktop", **scores),
        )
    return factory


@pytest.fixture
def clean_page():
    return CLEAN_PAGE


@pytest.fixture
def missing_meta_page():
    return MISSING_META_PAGE
