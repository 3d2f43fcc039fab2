"""Tests for report assembly and text rendering."""

import json
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from seoscan.exceptions import ReportNotReadyError, SeoScanError
from seoscan.html_analyzer import HTMLAnalyzer
from seoscan.issue_mapper import IssueMapper
from seoscan.models import (
    Audit,
    AuditScores,
    AuditStatus,
    AuditTier,
    IssuesCount,
    to_dict,
)
from seoscan.report import build_report, render_text

URL = "https://example.com/"
COMPLETED_AT = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def completed_audit(missing_meta_page, make_performance):
    html = HTMLAnalyzer(crawler=Mock()).analyze_html(missing_meta_page, URL)
    performance = make_performance()
    mapper = IssueMapper()
    issues = mapper.build_issues(performance, html, URL)
    return Audit(
        id="aud_1714566600000_abc1234",
        website_url=URL,
        display_name="example.com",
        tier=AuditTier.PROFESSIONAL,
        status=AuditStatus.COMPLETED,
        completed_at=COMPLETED_AT,
        pages_scanned=1,
        scores=AuditScores(overall=79, technical=80, performance=90, content=60, mobile=90, security=85),
        issues_count=IssuesCount(critical=5, warnings=0, opportunities=0),
        pagespeed_results=performance,
        html_analysis=html,
        issues=issues,
        recommendations=mapper.build_recommendations(issues),
    )


class TestBuildReport:
    """Test cases for build_report."""

    def test_identity_and_summary(self, completed_audit):
        report = build_report(completed_audit)

        assert report.id == "rep_aud_1714566600000_abc1234"
        assert report.audit_id == completed_audit.id
        assert report.tier == AuditTier.PROFESSIONAL
        assert report.generated_at == COMPLETED_AT
        assert report.scores == completed_audit.scores

        assert report.summary.pages_scanned == 1
        assert report.summary.issues_found == 5
        assert report.summary.critical_issues == 5
        assert report.summary.average_load_time == 2.35
        assert report.summary.mobile_score == 90

    def test_technical_section(self, completed_audit):
        technical = build_report(completed_audit).technical

        assert technical.crawlability_score == 83  # (80 + 85) / 2
        assert technical.indexability_score == 80
        assert technical.noindex_pages == 0
        assert technical.canonical_issues == 0
        assert technical.http_status == 200
        assert technical.has_schema is True
        assert technical.schema_types == ["Organization"]
        assert technical.schema_errors == 0

    def test_content_section(self, completed_audit):
        content = build_report(completed_audit).content

        assert content.missing_title == 1
        assert content.missing_description == 1
        assert content.title_too_long == 0
        assert content.missing_h1 == 0
        assert content.images_total == 3
        assert content.images_missing_alt == 3

    def test_performance_section(self, completed_audit):
        performance = build_report(completed_audit).performance

        assert performance.mobile_score == 90
        assert performance.desktop_score == 90
        assert performance.core_web_vitals.lcp.value == 2.35
        assert performance.metrics.total_blocking_time == 211

    def test_without_html_analysis(self, completed_audit):
        completed_audit.html_analysis = None

        report = build_report(completed_audit)

        assert report.technical.http_status is None
        assert report.technical.has_schema is False
        assert report.content.missing_title == 0
        assert report.content.images_total == 0

    @pytest.mark.parametrize("status", [AuditStatus.PENDING, AuditStatus.PROCESSING, AuditStatus.FAILED])
    def test_not_completed(self, completed_audit, status):
        completed_audit.status = status

        with pytest.raises(ReportNotReadyError) as exc_info:
            build_report(completed_audit)

        assert exc_info.value.status == status.value

    def test_completed_without_provider_data(self, completed_audit):
        completed_audit.pagespeed_results = None

        with pytest.raises(SeoScanError, match="Report data not available"):
            build_report(completed_audit)

    def test_report_serializes_to_json(self, completed_audit):
        data = to_dict(build_report(completed_audit))

        assert data["tier"] == "professional"
        assert data["generated_at"].startswith("2024-05-01T12:30:00")
        assert data["issues"][0]["impact"] == "critical"
        json.dumps(data)


class TestRenderText:

    def test_render_text(self, completed_audit):
        text = render_text(build_report(completed_audit))

        assert text.startswith("SEO Audit Report: example.com (https://example.com/)")
        assert "tier professional | generated 2024-05-01 12:30 UTC" in text
        assert "Overall:     79" in text
        assert "Issues: 5 found (5 critical, 0 warnings, 0 opportunities)" in text
        assert "LCP:  2.35s (good)" in text
        assert "TTFB: 950ms (needs-improvement)" in text
        assert "Top Recommendations" in text
        assert "1. [Content]" in text
