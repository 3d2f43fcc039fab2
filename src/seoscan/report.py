"""Report assembly for completed audits."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from seoscan.config import AnalysisThresholds, default_thresholds
from seoscan.exceptions import ReportNotReadyError, SeoScanError
from seoscan.models import (
    Audit,
    AuditScores,
    AuditStatus,
    AuditTier,
    CoreWebVitals,
    HTMLAnalysisResult,
    Issue,
    IssueType,
    Recommendation,
    ResourceSizes,
    TimingMetrics,
    utcnow,
)
from seoscan.utils import round_half_up


@dataclass
class ReportSummary:
    pages_scanned: int
    issues_found: int
    critical_issues: int
    warning_issues: int
    opportunities: int
    average_load_time: float  # mobile LCP, seconds
    mobile_score: int


@dataclass
class TechnicalData:
    crawlability_score: int
    indexability_score: int
    noindex_pages: int = 0
    canonical_issues: int = 0
    http_status: Optional[int] = None
    has_schema: bool = False
    schema_types: list[str] = field(default_factory=list)
    schema_errors: int = 0


@dataclass
class PerformanceData:
    core_web_vitals: CoreWebVitals
    mobile_score: int
    desktop_score: int
    resources: ResourceSizes
    metrics: TimingMetrics


@dataclass
class ContentData:
    missing_title: int = 0
    missing_description: int = 0
    title_too_long: int = 0
    title_too_short: int = 0
    description_too_long: int = 0
    description_too_short: int = 0
    missing_h1: int = 0
    multiple_h1: int = 0
    skipped_levels: int = 0
    empty_headings: int = 0
    images_total: int = 0
    images_missing_alt: int = 0
    images_decorative: int = 0
    internal_links: int = 0
    external_links: int = 0
    nofollow_links: int = 0


@dataclass
class AuditReport:
    id: str
    audit_id: str
    website_url: str
    display_name: str
    tier: AuditTier
    generated_at: datetime
    scores: AuditScores
    summary: ReportSummary
    technical: TechnicalData
    performance: PerformanceData
    content: ContentData
    issues: list[Issue] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)
    html_analysis: Optional[HTMLAnalysisResult] = None


def _technical_data(audit: Audit, html: Optional[HTMLAnalysisResult]) -> TechnicalData:
    technical = TechnicalData(
        crawlability_score=round_half_up((audit.scores.technical + audit.scores.security) / 2),
        indexability_score=audit.scores.technical,
    )
    if html is None:
        return technical

    robots = (html.meta_tags.robots or "").lower()
    technical.noindex_pages = 1 if "noindex" in robots else 0
    technical.canonical_issues = 0 if html.meta_tags.canonical else 1
    technical.http_status = html.status_code
    technical.has_schema = html.schema.has_schema
    technical.schema_types = html.schema.schema_types
    technical.schema_errors = sum(
        1 for issue in html.schema.issues if issue.type == IssueType.INVALID_JSON
    )
    return technical


def _content_data(html: Optional[HTMLAnalysisResult], thresholds: AnalysisThresholds) -> ContentData:
    if html is None:
        return ContentData()

    meta = html.meta_tags
    heading_issue_types = [issue.type for issue in html.headings.issues]
    return ContentData(
        missing_title=0 if meta.title else 1,
        missing_description=0 if meta.description else 1,
        title_too_long=1 if meta.title_length > thresholds.title_max else 0,
        title_too_short=1 if 0 < meta.title_length < thresholds.title_min else 0,
        description_too_long=1 if meta.description_length > thresholds.meta_description_max else 0,
        description_too_short=(
            1 if 0 < meta.description_length < thresholds.meta_description_min else 0
        ),
        missing_h1=1 if len(html.headings.h1) == 0 else 0,
        multiple_h1=1 if len(html.headings.h1) > 1 else 0,
        skipped_levels=heading_issue_types.count(IssueType.SKIPPED_LEVEL),
        empty_headings=heading_issue_types.count(IssueType.EMPTY_HEADING),
        images_total=html.images.total,
        images_missing_alt=html.images.without_alt,
        images_decorative=html.images.decorative,
        internal_links=html.links.internal_count,
        external_links=html.links.external_count,
        nofollow_links=len(html.links.nofollow),
    )


def build_report(audit: Audit, thresholds: Optional[AnalysisThresholds] = None) -> AuditReport:
    """Assemble the report view of a completed audit.

    Raises:
        ReportNotReadyError: If the audit has not completed
        SeoScanError: If a completed audit carries no performance results
    """
    if audit.status != AuditStatus.COMPLETED:
        raise ReportNotReadyError(audit.id, AuditStatus(audit.status).value)
    if audit.pagespeed_results is None:
        raise SeoScanError(f"Report data not available for audit {audit.id}")

    thresholds = thresholds or default_thresholds
    mobile = audit.pagespeed_results.mobile
    desktop = audit.pagespeed_results.desktop
    html = audit.html_analysis

    return AuditReport(
        id=f"rep_{audit.id}",
        audit_id=audit.id,
        website_url=audit.website_url,
        display_name=audit.display_name,
        tier=audit.tier,
        generated_at=audit.completed_at or utcnow(),
        scores=audit.scores,
        summary=ReportSummary(
            pages_scanned=audit.pages_scanned or 1,
            issues_found=len(audit.issues),
            critical_issues=audit.issues_count.critical,
            warning_issues=audit.issues_count.warnings,
            opportunities=audit.issues_count.opportunities,
            average_load_time=mobile.metrics.largest_contentful_paint,
            mobile_score=mobile.scores.performance,
        ),
        technical=_technical_data(audit, html),
        performance=PerformanceData(
            core_web_vitals=mobile.core_web_vitals,
            mobile_score=mobile.scores.performance,
            desktop_score=desktop.scores.performance,
            resources=mobile.resources,
            metrics=mobile.metrics,
        ),
        content=_content_data(html, thresholds),
        issues=audit.issues,
        recommendations=audit.recommendations,
        html_analysis=html,
    )


def render_text(report: AuditReport) -> str:
    """Plain-text rendering for terminal output."""
    s = report.scores
    lines = [
        f"SEO Audit Report: {report.display_name} ({report.website_url})",
        f"Report {report.id} | tier {AuditTier(report.tier).value} | generated {report.generated_at:%Y-%m-%d %H:%M} UTC",
        "",
        "Scores",
        f"  Overall:     {s.overall}",
        f"  Technical:   {s.technical}",
        f"  Performance: {s.performance}",
        f"  Content:     {s.content}",
        f"  Mobile:      {s.mobile}",
        f"  Security:    {s.security}",
        "",
        (
            f"Issues: {report.summary.issues_found} found "
            f"({report.summary.critical_issues} critical, "
            f"{report.summary.warning_issues} warnings, "
            f"{report.summary.opportunities} opportunities)"
        ),
    ]

    cwv = report.performance.core_web_vitals
    lines += [
        "",
        "Core Web Vitals (mobile)",
        f"  LCP:  {cwv.lcp.value}s ({cwv.lcp.rating.value})",
        f"  FID:  {cwv.fid.value}ms ({cwv.fid.rating.value})",
        f"  CLS:  {cwv.cls.value} ({cwv.cls.rating.value})",
        f"  FCP:  {cwv.fcp.value}s ({cwv.fcp.rating.value})",
        f"  TTFB: {cwv.ttfb.value}ms ({cwv.ttfb.rating.value})",
    ]

    if report.recommendations:
        lines += ["", "Top Recommendations"]
        for i, rec in enumerate(report.recommendations, 1):
            lines.append(f"  {i}. [{rec.category}] {rec.title} ({rec.impact}; effort: {rec.effort.value})")

    return "\n".join(lines)
