"""Issue-to-report mapping.

Turns facet findings and failing provider audit items into uniform Issue
records, orders them by impact and reshapes the top of the list into
recommendations.
"""

from typing import Optional

from seoscan.constants import MAX_RECOMMENDATIONS, QUICK_EFFORT_NUMERIC_LIMIT, SUBJECT_PREVIEW_LENGTH
from seoscan.models import (
    Effort,
    FacetIssue,
    HTMLAnalysisResult,
    Impact,
    Issue,
    IssueCategory,
    IssueType,
    LighthouseAudit,
    PerformanceResults,
    Recommendation,
    Severity,
)
from seoscan.utils import truncate


IMPACT_RANK = {
    Impact.CRITICAL: 0,
    Impact.HIGH: 1,
    Impact.MEDIUM: 2,
    Impact.LOW: 3,
}

# Display tier shown on a recommendation
IMPACT_DISPLAY = {
    Impact.CRITICAL: "High",
    Impact.HIGH: "Medium",
}

# facet name -> (id prefix, category, effort)
FACET_SOURCES = {
    "meta_tags": ("meta", IssueCategory.CONTENT, Effort.QUICK),
    "headings": ("heading", IssueCategory.CONTENT, Effort.QUICK),
    "images": ("img", IssueCategory.CONTENT, Effort.QUICK),
    "links": ("link", IssueCategory.TECHNICAL, Effort.QUICK),
    "schema": ("schema", IssueCategory.TECHNICAL, Effort.MEDIUM),
}

META_RECOMMENDATIONS = {
    "title": "Write a unique, descriptive title of 30-60 characters that leads with the page's main topic.",
    "description": "Write a compelling meta description of 70-160 characters that summarizes the page.",
    "canonical": "Add a canonical link element pointing to the preferred URL of this page.",
    "open_graph": "Add og:title, og:description and og:image tags so shared links render well.",
    "viewport": 'Add <meta name="viewport" content="width=device-width, initial-scale=1"> for mobile rendering.',
    "language": "Declare the page language with a lang attribute on the <html> element.",
}

RECOMMENDATIONS = {
    IssueType.MISSING_H1: "Add a single H1 heading that describes the page's main topic.",
    IssueType.MULTIPLE_H1: "Keep one H1 per page and demote the other H1 headings to H2.",
    IssueType.EMPTY_HEADING: "Fix heading structure for better SEO and accessibility.",
    IssueType.SKIPPED_LEVEL: "Fix heading structure for better SEO and accessibility.",
    IssueType.MISSING_ALT: "Add alt text to images for accessibility and SEO.",
    IssueType.MISSING_DIMENSIONS: "Set explicit width and height attributes on images to prevent layout shift.",
    IssueType.NOFOLLOW_INTERNAL: 'Remove rel="nofollow" from internal links so link equity flows through the site.',
    IssueType.EMPTY_LINK: "Give every link descriptive text or an image with alt text.",
    IssueType.GENERIC_ANCHOR: "Replace generic anchor text with words that describe the link target.",
    IssueType.TOO_MANY_LINKS: "Fix link issues for better user experience and crawlability.",
    IssueType.INVALID_JSON: "Fix the JSON syntax of the JSON-LD block so search engines can read it.",
    IssueType.MISSING_SCHEMA: "Add structured data to improve search result appearance.",
    IssueType.ANALYSIS_FAILED: "Re-run the audit; this part of the page could not be analyzed.",
}

HEADING_TOO_LONG_RECOMMENDATION = "Shorten long headings to keep them scannable."
DEFAULT_PAGESPEED_RECOMMENDATION = "Review and fix this issue to improve your score."


def pagespeed_impact(score: Optional[float]) -> Impact:
    if score == 0:
        return Impact.CRITICAL
    if score is not None and score < 0.5:
        return Impact.HIGH
    if score is not None and score < 0.9:
        return Impact.MEDIUM
    return Impact.LOW


def pagespeed_effort(numeric_value: Optional[float]) -> Effort:
    if numeric_value is not None and numeric_value > QUICK_EFFORT_NUMERIC_LIMIT:
        return Effort.MEDIUM
    return Effort.QUICK


def facet_impact(severity: Severity) -> Impact:
    if severity == Severity.CRITICAL:
        return Impact.CRITICAL
    if severity == Severity.WARNING:
        return Impact.HIGH
    return Impact.MEDIUM


def sort_issues(issues: list[Issue]) -> list[Issue]:
    """Stable sort by impact; equal impacts keep discovery order."""
    return sorted(issues, key=lambda issue: IMPACT_RANK[Impact(issue.impact)])


def to_recommendation(issue: Issue) -> Recommendation:
    category = IssueCategory(issue.category).value
    return Recommendation(
        priority=issue.impact,
        category=category.capitalize(),
        title=issue.title,
        description=issue.description,
        impact=f"{IMPACT_DISPLAY.get(Impact(issue.impact), 'Low')} - Affects user experience and SEO",
        effort=issue.effort,
    )


class IssueMapper:
    """Builds the report-facing issue list and recommendations for one audit."""

    def __init__(self, max_recommendations: int = MAX_RECOMMENDATIONS):
        self.max_recommendations = max_recommendations

    def map_pagespeed_issues(self, performance: PerformanceResults, website_url: str) -> list[Issue]:
        """Issues from the mobile run: failed items, then opportunities."""
        issues: list[Issue] = []
        mobile = performance.mobile.audits
        for item in [*mobile.failed, *mobile.opportunities]:
            if item.score == 1 or not item.title:
                continue
            issues.append(self._pagespeed_issue(item, len(issues), website_url))
        return issues

    def _pagespeed_issue(self, item: LighthouseAudit, index: int, website_url: str) -> Issue:
        return Issue(
            id=f"iss_performance_{index}",
            category=IssueCategory.PERFORMANCE,
            type=item.id or "general",
            title=item.title,
            description=item.description or "",
            impact=pagespeed_impact(item.score),
            effort=pagespeed_effort(item.numeric_value),
            recommendation=item.description or DEFAULT_PAGESPEED_RECOMMENDATION,
            example_urls=[website_url],
        )

    def map_facet_issues(self, html_analysis: HTMLAnalysisResult, website_url: str) -> list[Issue]:
        """Issues from every facet, in analyzer order."""
        issues: list[Issue] = []
        counters: dict[str, int] = {}

        for facet, facet_issue in html_analysis.facet_issues():
            prefix, category, effort = FACET_SOURCES[facet]
            index = counters.get(prefix, 0)
            counters[prefix] = index + 1
            issues.append(self._facet_issue(
                facet_issue, facet, f"iss_{prefix}_{index}", category, effort, website_url
            ))

        return issues

    def _facet_issue(
        self,
        facet_issue: FacetIssue,
        facet: str,
        issue_id: str,
        category: IssueCategory,
        effort: Effort,
        website_url: str,
    ) -> Issue:
        issue_type = IssueType(facet_issue.type)
        subject = facet_issue.subject
        description = facet_issue.message
        example_urls = [website_url]

        if facet == "meta_tags":
            type_name = f"{subject}_{issue_type.value}" if subject else issue_type.value
            recommendation = META_RECOMMENDATIONS.get(
                subject, f"Fix the {subject} issue to improve SEO."
            )
        else:
            type_name = issue_type.value
            if facet == "headings" and issue_type == IssueType.TOO_LONG:
                recommendation = HEADING_TOO_LONG_RECOMMENDATION
            else:
                recommendation = RECOMMENDATIONS.get(issue_type, DEFAULT_PAGESPEED_RECOMMENDATION)

        if facet == "images" and subject:
            description = f"Image: {truncate(subject, SUBJECT_PREVIEW_LENGTH)}"
            example_urls = [subject]
        elif facet == "links" and subject:
            description = f"Link: {truncate(subject, SUBJECT_PREVIEW_LENGTH)}"
            example_urls = [subject]

        return Issue(
            id=issue_id,
            category=category,
            type=type_name,
            title=facet_issue.message,
            description=description,
            impact=facet_impact(facet_issue.severity),
            effort=effort,
            recommendation=recommendation,
            example_urls=example_urls,
        )

    def build_issues(
        self,
        performance: PerformanceResults,
        html_analysis: Optional[HTMLAnalysisResult],
        website_url: str,
    ) -> list[Issue]:
        """All issues, provider first then facets, sorted by impact."""
        issues = self.map_pagespeed_issues(performance, website_url)
        if html_analysis is not None:
            issues.extend(self.map_facet_issues(html_analysis, website_url))
        return sort_issues(issues)

    def build_recommendations(self, sorted_issues: list[Issue]) -> list[Recommendation]:
        return [to_recommendation(issue) for issue in sorted_issues[:self.max_recommendations]]
