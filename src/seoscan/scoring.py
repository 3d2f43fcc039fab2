"""Score aggregation: six top-level scores and issue counts per audit."""

import logging
from typing import Optional

from seoscan.config import ContentPenalties, ScoringWeights, default_penalties, default_weights
from seoscan.models import (
    AuditScores,
    CategoryScores,
    HTMLAnalysisResult,
    IssuesCount,
    IssueType,
    PerformanceResults,
    Severity,
)
from seoscan.utils import round_half_up

logger = logging.getLogger(__name__)


class ScoreAggregator:
    """Combines provider category scores and facet findings into AuditScores.

    Provider categories are weighted per device class (mobile 0.6, desktop
    0.4 by default). The content score starts at 100 and loses fixed points
    per facet finding; the overall score is the weighted average of
    performance, SEO, content and best practices.
    """

    def __init__(
        self,
        weights: Optional[ScoringWeights] = None,
        penalties: Optional[ContentPenalties] = None,
    ):
        self.weights = weights or default_weights
        self.penalties = penalties or default_penalties

    def weighted(self, mobile_score: float, desktop_score: float) -> int:
        """Device-weighted combination of one category score."""
        return round_half_up(
            mobile_score * self.weights.mobile + desktop_score * self.weights.desktop
        )

    def category_scores(self, performance: PerformanceResults) -> CategoryScores:
        mobile = performance.mobile.scores
        desktop = performance.desktop.scores
        return CategoryScores(
            performance=self.weighted(mobile.performance, desktop.performance),
            accessibility=self.weighted(mobile.accessibility, desktop.accessibility),
            best_practices=self.weighted(mobile.best_practices, desktop.best_practices),
            seo=self.weighted(mobile.seo, desktop.seo),
        )

    def overall_score(self, performance: int, seo: int, content: int, best_practices: int) -> int:
        w = self.weights
        return round_half_up(
            performance * w.overall_performance
            + seo * w.overall_seo
            + content * w.overall_content
            + best_practices * w.overall_best_practices
        )

    def content_score(self, html_analysis: HTMLAnalysisResult) -> int:
        """Start at 100, subtract penalties for facet findings, clamp to [0, 100]."""
        p = self.penalties
        score = 100

        for issue in html_analysis.meta_tags.issues:
            if issue.type == IssueType.MISSING:
                score -= {
                    "title": p.title_missing,
                    "description": p.description_missing,
                    "canonical": p.canonical_missing,
                    "viewport": p.viewport_missing,
                    "language": p.language_missing,
                    "open_graph": p.open_graph_missing,
                }.get(issue.subject, 0)
            elif issue.type in (IssueType.TOO_SHORT, IssueType.TOO_LONG):
                if issue.subject == "title":
                    score -= p.title_out_of_range
                elif issue.subject == "description":
                    score -= p.description_out_of_range

        for issue in html_analysis.headings.issues:
            if issue.type == IssueType.MISSING_H1:
                score -= p.h1_missing
            elif issue.type == IssueType.MULTIPLE_H1:
                score -= p.h1_multiple
            elif issue.severity == Severity.CRITICAL:
                score -= p.heading_critical
            elif issue.severity == Severity.WARNING:
                score -= p.heading_warning

        images = html_analysis.images
        if images.total > 0:
            coverage = images.alt_coverage
            if coverage < p.alt_coverage_poor_below:
                score -= p.alt_coverage_poor
            elif coverage < p.alt_coverage_fair_below:
                score -= p.alt_coverage_fair

        return max(0, min(100, score))

    def aggregate(
        self,
        performance: PerformanceResults,
        html_analysis: Optional[HTMLAnalysisResult] = None,
    ) -> AuditScores:
        """Compute the six audit scores.

        Without HTML analysis the content score falls back to the mean of
        the weighted SEO and accessibility scores.
        """
        categories = self.category_scores(performance)

        if html_analysis is not None:
            content = self.content_score(html_analysis)
        else:
            logger.info("No HTML analysis available; deriving content score from SEO and accessibility")
            content = round_half_up((categories.seo + categories.accessibility) / 2)

        return AuditScores(
            overall=self.overall_score(
                categories.performance, categories.seo, content, categories.best_practices
            ),
            technical=categories.seo,
            performance=categories.performance,
            content=content,
            mobile=performance.mobile.scores.performance,
            security=categories.best_practices,
        )

    def count_issues(
        self,
        performance: PerformanceResults,
        html_analysis: Optional[HTMLAnalysisResult] = None,
    ) -> IssuesCount:
        """Count critical, warning and opportunity findings.

        Provider items from both device classes are counted, and facet info
        issues add to opportunities without de-duplication against the
        provider's own opportunity items.
        """
        counts = IssuesCount()

        for result in (performance.mobile, performance.desktop):
            for item in result.audits.failed:
                if item.score == 0:
                    counts.critical += 1
                elif item.score is not None and 0 < item.score < 0.5:
                    counts.warnings += 1
            counts.opportunities += len(result.audits.opportunities)

        if html_analysis is not None:
            for _, issue in html_analysis.facet_issues():
                if issue.severity == Severity.CRITICAL:
                    counts.critical += 1
                elif issue.severity == Severity.WARNING:
                    counts.warnings += 1
                else:
                    counts.opportunities += 1

        return counts
