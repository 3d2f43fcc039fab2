"""Heading hierarchy analyzer."""

from typing import Optional

from bs4 import BeautifulSoup

from seoscan.config import AnalysisThresholds, default_thresholds
from seoscan.models import FacetIssue, HeadingAnalysis, HeadingNode, IssueType, Severity


HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


class HeadingAnalyzer:
    """Walks h1-h6 in document order and checks the outline."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or default_thresholds

    def analyze(self, soup: BeautifulSoup, url: str = "") -> HeadingAnalysis:
        """Build the heading outline and its issues.

        The "last level seen" cursor runs across the whole document and is
        never reset, so H2 -> H4 anywhere on the page is a skipped level.
        H1 count checks run once, after the walk.
        """
        result = HeadingAnalysis()
        last_level = 0

        for order, element in enumerate(soup.find_all(HEADING_TAGS), start=1):
            tag = element.name.lower()
            level = int(tag[1])
            text = " ".join(element.get_text().split())

            result.structure.append(HeadingNode(level=level, text=text, order=order))
            result.texts_for_level(level).append(text)

            if not text:
                result.issues.append(FacetIssue(
                    type=IssueType.EMPTY_HEADING,
                    message=f"Empty {tag.upper()} heading found",
                    severity=Severity.WARNING,
                    subject=tag,
                ))

            if last_level > 0 and level > last_level + 1:
                result.issues.append(FacetIssue(
                    type=IssueType.SKIPPED_LEVEL,
                    message=f"Heading level skipped from H{last_level} to H{level}",
                    severity=Severity.WARNING,
                    subject=tag,
                ))

            if len(text) > self.thresholds.heading_max_length:
                result.issues.append(FacetIssue(
                    type=IssueType.TOO_LONG,
                    message=f"{tag.upper()} heading is too long ({len(text)} chars)",
                    severity=Severity.INFO,
                    subject=tag,
                ))

            last_level = level

        h1_count = len(result.h1)
        if h1_count == 0:
            result.issues.append(FacetIssue(
                type=IssueType.MISSING_H1,
                message="Page is missing an H1 heading",
                severity=Severity.CRITICAL,
                subject="h1",
            ))
        elif h1_count > 1:
            result.issues.append(FacetIssue(
                type=IssueType.MULTIPLE_H1,
                message=f"Page has {h1_count} H1 headings. Recommended: only one H1 per page",
                severity=Severity.WARNING,
                subject="h1",
            ))

        return result
