"""Meta tag analyzer: title, description, canonical, social and mobile tags."""

import re
from typing import Optional

from bs4 import BeautifulSoup

from seoscan.config import AnalysisThresholds, default_thresholds
from seoscan.models import FacetIssue, IssueType, MetaTagsAnalysis, Severity


CHARSET_PATTERN = re.compile(r"charset=([^;]+)", re.IGNORECASE)


def _attr(tag, name: str) -> Optional[str]:
    """Stripped attribute value, with empty values treated as absent."""
    if tag is None:
        return None
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    if value is None:
        return None
    return value.strip() or None


class MetaTagAnalyzer:
    """Extracts head meta tags and flags missing or badly sized ones.

    Rules run in a fixed order (title, description, canonical, Open Graph,
    viewport, language) and are independent of one another. Length ranges
    are inclusive on both ends.
    """

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or default_thresholds

    def analyze(self, soup: BeautifulSoup, url: str = "") -> MetaTagsAnalysis:
        """Analyze meta tags of a parsed page.

        Args:
            soup: BeautifulSoup parsed HTML
            url: Page URL (unused; kept for a uniform facet signature)

        Returns:
            MetaTagsAnalysis with extracted values and issues
        """
        issues: list[FacetIssue] = []

        title = None
        title_tag = soup.find("title")
        if title_tag is not None:
            title = title_tag.get_text().strip() or None
        title_length = len(title) if title else 0
        issues.extend(self._check_title(title, title_length))

        description = _attr(soup.find("meta", attrs={"name": "description"}), "content")
        description_length = len(description) if description else 0
        issues.extend(self._check_description(description, description_length))

        robots = _attr(soup.find("meta", attrs={"name": "robots"}), "content")

        canonical = _attr(soup.find("link", rel="canonical"), "href")
        if not canonical:
            issues.append(FacetIssue(
                type=IssueType.MISSING,
                message="Page is missing a canonical URL",
                severity=Severity.WARNING,
                subject="canonical",
            ))

        og_title = _attr(soup.find("meta", attrs={"property": "og:title"}), "content")
        og_description = _attr(soup.find("meta", attrs={"property": "og:description"}), "content")
        og_image = _attr(soup.find("meta", attrs={"property": "og:image"}), "content")

        # One combined issue for the whole trio
        if not (og_title and og_description and og_image):
            issues.append(FacetIssue(
                type=IssueType.MISSING,
                message="Missing Open Graph tags (og:title, og:description, or og:image)",
                severity=Severity.INFO,
                subject="open_graph",
            ))

        twitter_card = _attr(soup.find("meta", attrs={"name": "twitter:card"}), "content")

        viewport = _attr(soup.find("meta", attrs={"name": "viewport"}), "content")
        if not viewport:
            issues.append(FacetIssue(
                type=IssueType.MISSING,
                message="Page is missing viewport meta tag (important for mobile)",
                severity=Severity.CRITICAL,
                subject="viewport",
            ))

        charset = self._extract_charset(soup)

        language = _attr(soup.find("html"), "lang")
        if not language:
            issues.append(FacetIssue(
                type=IssueType.MISSING,
                message="HTML element is missing lang attribute",
                severity=Severity.WARNING,
                subject="language",
            ))

        return MetaTagsAnalysis(
            title=title,
            title_length=title_length,
            description=description,
            description_length=description_length,
            robots=robots,
            canonical=canonical,
            og_title=og_title,
            og_description=og_description,
            og_image=og_image,
            twitter_card=twitter_card,
            viewport=viewport,
            charset=charset,
            language=language,
            issues=issues,
        )

    def _check_title(self, title: Optional[str], length: int) -> list[FacetIssue]:
        t = self.thresholds
        if not title:
            return [FacetIssue(
                type=IssueType.MISSING,
                message="Page is missing a title tag",
                severity=Severity.CRITICAL,
                subject="title",
            )]
        if length < t.title_min:
            return [FacetIssue(
                type=IssueType.TOO_SHORT,
                message=(
                    f"Title is too short ({length} chars). "
                    f"Recommended: {t.title_min}-{t.title_max} characters"
                ),
                severity=Severity.WARNING,
                subject="title",
            )]
        if length > t.title_max:
            return [FacetIssue(
                type=IssueType.TOO_LONG,
                message=f"Title is too long ({length} chars). May be truncated in search results",
                severity=Severity.WARNING,
                subject="title",
            )]
        return []

    def _check_description(self, description: Optional[str], length: int) -> list[FacetIssue]:
        t = self.thresholds
        if not description:
            return [FacetIssue(
                type=IssueType.MISSING,
                message="Page is missing a meta description",
                severity=Severity.CRITICAL,
                subject="description",
            )]
        if length < t.meta_description_min:
            return [FacetIssue(
                type=IssueType.TOO_SHORT,
                message=(
                    f"Meta description is too short ({length} chars). "
                    f"Recommended: {t.meta_description_min}-{t.meta_description_max} characters"
                ),
                severity=Severity.WARNING,
                subject="description",
            )]
        if length > t.meta_description_max:
            return [FacetIssue(
                type=IssueType.TOO_LONG,
                message=(
                    f"Meta description is too long ({length} chars). "
                    "May be truncated in search results"
                ),
                severity=Severity.WARNING,
                subject="description",
            )]
        return []

    @staticmethod
    def _extract_charset(soup: BeautifulSoup) -> Optional[str]:
        charset = _attr(soup.find("meta", attrs={"charset": True}), "charset")
        if charset:
            return charset

        content = _attr(soup.find("meta", attrs={"http-equiv": "Content-Type"}), "content")
        if content:
            match = CHARSET_PATTERN.search(content)
            if match:
                return match.group(1).strip()
        return None
