"""Link analyzer: internal/external classification and anchor quality."""

from typing import Optional

from bs4 import BeautifulSoup

from seoscan.config import AnalysisThresholds, default_thresholds
from seoscan.constants import GENERIC_ANCHOR_TEXTS, SKIPPED_LINK_PREFIXES
from seoscan.models import FacetIssue, IssueType, LinkAnalysis, LinkInfo, Severity
from seoscan.utils import is_same_host, resolve_url


class LinkAnalyzer:
    """Classifies anchors and flags nofollow, empty and generic links."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or default_thresholds

    def analyze(self, soup: BeautifulSoup, url: str) -> LinkAnalysis:
        """Analyze all anchors carrying an href.

        In-page anchors and javascript:/mailto:/tel: targets are skipped.
        Hrefs are resolved against the page URL; same hostname is internal.
        """
        analysis = LinkAnalysis()

        for anchor in soup.find_all("a", href=True):
            href = anchor["href"]
            if isinstance(href, list):
                href = " ".join(href)
            if href.startswith(SKIPPED_LINK_PREFIXES):
                continue

            text = " ".join(anchor.get_text().split())
            rel = anchor.get("rel") or []
            if isinstance(rel, str):
                rel = rel.split()

            try:
                resolved_href = resolve_url(href, url)
                is_internal = is_same_host(resolved_href, url)
            except ValueError:
                # Unparseable hrefs are treated as relative
                resolved_href = href
                is_internal = True

            link = LinkInfo(
                href=resolved_href,
                text=text,
                is_nofollow="nofollow" in (value.lower() for value in rel),
                is_new_tab=anchor.get("target") == "_blank",
                is_internal=is_internal,
            )

            if is_internal:
                analysis.internal.append(link)
                if link.is_nofollow:
                    analysis.nofollow.append(link)
                    analysis.issues.append(FacetIssue(
                        type=IssueType.NOFOLLOW_INTERNAL,
                        message="Internal link has nofollow attribute",
                        severity=Severity.WARNING,
                        subject=resolved_href,
                    ))
            else:
                analysis.external.append(link)

            if not text and anchor.find("img") is None:
                analysis.issues.append(FacetIssue(
                    type=IssueType.EMPTY_LINK,
                    message="Link has no text or image content",
                    severity=Severity.WARNING,
                    subject=resolved_href,
                ))

            if text.lower() in GENERIC_ANCHOR_TEXTS:
                analysis.issues.append(FacetIssue(
                    type=IssueType.GENERIC_ANCHOR,
                    message=f'Generic anchor text "{text}" is not descriptive',
                    severity=Severity.INFO,
                    subject=resolved_href,
                ))

        analysis.internal_count = len(analysis.internal)
        analysis.external_count = len(analysis.external)

        if analysis.total > self.thresholds.max_links_per_page:
            analysis.issues.append(FacetIssue(
                type=IssueType.TOO_MANY_LINKS,
                message=(
                    f"Page has {analysis.total} links. "
                    "Consider reducing for better crawl efficiency"
                ),
                severity=Severity.INFO,
            ))

        return analysis
