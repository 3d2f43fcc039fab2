"""Document analyzer: fetch one page, parse it once, run the five facets."""

import logging
from typing import Callable, Optional

from bs4 import BeautifulSoup

from seoscan.config import AnalysisThresholds, default_thresholds
from seoscan.crawler import FetchedDocument, WebCrawler
from seoscan.heading_analyzer import HeadingAnalyzer
from seoscan.image_analyzer import ImageAnalyzer
from seoscan.link_analyzer import LinkAnalyzer
from seoscan.meta_analyzer import MetaTagAnalyzer
from seoscan.models import (
    FacetIssue,
    HeadingAnalysis,
    HTMLAnalysisResult,
    ImageAnalysis,
    IssueType,
    LinkAnalysis,
    MetaTagsAnalysis,
    SchemaAnalysis,
    Severity,
)
from seoscan.structured_data import StructuredDataAnalyzer
from seoscan.utils import round_half_up

logger = logging.getLogger(__name__)


class HTMLAnalyzer:
    """Runs the meta, heading, image, link and structured-data facets.

    Each facet is fault-isolated: an unexpected error inside one facet is
    logged and replaced by an empty result carrying a single
    ``analysis_failed`` warning, and the remaining facets still run.
    """

    def __init__(
        self,
        crawler: Optional[WebCrawler] = None,
        thresholds: Optional[AnalysisThresholds] = None,
    ):
        self.crawler = crawler or WebCrawler()
        self.thresholds = thresholds or default_thresholds

        self.meta_analyzer = MetaTagAnalyzer(self.thresholds)
        self.heading_analyzer = HeadingAnalyzer(self.thresholds)
        self.image_analyzer = ImageAnalyzer()
        self.link_analyzer = LinkAnalyzer(self.thresholds)
        self.schema_analyzer = StructuredDataAnalyzer()

    async def analyze_url(self, url: str) -> HTMLAnalysisResult:
        """Fetch and analyze a URL.

        Raises:
            FetchError: If the page cannot be fetched
        """
        document = await self.crawler.fetch(url)
        return self.analyze_document(document)

    def analyze_document(self, document: FetchedDocument) -> HTMLAnalysisResult:
        return self.analyze_html(
            document.html,
            document.url,
            status_code=document.status_code,
            content_type=document.content_type,
            load_time=document.load_time,
            base_url=document.final_url,
        )

    def analyze_html(
        self,
        html: str,
        url: str,
        status_code: int = 200,
        content_type: Optional[str] = None,
        load_time: int = 0,
        base_url: Optional[str] = None,
    ) -> HTMLAnalysisResult:
        """Analyze already-fetched HTML.

        Args:
            html: Raw HTML body
            url: Requested page URL
            status_code: HTTP status of the fetch
            content_type: Declared content type
            load_time: Fetch duration in milliseconds
            base_url: URL the page was served from after redirects; relative
                references and internal links are judged against it
                (defaults to ``url``)

        Returns:
            HTMLAnalysisResult with all five facet results
        """
        soup = BeautifulSoup(html, "lxml")
        base = base_url or url

        meta_tags = self._run_facet("meta tags", MetaTagsAnalysis, lambda: self.meta_analyzer.analyze(soup, base))
        headings = self._run_facet("headings", HeadingAnalysis, lambda: self.heading_analyzer.analyze(soup, base))
        images = self._run_facet("images", ImageAnalysis, lambda: self.image_analyzer.analyze(soup, base))
        links = self._run_facet("links", LinkAnalysis, lambda: self.link_analyzer.analyze(soup, base))
        schema = self._run_facet("structured data", SchemaAnalysis, lambda: self.schema_analyzer.analyze(soup, base))

        body_text = self._body_text(soup)
        word_count = len(body_text.split()) if body_text else 0
        text_to_html_ratio = round_half_up(len(body_text) / len(html) * 100) if html else 0

        return HTMLAnalysisResult(
            url=url,
            status_code=status_code,
            content_type=content_type,
            content_length=len(html),
            load_time=load_time,
            word_count=word_count,
            text_to_html_ratio=text_to_html_ratio,
            meta_tags=meta_tags,
            headings=headings,
            images=images,
            links=links,
            schema=schema,
        )

    @staticmethod
    def _body_text(soup: BeautifulSoup) -> str:
        body = soup.find("body")
        if body is None:
            return ""
        return " ".join(body.get_text().split())

    @staticmethod
    def _run_facet(name: str, empty_factory: Callable, run: Callable):
        try:
            return run()
        except Exception as e:
            logger.warning(f"{name} analysis failed: {e}", exc_info=True)
            result = empty_factory()
            result.issues.append(FacetIssue(
                type=IssueType.ANALYSIS_FAILED,
                message=f"Could not analyze {name}: {e}",
                severity=Severity.WARNING,
            ))
            return result
