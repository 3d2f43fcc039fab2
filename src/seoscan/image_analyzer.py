"""Image analyzer: alt text accounting and layout-shift risks."""

from bs4 import BeautifulSoup

from seoscan.models import FacetIssue, ImageAnalysis, ImageInfo, IssueType, Severity
from seoscan.utils import resolve_url


class ImageAnalyzer:
    """Analyzes every <img> on a page.

    An absent alt attribute is a missing alt; ``alt=""`` marks the image as
    decorative and is never reported.
    """

    def analyze(self, soup: BeautifulSoup, url: str) -> ImageAnalysis:
        """Analyze images.

        Args:
            soup: BeautifulSoup parsed HTML
            url: Page URL, used to resolve relative src values

        Returns:
            ImageAnalysis with per-image info, counts and issues
        """
        analysis = ImageAnalysis()

        for img in soup.find_all("img"):
            src = img.get("src") or ""
            alt = img.get("alt")

            try:
                resolved_src = resolve_url(src, url) if url else src
            except ValueError:
                resolved_src = src

            info = ImageInfo(
                src=resolved_src,
                alt=alt,
                width=img.get("width") or None,
                height=img.get("height") or None,
                loading=img.get("loading") or None,
                has_alt=alt is not None,
                is_decorative=alt == "",
            )
            analysis.images.append(info)

            if not info.has_alt:
                analysis.without_alt += 1
                analysis.issues.append(FacetIssue(
                    type=IssueType.MISSING_ALT,
                    message="Image is missing alt attribute",
                    severity=Severity.CRITICAL,
                    subject=resolved_src,
                ))
            elif info.is_decorative:
                analysis.decorative += 1
            else:
                analysis.with_alt += 1

            if not info.width or not info.height:
                analysis.issues.append(FacetIssue(
                    type=IssueType.MISSING_DIMENSIONS,
                    message="Image is missing width/height attributes (may cause layout shift)",
                    severity=Severity.WARNING,
                    subject=resolved_src,
                ))

        analysis.total = len(analysis.images)
        return analysis
