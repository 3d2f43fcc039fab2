"""URL helpers."""

from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse

from seoscan.exceptions import ValidationError


def resolve_url(href: str, base_url: str) -> str:
    """Resolve a possibly relative reference against the page URL."""
    return urljoin(base_url, href.strip())


def hostname_of(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def is_same_host(url: str, base_url: str) -> bool:
    return hostname_of(url) == hostname_of(base_url)


def normalize_target_url(url: Optional[str]) -> str:
    """Validate an audit target URL and normalize it.

    Raises:
        ValidationError: If the URL is empty, not http(s), or has no host
    """
    if not url or not url.strip():
        raise ValidationError("Website URL is required", field="website_url")

    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https"):
        raise ValidationError(
            f"Invalid URL format: {url} (must start with http:// or https://)",
            field="website_url",
        )
    if not parsed.hostname:
        raise ValidationError(f"Invalid URL format: {url} (missing host)", field="website_url")

    path = parsed.path or "/"
    return urlunparse((parsed.scheme, parsed.netloc.lower(), path, parsed.params, parsed.query, ""))


def truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return text[:length] + "..."
