"""
Google PageSpeed Insights API Client

Runs Lighthouse through the PageSpeed Insights API once per device class and
normalizes the response into category scores, Core Web Vitals ratings,
timing metrics, a resource breakdown and bucketed audit items.
API Documentation: https://developers.google.com/speed/docs/insights/v5/get-started

Rate Limits:
- 400 requests per 100 seconds
- 25,000 requests per day (free tier, with API key)
"""

import asyncio
import logging
from collections import deque
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from seoscan.constants import (
    DEFAULT_PSI_TIMEOUT_SECONDS,
    DEVICE_CLASSES,
    MAX_DIAGNOSTICS,
    MAX_OPPORTUNITIES,
    NON_SCORED_DISPLAY_MODES,
    PSI_API_URL,
    PSI_CATEGORIES,
    PSI_MAX_CONCURRENT_REQUESTS,
    PSI_PASSING_SCORE,
    PSI_RATE_LIMIT_REQUESTS,
    PSI_RATE_LIMIT_WINDOW_SECONDS,
)
from seoscan.core_web_vitals import build_core_web_vitals
from seoscan.exceptions import PerformanceProviderError
from seoscan.models import (
    AuditBuckets,
    CategoryScores,
    LighthouseAudit,
    PageSpeedResult,
    PerformanceResults,
    ResourceSizes,
    TimingMetrics,
)
from seoscan.utils import bytes_to_mb, ms_to_seconds, round_half_up, round_to, to_percent

logger = logging.getLogger(__name__)


# ============================================================================
# Raw response models (validated at the parse boundary)
# ============================================================================

class _RawModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RawAuditDetails(_RawModel):
    type: Optional[str] = None
    overall_savings_ms: Optional[float] = Field(default=None, alias="overallSavingsMs")
    items: Optional[List[Any]] = None
    summary: Optional[Dict[str, Any]] = None


class RawAudit(_RawModel):
    id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    score: Optional[float] = None
    score_display_mode: Optional[str] = Field(default=None, alias="scoreDisplayMode")
    display_value: Optional[str] = Field(default=None, alias="displayValue")
    numeric_value: Optional[float] = Field(default=None, alias="numericValue")
    numeric_unit: Optional[str] = Field(default=None, alias="numericUnit")
    details: Optional[RawAuditDetails] = None


class RawCategory(_RawModel):
    score: Optional[float] = None


class RawLighthouseResult(_RawModel):
    requested_url: Optional[str] = Field(default=None, alias="requestedUrl")
    fetch_time: Optional[str] = Field(default=None, alias="fetchTime")
    categories: Dict[str, RawCategory] = Field(default_factory=dict)
    audits: Dict[str, RawAudit] = Field(default_factory=dict)


class RawPageSpeedResponse(_RawModel):
    id: Optional[str] = None
    lighthouse_result: RawLighthouseResult = Field(alias="lighthouseResult")


# ============================================================================
# Normalization
# ============================================================================

def _numeric(audits: Dict[str, RawAudit], audit_id: str) -> float:
    audit = audits.get(audit_id)
    if audit is None or audit.numeric_value is None:
        return 0.0
    return audit.numeric_value


def _is_opportunity(audit: RawAudit) -> bool:
    if audit.score_display_mode == "opportunity":
        return True
    details = audit.details
    if details is None:
        return False
    return details.type == "opportunity" or (details.overall_savings_ms or 0) > 0


def categorize_audits(audits: Dict[str, RawAudit]) -> AuditBuckets:
    """Sort audit items into passed / failed / opportunities / diagnostics.

    Provider order is kept within each bucket; opportunities and diagnostics
    are capped after bucketing.
    """
    buckets = AuditBuckets()

    for audit_id, audit in audits.items():
        if not audit.title:
            continue

        if audit.score == 1:
            buckets.passed.append(audit.title)
            continue

        if audit.score_display_mode in NON_SCORED_DISPLAY_MODES:
            continue
        if audit.score is not None and audit.score >= PSI_PASSING_SCORE:
            continue

        item = LighthouseAudit(
            id=audit_id,
            title=audit.title,
            description=audit.description or "",
            score=audit.score,
            score_display_mode=audit.score_display_mode,
            display_value=audit.display_value,
            numeric_value=audit.numeric_value,
            numeric_unit=audit.numeric_unit,
        )

        if _is_opportunity(audit):
            buckets.opportunities.append(item)
        elif audit.score_display_mode == "informative":
            buckets.diagnostics.append(item)
        else:
            buckets.failed.append(item)

    buckets.opportunities = buckets.opportunities[:MAX_OPPORTUNITIES]
    buckets.diagnostics = buckets.diagnostics[:MAX_DIAGNOSTICS]
    return buckets


def _resource_sizes(audits: Dict[str, RawAudit]) -> ResourceSizes:
    summary = audits.get("resource-summary")
    items = (summary.details.items if summary and summary.details else None) or []
    by_type = {
        item.get("resourceType"): item
        for item in items
        if isinstance(item, dict)
    }

    def transfer_size(resource_type: str) -> float:
        return by_type.get(resource_type, {}).get("transferSize") or 0

    third_party = audits.get("third-party-summary")
    third_party_bytes = 0
    if third_party and third_party.details and third_party.details.summary:
        third_party_bytes = third_party.details.summary.get("wastedBytes") or 0

    return ResourceSizes(
        total_size=bytes_to_mb(_numeric(audits, "total-byte-weight")),
        html_size=bytes_to_mb(transfer_size("document")),
        css_size=bytes_to_mb(transfer_size("stylesheet")),
        js_size=bytes_to_mb(transfer_size("script")),
        image_size=bytes_to_mb(transfer_size("image")),
        font_count=int(by_type.get("font", {}).get("requestCount") or 0),
        third_party_size=bytes_to_mb(third_party_bytes),
    )


def parse_pagespeed_response(data: Dict[str, Any], strategy: str) -> PageSpeedResult:
    """
    Normalize a raw PageSpeed Insights response.

    Args:
        data: Raw API response (decoded JSON)
        strategy: 'mobile' or 'desktop'

    Returns:
        PageSpeedResult

    Raises:
        PerformanceProviderError: If the payload does not have the expected shape
    """
    try:
        raw = RawPageSpeedResponse.model_validate(data)
    except PydanticValidationError as e:
        raise PerformanceProviderError(
            f"Malformed PageSpeed response ({e.error_count()} validation errors)",
            strategy=strategy,
        ) from e

    lighthouse = raw.lighthouse_result
    categories = lighthouse.categories
    audits = lighthouse.audits

    def category_score(name: str) -> int:
        category = categories.get(name)
        return to_percent(category.score if category else None)

    scores = CategoryScores(
        performance=category_score("performance"),
        accessibility=category_score("accessibility"),
        best_practices=category_score("best-practices"),
        seo=category_score("seo"),
    )

    lcp_ms = _numeric(audits, "largest-contentful-paint")
    fcp_ms = _numeric(audits, "first-contentful-paint")
    cls_value = _numeric(audits, "cumulative-layout-shift")

    core_web_vitals = build_core_web_vitals(
        lcp_ms=lcp_ms,
        fid_ms=_numeric(audits, "max-potential-fid"),
        cls=cls_value,
        fcp_ms=fcp_ms,
        ttfb_ms=_numeric(audits, "server-response-time"),
    )

    metrics = TimingMetrics(
        first_contentful_paint=ms_to_seconds(fcp_ms),
        largest_contentful_paint=ms_to_seconds(lcp_ms),
        total_blocking_time=round_half_up(_numeric(audits, "total-blocking-time")),
        cumulative_layout_shift=round_to(cls_value, 3),
        speed_index=ms_to_seconds(_numeric(audits, "speed-index")),
        time_to_interactive=ms_to_seconds(_numeric(audits, "interactive")),
    )

    return PageSpeedResult(
        url=raw.id or lighthouse.requested_url or "",
        strategy=strategy,
        fetch_time=lighthouse.fetch_time,
        scores=scores,
        core_web_vitals=core_web_vitals,
        metrics=metrics,
        resources=_resource_sizes(audits),
        audits=categorize_audits(audits),
    )


# ============================================================================
# Client
# ============================================================================

class PageSpeedInsightsAPI:
    """Client for Google PageSpeed Insights API v5"""

    API_URL = PSI_API_URL
    RATE_LIMIT_REQUESTS = PSI_RATE_LIMIT_REQUESTS  # Max requests per window
    RATE_LIMIT_WINDOW = PSI_RATE_LIMIT_WINDOW_SECONDS  # Seconds

    def __init__(
        self,
        api_key: Optional[str] = None,
        categories: Optional[List[str]] = None,
        locale: str = "en",
        timeout: float = DEFAULT_PSI_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize PageSpeed Insights API client.

        Args:
            api_key: Google API key (optional; keyless access has a low daily quota)
            categories: Lighthouse categories to request (default: all four)
            locale: Locale for results (default: 'en')
            timeout: Transport timeout in seconds
            client: Optional pre-built client (tests inject a MockTransport here)
        """
        self.api_key = api_key
        self.categories = categories or list(PSI_CATEGORIES)
        self.locale = locale
        self.timeout = timeout
        self._client = client

        # Rate limiting
        self.request_times: deque = deque()
        self.semaphore = asyncio.Semaphore(PSI_MAX_CONCURRENT_REQUESTS)
        self.total_requests = 0
        self.failed_requests = 0

    async def analyze(self, url: str, strategy: str = "mobile") -> PageSpeedResult:
        """
        Analyze a URL for one device class.

        Args:
            url: URL to analyze
            strategy: 'mobile' or 'desktop'

        Returns:
            Normalized PageSpeedResult

        Raises:
            PerformanceProviderError: On non-2xx status, quota, timeout or malformed payload
        """
        await self._enforce_rate_limit()

        params: Dict[str, Any] = {
            'url': url,
            'strategy': strategy,
            'category': self.categories,
            'locale': self.locale,
        }
        if self.api_key:
            params['key'] = self.api_key

        async with self.semaphore:
            logger.info(f"[PSI] Analyzing {url} ({strategy})")
            try:
                data = await self._request(params, url, strategy)
                result = parse_pagespeed_response(data, strategy)
            except PerformanceProviderError:
                self.failed_requests += 1
                raise

        self.total_requests += 1
        logger.info(
            f"[PSI] {url} ({strategy}): Performance={result.scores.performance}, "
            f"LCP={result.core_web_vitals.lcp.value}s, CLS={result.core_web_vitals.cls.value}"
        )
        return result

    async def run_full_analysis(self, url: str) -> PerformanceResults:
        """Run mobile and desktop concurrently; either failure fails the call."""
        mobile, desktop = await asyncio.gather(
            *(self.analyze(url, strategy) for strategy in DEVICE_CLASSES)
        )
        return PerformanceResults(mobile=mobile, desktop=desktop)

    async def _request(self, params: Dict[str, Any], url: str, strategy: str) -> Dict[str, Any]:
        if self._client is not None:
            return await self._send(self._client, params, url, strategy)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._send(client, params, url, strategy)

    async def _send(
        self,
        client: httpx.AsyncClient,
        params: Dict[str, Any],
        url: str,
        strategy: str,
    ) -> Dict[str, Any]:
        try:
            response = await client.get(self.API_URL, params=params)
        except httpx.TimeoutException as e:
            logger.error(f"[PSI] Timeout analyzing {url} (>{self.timeout:.0f}s)")
            raise PerformanceProviderError(
                f"PageSpeed Insights timeout for {url}", strategy=strategy
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"[PSI] Request failed for {url}: {e}")
            raise PerformanceProviderError(
                f"PageSpeed Insights request failed: {e}", strategy=strategy
            ) from e

        if response.status_code == 429:
            logger.error(f"[PSI] Rate limit exceeded for {url}")
            raise PerformanceProviderError(
                "PageSpeed Insights rate limit exceeded. Try again later.",
                status_code=429,
                strategy=strategy,
            )

        if not response.is_success:
            message = self._error_message(response)
            logger.error(f"[PSI] API error {response.status_code} for {url}: {message}")
            raise PerformanceProviderError(message, status_code=response.status_code, strategy=strategy)

        try:
            data = response.json()
        except ValueError as e:
            raise PerformanceProviderError(
                "PageSpeed API returned a non-JSON response", strategy=strategy
            ) from e

        if not isinstance(data, dict):
            raise PerformanceProviderError("Malformed PageSpeed response", strategy=strategy)
        return data

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """The provider's error.message when present, else a generic status message."""
        fallback = f"PageSpeed API error: {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            return fallback
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return fallback

    async def _enforce_rate_limit(self):
        """Enforce rate limit of 400 requests per 100 seconds"""
        now = datetime.now()
        window = timedelta(seconds=self.RATE_LIMIT_WINDOW)

        while self.request_times and (now - self.request_times[0]) > window:
            self.request_times.popleft()

        if len(self.request_times) >= self.RATE_LIMIT_REQUESTS:
            oldest_request = self.request_times[0]
            wait_time = self.RATE_LIMIT_WINDOW - (now - oldest_request).total_seconds()

            if wait_time > 0:
                logger.warning(f"[PSI] Rate limit reached. Waiting {wait_time:.1f}s...")
                await asyncio.sleep(wait_time)

                now = datetime.now()
                while self.request_times and (now - self.request_times[0]) > window:
                    self.request_times.popleft()

        self.request_times.append(now)

    def get_stats(self) -> Dict[str, Any]:
        """Get API usage statistics"""
        attempts = self.total_requests + self.failed_requests
        return {
            'total_requests': self.total_requests,
            'failed_requests': self.failed_requests,
            'success_rate': (
                round(self.total_requests / attempts * 100, 1)
                if attempts > 0 else 0
            ),
            'requests_in_window': len(self.request_times),
        }
