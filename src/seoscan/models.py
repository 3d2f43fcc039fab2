"""Data models for SEO audits."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import TypeAdapter


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Enumerations
# ============================================================================

class Severity(str, Enum):
    """Severity of a facet finding."""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class IssueType(str, Enum):
    """Kinds of findings produced by the facet analyzers."""
    # Meta tags
    MISSING = "missing"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    # Headings
    EMPTY_HEADING = "empty_heading"
    SKIPPED_LEVEL = "skipped_level"
    MISSING_H1 = "missing_h1"
    MULTIPLE_H1 = "multiple_h1"
    # Images
    MISSING_ALT = "missing_alt"
    MISSING_DIMENSIONS = "missing_dimensions"
    # Links
    NOFOLLOW_INTERNAL = "nofollow_internal"
    EMPTY_LINK = "empty_link"
    GENERIC_ANCHOR = "generic_anchor"
    TOO_MANY_LINKS = "too_many_links"
    # Structured data
    INVALID_JSON = "invalid_json"
    MISSING_SCHEMA = "missing_schema"
    # Any facet
    ANALYSIS_FAILED = "analysis_failed"


class AuditStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AuditTier(str, Enum):
    """Commercial package; controls scan breadth, never analyzer logic."""
    BASIC = "basic"
    PROFESSIONAL = "professional"
    AGENCY = "agency"


class IssueCategory(str, Enum):
    TECHNICAL = "technical"
    PERFORMANCE = "performance"
    CONTENT = "content"
    SECURITY = "security"


class Impact(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Effort(str, Enum):
    QUICK = "quick"
    MEDIUM = "medium"
    COMPLEX = "complex"


class Rating(str, Enum):
    """Core Web Vitals rating."""
    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs-improvement"
    POOR = "poor"


class SchemaFormat(str, Enum):
    JSON_LD = "json-ld"
    MICRODATA = "microdata"


# ============================================================================
# Facet Models
# ============================================================================

@dataclass
class FacetIssue:
    """A single finding from one facet analyzer."""

    type: IssueType
    message: str
    severity: Severity
    subject: Optional[str] = None  # field name, heading tag, image src or link href


@dataclass
class MetaTagsAnalysis:
    """Meta tags extracted from the document head."""

    title: Optional[str] = None
    title_length: int = 0
    description: Optional[str] = None
    description_length: int = 0
    robots: Optional[str] = None
    canonical: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    twitter_card: Optional[str] = None
    viewport: Optional[str] = None
    charset: Optional[str] = None
    language: Optional[str] = None
    issues: list[FacetIssue] = field(default_factory=list)


@dataclass
class HeadingNode:
    level: int
    text: str
    order: int


@dataclass
class HeadingAnalysis:
    """Heading outline in document order plus per-level text buckets."""

    h1: list[str] = field(default_factory=list)
    h2: list[str] = field(default_factory=list)
    h3: list[str] = field(default_factory=list)
    h4: list[str] = field(default_factory=list)
    h5: list[str] = field(default_factory=list)
    h6: list[str] = field(default_factory=list)
    structure: list[HeadingNode] = field(default_factory=list)
    issues: list[FacetIssue] = field(default_factory=list)

    def texts_for_level(self, level: int) -> list[str]:
        return getattr(self, f"h{level}")


@dataclass
class ImageInfo:
    src: str
    alt: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    loading: Optional[str] = None
    has_alt: bool = False
    is_decorative: bool = False


@dataclass
class ImageAnalysis:
    """Image inventory with alt-text accounting."""

    total: int = 0
    with_alt: int = 0  # non-empty alt
    without_alt: int = 0  # no alt attribute at all
    decorative: int = 0  # alt="" present
    images: list[ImageInfo] = field(default_factory=list)
    issues: list[FacetIssue] = field(default_factory=list)

    @property
    def alt_coverage(self) -> float:
        """Percent of images carrying an alt attribute (decorative included)."""
        if self.total == 0:
            return 100.0
        return (self.total - self.without_alt) / self.total * 100


@dataclass
class LinkInfo:
    href: str
    text: str
    is_nofollow: bool = False
    is_new_tab: bool = False
    is_internal: bool = False


@dataclass
class LinkAnalysis:
    internal: list[LinkInfo] = field(default_factory=list)
    external: list[LinkInfo] = field(default_factory=list)
    nofollow: list[LinkInfo] = field(default_factory=list)
    internal_count: int = 0
    external_count: int = 0
    issues: list[FacetIssue] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.internal_count + self.external_count


@dataclass
class SchemaInfo:
    type: str
    format: SchemaFormat
    raw: Optional[str] = None


@dataclass
class SchemaAnalysis:
    has_schema: bool = False
    schemas: list[SchemaInfo] = field(default_factory=list)
    jsonld_count: int = 0
    microdata_count: int = 0
    issues: list[FacetIssue] = field(default_factory=list)

    @property
    def schema_types(self) -> list[str]:
        return [schema.type for schema in self.schemas]


# Fixed analyzer order; issue discovery order follows it
FACET_ORDER = ("meta_tags", "headings", "images", "links", "schema")


@dataclass
class HTMLAnalysisResult:
    """One fetch + parse pass over one URL."""

    url: str
    fetched_at: datetime = field(default_factory=utcnow)
    status_code: int = 200
    content_type: Optional[str] = None
    content_length: int = 0
    load_time: int = 0  # milliseconds
    word_count: int = 0
    text_to_html_ratio: int = 0  # percent
    meta_tags: MetaTagsAnalysis = field(default_factory=MetaTagsAnalysis)
    headings: HeadingAnalysis = field(default_factory=HeadingAnalysis)
    images: ImageAnalysis = field(default_factory=ImageAnalysis)
    links: LinkAnalysis = field(default_factory=LinkAnalysis)
    schema: SchemaAnalysis = field(default_factory=SchemaAnalysis)

    def facet_issues(self) -> list[tuple[str, FacetIssue]]:
        """All facet issues as (facet name, issue) pairs in analyzer order."""
        return [
            (facet, issue)
            for facet in FACET_ORDER
            for issue in getattr(self, facet).issues
        ]


# ============================================================================
# PageSpeed Models
# ============================================================================

@dataclass
class LighthouseAudit:
    id: str
    title: str
    description: str = ""
    score: Optional[float] = None
    score_display_mode: Optional[str] = None
    display_value: Optional[str] = None
    numeric_value: Optional[float] = None
    numeric_unit: Optional[str] = None


@dataclass
class CategoryScores:
    """Lighthouse category scores (0-100)."""
    performance: int = 0
    accessibility: int = 0
    best_practices: int = 0
    seo: int = 0


@dataclass
class MetricRating:
    value: float
    rating: Rating


@dataclass
class CoreWebVitals:
    lcp: MetricRating  # seconds
    fid: MetricRating  # milliseconds
    cls: MetricRating  # unitless
    fcp: MetricRating  # seconds
    ttfb: MetricRating  # milliseconds


@dataclass
class TimingMetrics:
    first_contentful_paint: float = 0.0  # seconds
    largest_contentful_paint: float = 0.0  # seconds
    total_blocking_time: int = 0  # milliseconds
    cumulative_layout_shift: float = 0.0
    speed_index: float = 0.0  # seconds
    time_to_interactive: float = 0.0  # seconds


@dataclass
class ResourceSizes:
    """Resource breakdown in MB (font_count is a request count)."""
    total_size: float = 0.0
    html_size: float = 0.0
    css_size: float = 0.0
    js_size: float = 0.0
    image_size: float = 0.0
    font_count: int = 0
    third_party_size: float = 0.0


@dataclass
class AuditBuckets:
    passed: list[str] = field(default_factory=list)
    failed: list[LighthouseAudit] = field(default_factory=list)
    opportunities: list[LighthouseAudit] = field(default_factory=list)
    diagnostics: list[LighthouseAudit] = field(default_factory=list)


@dataclass
class PageSpeedResult:
    """Normalized provider response for one (URL, device class) pair."""

    url: str
    strategy: str
    fetch_time: Optional[str]
    scores: CategoryScores
    core_web_vitals: CoreWebVitals
    metrics: TimingMetrics
    resources: ResourceSizes
    audits: AuditBuckets


@dataclass
class PerformanceResults:
    mobile: PageSpeedResult
    desktop: PageSpeedResult


# ============================================================================
# Report Models
# ============================================================================

@dataclass
class AuditScores:
    overall: int = 0
    technical: int = 0
    performance: int = 0
    content: int = 0
    mobile: int = 0
    security: int = 0


@dataclass
class IssuesCount:
    critical: int = 0
    warnings: int = 0
    opportunities: int = 0


@dataclass
class Issue:
    """Report-facing issue, uniform across facet and provider sources."""

    id: str
    category: IssueCategory
    type: str
    title: str
    description: str
    impact: Impact
    effort: Effort
    recommendation: str
    affected_pages: int = 1
    example_urls: list[str] = field(default_factory=list)


@dataclass
class Recommendation:
    priority: Impact
    category: str
    title: str
    description: str
    impact: str
    effort: Effort


@dataclass
class Audit:
    """One request to analyze one website at one tier."""

    id: str
    website_url: str
    display_name: str
    tier: AuditTier = AuditTier.BASIC
    user_id: str = "anonymous"
    status: AuditStatus = AuditStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    pages_scanned: int = 0
    scores: AuditScores = field(default_factory=AuditScores)
    issues_count: IssuesCount = field(default_factory=IssuesCount)
    pagespeed_results: Optional[PerformanceResults] = None
    html_analysis: Optional[HTMLAnalysisResult] = None
    issues: list[Issue] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)
    error: Optional[str] = None


# ============================================================================
# Serialization
# ============================================================================

_AUDIT_ADAPTER = TypeAdapter(Audit)
_ADAPTERS: dict[type, TypeAdapter] = {Audit: _AUDIT_ADAPTER}


def to_dict(obj: Any) -> dict:
    """Dump any model dataclass to a JSON-compatible dict."""
    adapter = _ADAPTERS.get(type(obj))
    if adapter is None:
        adapter = _ADAPTERS[type(obj)] = TypeAdapter(type(obj))
    return adapter.dump_python(obj, mode="json")


def audit_from_dict(data: dict) -> Audit:
    """Rebuild an Audit (with nested results) from its dict form."""
    return _AUDIT_ADAPTER.validate_python(data)
