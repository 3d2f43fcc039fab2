"""One-time SEO audits combining on-page HTML analysis with PageSpeed Insights."""

__version__ = "0.1.0"

from seoscan.crawler import WebCrawler, FetchedDocument
from seoscan.html_analyzer import HTMLAnalyzer
from seoscan.external.pagespeed_insights import PageSpeedInsightsAPI
from seoscan.scoring import ScoreAggregator
from seoscan.issue_mapper import IssueMapper
from seoscan.orchestrator import AuditOrchestrator
from seoscan.service import AuditService
from seoscan.database import (
    AbstractAuditStore,
    SqliteAuditStore,
    InMemoryAuditStore,
    get_audit_store,
)
from seoscan.report import AuditReport, build_report, render_text
from seoscan.models import (
    Audit,
    AuditStatus,
    AuditTier,
    AuditScores,
    HTMLAnalysisResult,
    Issue,
    PageSpeedResult,
    PerformanceResults,
    Recommendation,
)
from seoscan.exceptions import (
    SeoScanError,
    FetchError,
    PerformanceProviderError,
    ValidationError,
    PreconditionError,
    NotFoundError,
    ReportNotReadyError,
    StorageError,
)
from seoscan.config import Config, settings

__all__ = [
    "WebCrawler",
    "FetchedDocument",
    "HTMLAnalyzer",
    "PageSpeedInsightsAPI",
    "ScoreAggregator",
    "IssueMapper",
    "AuditOrchestrator",
    "AuditService",
    "AbstractAuditStore",
    "SqliteAuditStore",
    "InMemoryAuditStore",
    "get_audit_store",
    "AuditReport",
    "build_report",
    "render_text",
    "Audit",
    "AuditStatus",
    "AuditTier",
    "AuditScores",
    "HTMLAnalysisResult",
    "Issue",
    "PageSpeedResult",
    "PerformanceResults",
    "Recommendation",
    "SeoScanError",
    "FetchError",
    "PerformanceProviderError",
    "ValidationError",
    "PreconditionError",
    "NotFoundError",
    "ReportNotReadyError",
    "StorageError",
    "Config",
    "settings",
]
