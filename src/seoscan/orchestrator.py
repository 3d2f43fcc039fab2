"""Audit orchestrator: runs one audit end to end through its lifecycle."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Optional

from seoscan.config import Config, load_tuning
from seoscan.constants import PAGES_PER_AUDIT
from seoscan.crawler import WebCrawler
from seoscan.database import AbstractAuditStore
from seoscan.exceptions import NotFoundError, PerformanceProviderError, PreconditionError
from seoscan.external.pagespeed_insights import PageSpeedInsightsAPI
from seoscan.html_analyzer import HTMLAnalyzer
from seoscan.issue_mapper import IssueMapper
from seoscan.lifecycle import ensure_transition
from seoscan.models import Audit, AuditStatus, HTMLAnalysisResult, PerformanceResults, utcnow
from seoscan.scoring import ScoreAggregator

logger = logging.getLogger(__name__)


@dataclass
class Branch:
    """One concurrent unit of work inside a run."""

    name: str
    work: Awaitable[Any]
    required: bool
    timeout: Optional[float] = None


async def _run_branch(branch: Branch) -> Any:
    if not branch.timeout:
        return await branch.work
    try:
        return await asyncio.wait_for(branch.work, timeout=branch.timeout)
    except asyncio.TimeoutError as e:
        raise TimeoutError(f"{branch.name} timed out after {branch.timeout:g}s") from e


async def join_branches(branches: list[Branch]) -> dict[str, Any]:
    """Wait for every branch to settle, then apply each branch's failure policy.

    A failed optional branch yields None (logged at WARNING); the first
    failed required branch, in declaration order, is re-raised.
    """
    outcomes = await asyncio.gather(
        *(_run_branch(branch) for branch in branches),
        return_exceptions=True,
    )

    results: dict[str, Any] = {}
    for branch, outcome in zip(branches, outcomes):
        if not isinstance(outcome, BaseException):
            results[branch.name] = outcome
            continue
        if branch.required:
            raise outcome
        logger.warning(f"Optional branch '{branch.name}' failed: {outcome}")
        results[branch.name] = None
    return results


class AuditOrchestrator:
    """Drives an audit from pending/failed to completed or failed.

    Only one run per audit can be in flight: moving to ``processing`` is a
    compare-and-set on the stored status, so a second concurrent run is
    rejected with PreconditionError.
    """

    def __init__(
        self,
        store: AbstractAuditStore,
        html_analyzer: Optional[HTMLAnalyzer] = None,
        pagespeed: Optional[PageSpeedInsightsAPI] = None,
        aggregator: Optional[ScoreAggregator] = None,
        mapper: Optional[IssueMapper] = None,
        config: Optional[Config] = None,
    ):
        self.store = store
        self.config = config or Config.from_env()
        thresholds, penalties, weights = load_tuning(self.config.tuning_file)

        self.html_analyzer = html_analyzer or HTMLAnalyzer(
            crawler=WebCrawler(user_agent=self.config.user_agent, timeout=self.config.fetch_timeout),
            thresholds=thresholds,
        )
        self.pagespeed = pagespeed or PageSpeedInsightsAPI(
            api_key=self.config.google_psi_api_key,
            locale=self.config.psi_locale,
            timeout=self.config.pagespeed_timeout,
        )
        self.aggregator = aggregator or ScoreAggregator(weights=weights, penalties=penalties)
        self.mapper = mapper or IssueMapper(max_recommendations=self.config.max_recommendations)

    async def run(self, audit_id: str) -> Audit:
        """Run an audit.

        Args:
            audit_id: Audit to run (must be pending or failed)

        Returns:
            The completed audit

        Raises:
            NotFoundError: Unknown audit id
            PreconditionError: Audit is processing or completed
            PerformanceProviderError: Provider failure (audit is marked failed)
            asyncio.CancelledError: Run cancelled (audit is marked failed)
        """
        audit = await self.store.get_audit(audit_id)
        if audit is None:
            raise NotFoundError(audit_id)

        ensure_transition(audit_id, audit.status, AuditStatus.PROCESSING)
        started = await self.store.update_audit(
            audit_id,
            {"status": AuditStatus.PROCESSING, "error": None},
            expected_status=audit.status,
        )
        if started is None:
            raise NotFoundError(audit_id)

        logger.info(f"Starting audit {audit_id} for {audit.website_url}")

        try:
            html_analysis, performance = await self._collect(audit.website_url)
            return await self._complete(started, html_analysis, performance)
        except TimeoutError as e:
            logger.error(f"Audit {audit_id} failed: {e}")
            await self._fail(audit_id, str(e))
            raise PerformanceProviderError(str(e)) from e
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(f"Audit {audit_id} failed: {message}")
            await self._fail(audit_id, message)
            raise
        except asyncio.CancelledError:
            # asyncio.run() cancels the main task on Ctrl-C
            logger.warning(f"Audit {audit_id} run cancelled")
            await self._fail(audit_id, "run cancelled")
            raise

    async def _collect(self, url: str) -> tuple[Optional[HTMLAnalysisResult], PerformanceResults]:
        results = await join_branches([
            Branch(
                name="html",
                work=self.html_analyzer.analyze_url(url),
                required=False,
                timeout=self.config.fetch_timeout,
            ),
            Branch(
                name="pagespeed",
                work=self.pagespeed.run_full_analysis(url),
                required=True,
                timeout=self.config.pagespeed_timeout,
            ),
        ])
        return results["html"], results["pagespeed"]

    async def _complete(
        self,
        audit: Audit,
        html_analysis: Optional[HTMLAnalysisResult],
        performance: PerformanceResults,
    ) -> Audit:
        ensure_transition(audit.id, audit.status, AuditStatus.COMPLETED)

        scores = self.aggregator.aggregate(performance, html_analysis)
        issues_count = self.aggregator.count_issues(performance, html_analysis)
        issues = self.mapper.build_issues(performance, html_analysis, audit.website_url)
        recommendations = self.mapper.build_recommendations(issues)

        completed = await self.store.update_audit(
            audit.id,
            {
                "status": AuditStatus.COMPLETED,
                "completed_at": utcnow(),
                "pages_scanned": PAGES_PER_AUDIT,
                "scores": scores,
                "issues_count": issues_count,
                "pagespeed_results": performance,
                "html_analysis": html_analysis,
                "issues": issues,
                "recommendations": recommendations,
            },
            expected_status=AuditStatus.PROCESSING,
        )
        if completed is None:
            raise NotFoundError(audit.id)

        logger.info(
            f"Audit {audit.id} completed: overall={scores.overall}, "
            f"{len(issues)} issues ({issues_count.critical} critical)"
        )
        return completed

    async def _fail(self, audit_id: str, message: str) -> None:
        ensure_transition(audit_id, AuditStatus.PROCESSING, AuditStatus.FAILED)
        try:
            await self.store.update_audit(
                audit_id,
                {"status": AuditStatus.FAILED, "error": message},
                expected_status=AuditStatus.PROCESSING,
            )
        except PreconditionError:
            logger.warning(f"Audit {audit_id} left processing before it could be marked failed")
