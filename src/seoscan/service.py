"""External-facing audit operations: submit, run, look up, report, delete."""

import logging
from typing import Optional, Union

from seoscan.config import Config
from seoscan.database import AbstractAuditStore, get_audit_store
from seoscan.exceptions import NotFoundError, ValidationError
from seoscan.models import Audit, AuditTier
from seoscan.orchestrator import AuditOrchestrator
from seoscan.report import AuditReport, build_report
from seoscan.utils import hostname_of, normalize_target_url

logger = logging.getLogger(__name__)


def parse_tier(tier: Union[AuditTier, str, None]) -> AuditTier:
    """Validate a tier (an AuditTier or its name; defaults to basic).

    Raises:
        ValidationError: If the tier is not basic, professional or agency
    """
    if tier is None or tier == "":
        return AuditTier.BASIC
    if isinstance(tier, AuditTier):
        return tier
    try:
        return AuditTier(str(tier).lower())
    except ValueError:
        valid = ", ".join(t.value for t in AuditTier)
        raise ValidationError(f"Invalid tier: {tier} (expected one of: {valid})", field="tier") from None


class AuditService:
    """Facade over storage and the orchestrator.

    Input is validated here, before anything is stored; the orchestrator
    owns the lifecycle of an audit once it exists.
    """

    def __init__(
        self,
        store: Optional[AbstractAuditStore] = None,
        orchestrator: Optional[AuditOrchestrator] = None,
        config: Optional[Config] = None,
    ):
        self.config = config or Config.from_env()
        self.store = store or get_audit_store(
            self.config.store_backend,
            **({"db_url": self.config.database_url} if self.config.store_backend == "sqlite" else {}),
        )
        self.orchestrator = orchestrator or AuditOrchestrator(self.store, config=self.config)

    async def submit_audit(
        self,
        website_url: str,
        tier: Union[AuditTier, str, None] = "basic",
        display_name: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Audit:
        """Create a pending audit.

        Raises:
            ValidationError: Malformed URL or unknown tier
        """
        url = normalize_target_url(website_url)
        audit_tier = parse_tier(tier)
        name = (display_name or "").strip() or hostname_of(url)

        audit = await self.store.create_audit(url, name, audit_tier, user_id=user_id)
        logger.info(f"Submitted audit {audit.id} for {url} ({audit_tier.value})")
        return audit

    async def run_audit(self, audit_id: str) -> Audit:
        return await self.orchestrator.run(audit_id)

    async def get_audit(self, audit_id: str) -> Audit:
        """Raises NotFoundError for an unknown id."""
        audit = await self.store.get_audit(audit_id)
        if audit is None:
            raise NotFoundError(audit_id)
        return audit

    async def list_audits(self, user_id: Optional[str] = None) -> list[Audit]:
        return await self.store.list_audits(user_id)

    async def delete_audit(self, audit_id: str) -> None:
        if not await self.store.delete_audit(audit_id):
            raise NotFoundError(audit_id)
        logger.info(f"Deleted audit {audit_id}")

    async def get_report(self, audit_id: str) -> AuditReport:
        """Report for a completed audit.

        Raises:
            NotFoundError: Unknown audit id
            ReportNotReadyError: Audit exists but has not completed
        """
        audit = await self.get_audit(audit_id)
        return build_report(audit)

    def close(self) -> None:
        self.store.close()
