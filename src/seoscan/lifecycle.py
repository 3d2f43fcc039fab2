"""Audit lifecycle state machine.

Legal transitions are listed once in ``TRANSITIONS``; every status change
goes through ``ensure_transition`` instead of comparing status strings at
call sites.
"""

from seoscan.exceptions import PreconditionError
from seoscan.models import AuditStatus


TRANSITIONS: dict[AuditStatus, frozenset[AuditStatus]] = {
    AuditStatus.PENDING: frozenset({AuditStatus.PROCESSING}),
    AuditStatus.PROCESSING: frozenset({AuditStatus.COMPLETED, AuditStatus.FAILED}),
    # Explicit re-run of a failed audit
    AuditStatus.FAILED: frozenset({AuditStatus.PROCESSING}),
    AuditStatus.COMPLETED: frozenset(),
}


def can_transition(current: AuditStatus, target: AuditStatus) -> bool:
    return target in TRANSITIONS.get(AuditStatus(current), frozenset())


def ensure_transition(audit_id: str, current: AuditStatus, target: AuditStatus) -> None:
    """Reject an illegal status change.

    Raises:
        PreconditionError: If ``current -> target`` is not in the table
    """
    current = AuditStatus(current)
    target = AuditStatus(target)
    if not can_transition(current, target):
        if target == AuditStatus.PROCESSING:
            raise PreconditionError(
                f"Audit {audit_id} cannot be started: status is {current.value}"
            )
        raise PreconditionError(
            f"Audit {audit_id} cannot move from {current.value} to {target.value}"
        )
