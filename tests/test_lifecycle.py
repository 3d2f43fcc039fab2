"""Tests for the audit state machine."""

import pytest

from seoscan.exceptions import PreconditionError
from seoscan.lifecycle import can_transition, ensure_transition
from seoscan.models import AuditStatus

PENDING = AuditStatus.PENDING
PROCESSING = AuditStatus.PROCESSING
COMPLETED = AuditStatus.COMPLETED
FAILED = AuditStatus.FAILED


@pytest.mark.parametrize("current,target", [
    (PENDING, PROCESSING),
    (PROCESSING, COMPLETED),
    (PROCESSING, FAILED),
    (FAILED, PROCESSING),
])
def test_legal_transitions(current, target):
    assert can_transition(current, target)
    ensure_transition("aud_1", current, target)


@pytest.mark.parametrize("current,target", [
    (PENDING, COMPLETED),
    (PENDING, FAILED),
    (PROCESSING, PROCESSING),
    (COMPLETED, PROCESSING),
    (COMPLETED, FAILED),
    (FAILED, COMPLETED),
])
def test_illegal_transitions(current, target):
    assert not can_transition(current, target)
    with pytest.raises(PreconditionError):
        ensure_transition("aud_1", current, target)


def test_start_rejection_message():
    with pytest.raises(PreconditionError) as exc_info:
        ensure_transition("aud_1", PROCESSING, PROCESSING)
    assert exc_info.value.message == "Audit aud_1 cannot be started: status is processing"


def test_other_rejection_message():
    with pytest.raises(PreconditionError) as exc_info:
        ensure_transition("aud_1", PENDING, COMPLETED)
    assert exc_info.value.message == "Audit aud_1 cannot move from pending to completed"


def test_accepts_plain_strings():
    assert can_transition("pending", "processing")
