# lotbook/services/lot_decision.py

from __future__ import annotations

from lotbook.enums import CookingStatus, LotDecision, WorkflowStatus
from lotbook.errors import InvalidTransition
from lotbook.services.validation import FieldChecker

_AFTER_DECISION = {
    LotDecision.PASS_NO_COOK: WorkflowStatus.PRICING,
    LotDecision.PASS_WITH_COOK: WorkflowStatus.COOKING,
    LotDecision.FAIL: WorkflowStatus.FAILED,
}

_AFTER_COOKING = {
    CookingStatus.PASS: WorkflowStatus.PRICING,
    CookingStatus.FAIL: WorkflowStatus.FAILED,
    CookingStatus.RECHECK: WorkflowStatus.COOKING,
}


def parse_decision(value) -> LotDecision:
    chk = FieldChecker()
    decision = chk.choice(value, LotDecision, "decision")
    chk.raise_if_errors()
    return decision


def decide(entry, decision: LotDecision) -> WorkflowStatus:
    """
    Owner decision on a graded sample.
      PASS_NO_COOK   -> PRICING (no cooking report)
      PASS_WITH_COOK -> COOKING (a cooking report must follow)
      FAIL           -> FAILED  (terminal)
    """
    if entry.grading is None:
        raise InvalidTransition("lot decision needs the grading result first", {"entry_id": entry.id})
    return _AFTER_DECISION[LotDecision(decision)]


def next_status_after_cooking(status) -> WorkflowStatus:
    """
    MEDIUM is read as PASS and moves the lot on to pricing like a PASS.
    RECHECK keeps the lot in COOKING until another report is recorded.
    """
    st = CookingStatus(status)
    if st == CookingStatus.MEDIUM:
        st = CookingStatus.PASS
    return _AFTER_COOKING[st]
