"""Payment summary derived from a bill and its payment claims.

Recomputed from scratch on every call: nothing is accumulated on the bill, so the
summary can never drift from the claim list.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, NamedTuple, Optional

from rentbook.models.payment_claim import ClaimStatus, PartyRole, PaymentClaim
from rentbook.services.bill_calculator import ZERO, as_decimal
from rentbook.services.validation import EvidenceRef

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class PaymentHistoryEntry(NamedTuple):
    """A verified claim with the balance left after it was applied."""

    claim_id: int
    amount: Decimal
    payer: PartyRole
    paid_at: Optional[datetime]
    remarks: str
    remaining_amount: Decimal
    evidence: Optional[EvidenceRef]


class PaymentSummary(NamedTuple):
    """Derived payment state of a bill."""

    total_paid: Decimal
    remaining_amount: Decimal
    pending_claims: list[PaymentClaim]
    history: list[PaymentHistoryEntry]
    is_settled: bool


def _as_utc(value: Optional[datetime]) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def claim_evidence(claim: PaymentClaim) -> Optional[EvidenceRef]:
    """Evidence descriptor of a claim, or None when nothing was attached."""
    if not claim.proof_url:
        return None
    return EvidenceRef(url=claim.proof_url, mime_type=claim.proof_mime_type, name=claim.proof_name)


def _verification_order(claim: PaymentClaim) -> tuple:
    return (_as_utc(claim.verified_at or claim.claimed_at), claim.id or 0)


def get_bill_payment_summary(bill: Any) -> PaymentSummary:
    """Summarize payments for a bill.

    - total_paid: sum of verified claim amounts
    - remaining_amount: max(0, total - total_paid)
    - pending_claims: pending claims, most recently submitted first
    - history: verified claims, most recently verified first, each carrying the
      remaining amount right after it was applied
    """
    total = max(as_decimal(bill.total), ZERO)
    claims = list(bill.claims or [])

    verified = sorted(
        (claim for claim in claims if claim.status == ClaimStatus.VERIFIED),
        key=_verification_order,
    )

    history: list[PaymentHistoryEntry] = []
    running_paid = ZERO
    for claim in verified:
        amount = as_decimal(claim.amount)
        running_paid += amount
        history.append(
            PaymentHistoryEntry(
                claim_id=claim.id,
                amount=amount,
                payer=claim.payer,
                paid_at=claim.verified_at or claim.claimed_at,
                remarks=claim.remarks or "",
                remaining_amount=max(total - running_paid, ZERO),
                evidence=claim_evidence(claim),
            )
        )
    history.reverse()

    pending_claims = sorted(
        (claim for claim in claims if claim.status == ClaimStatus.PENDING),
        key=lambda claim: (_as_utc(claim.claimed_at), claim.id or 0),
        reverse=True,
    )

    remaining_amount = max(total - running_paid, ZERO)

    return PaymentSummary(
        total_paid=running_paid,
        remaining_amount=remaining_amount,
        pending_claims=pending_claims,
        history=history,
        is_settled=remaining_amount == ZERO and (total > ZERO or bool(history)),
    )


__all__ = [
    "PaymentHistoryEntry",
    "PaymentSummary",
    "claim_evidence",
    "get_bill_payment_summary",
]
