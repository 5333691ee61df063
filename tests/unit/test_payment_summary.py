"""Unit tests for payment_summary.py (pure, in-memory claims)."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

from rentbook.models.payment_claim import ClaimStatus, PartyRole, PaymentClaim
from rentbook.services.payment_summary import get_bill_payment_summary

T0 = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def make_claim(claim_id, amount, minutes, status=ClaimStatus.PENDING, verified_minutes=None, **extra):
    claim = PaymentClaim(
        id=claim_id,
        bill_id=1,
        amount=Decimal(amount),
        payer=extra.pop("payer", PartyRole.TENANT),
        remarks=extra.pop("remarks", ""),
        claimed_at=T0 + timedelta(minutes=minutes),
        status=status,
        **extra,
    )
    if verified_minutes is not None:
        claim.verified_at = T0 + timedelta(minutes=verified_minutes)
        claim.verified_by = PartyRole.OWNER
    return claim


def make_bill(total, claims):
    return SimpleNamespace(total=Decimal(total), claims=claims)


class TestPaymentSummary:
    """Tests for get_bill_payment_summary."""

    def test_no_claims(self):
        summary = get_bill_payment_summary(make_bill("1710", []))

        assert summary.total_paid == Decimal("0")
        assert summary.remaining_amount == Decimal("1710")
        assert summary.pending_claims == []
        assert summary.history == []
        assert summary.is_settled is False

    def test_pending_claim_does_not_reduce_balance(self):
        summary = get_bill_payment_summary(make_bill("1710", [make_claim(1, "1000", 0)]))

        assert summary.total_paid == Decimal("0")
        assert summary.remaining_amount == Decimal("1710")
        assert [c.id for c in summary.pending_claims] == [1]

    def test_partial_then_full_payment(self):
        first = make_claim(1, "1000", 0, ClaimStatus.VERIFIED, verified_minutes=10)
        summary = get_bill_payment_summary(make_bill("1710", [first]))

        assert summary.total_paid == Decimal("1000")
        assert summary.remaining_amount == Decimal("710")
        assert len(summary.history) == 1
        assert summary.history[0].remaining_amount == Decimal("710")

        second = make_claim(2, "710", 20, ClaimStatus.VERIFIED, verified_minutes=30)
        summary = get_bill_payment_summary(make_bill("1710", [first, second]))

        assert summary.total_paid == Decimal("1710")
        assert summary.remaining_amount == Decimal("0")
        assert summary.is_settled is True
        # Most recent first, each with the balance left right after it
        assert [(e.claim_id, e.remaining_amount) for e in summary.history] == [
            (2, Decimal("0")),
            (1, Decimal("710")),
        ]

    def test_history_follows_verification_order(self):
        """A claim submitted earlier but verified later is applied later."""
        early = make_claim(1, "300", 0, ClaimStatus.VERIFIED, verified_minutes=50)
        late = make_claim(2, "200", 10, ClaimStatus.VERIFIED, verified_minutes=20)
        summary = get_bill_payment_summary(make_bill("1000", [early, late]))

        assert [(e.claim_id, e.remaining_amount) for e in summary.history] == [
            (1, Decimal("500")),
            (2, Decimal("800")),
        ]
        assert summary.history[0].paid_at == T0 + timedelta(minutes=50)

    def test_overpayment_floors_at_zero(self):
        claims = [
            make_claim(1, "1500", 0, ClaimStatus.VERIFIED, verified_minutes=1),
            make_claim(2, "500", 2, ClaimStatus.VERIFIED, verified_minutes=3),
        ]
        summary = get_bill_payment_summary(make_bill("1710", claims))

        assert summary.total_paid == Decimal("2000")
        assert summary.remaining_amount == Decimal("0")
        assert all(entry.remaining_amount >= 0 for entry in summary.history)

    def test_pending_claims_most_recent_first(self):
        claims = [make_claim(1, "10", 0), make_claim(2, "20", 30), make_claim(3, "30", 15)]
        summary = get_bill_payment_summary(make_bill("100", claims))

        assert [c.id for c in summary.pending_claims] == [2, 3, 1]

    def test_rejected_claims_are_ignored(self):
        claims = [make_claim(1, "50", 0, ClaimStatus.REJECTED)]
        summary = get_bill_payment_summary(make_bill("100", claims))

        assert summary.total_paid == Decimal("0")
        assert summary.pending_claims == []
        assert summary.history == []

    def test_history_keeps_claim_details(self):
        claim = make_claim(
            1,
            "250",
            0,
            ClaimStatus.VERIFIED,
            verified_minutes=5,
            remarks="Bank transfer",
            proof_url="https://files.example/receipt.pdf",
            proof_mime_type="application/pdf",
            proof_name="receipt.pdf",
        )
        entry = get_bill_payment_summary(make_bill("250", [claim])).history[0]

        assert entry.amount == Decimal("250")
        assert entry.payer == PartyRole.TENANT
        assert entry.remarks == "Bank transfer"
        assert entry.evidence.url == "https://files.example/receipt.pdf"
        assert entry.evidence.mime_type == "application/pdf"
        assert entry.evidence.name == "receipt.pdf"

    def test_summary_is_repeatable(self):
        claims = [
            make_claim(1, "100", 0, ClaimStatus.VERIFIED, verified_minutes=1),
            make_claim(2, "40", 5),
        ]
        bill = make_bill("500", claims)

        assert get_bill_payment_summary(bill) == get_bill_payment_summary(bill)

    def test_naive_and_aware_timestamps_mix(self):
        """Rows read back from SQLite are naive; fresh objects are aware."""
        naive = make_claim(1, "10", 0)
        naive.claimed_at = naive.claimed_at.replace(tzinfo=None)
        aware = make_claim(2, "20", 5)
        summary = get_bill_payment_summary(make_bill("100", [naive, aware]))

        assert [c.id for c in summary.pending_claims] == [2, 1]
