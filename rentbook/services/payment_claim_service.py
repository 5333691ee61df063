"""Payment claim ledger: submission and counter-party verification of payments.

Claims are append-only. The single allowed transition, pending -> verified, is
applied with an UPDATE guarded by the pending status, so two racing verifiers
cannot both count the same payment.
"""

import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentbook.errors import (
    ClaimAlreadyProcessedError,
    ClaimNotFoundError,
    ForbiddenError,
    InvalidStatusTransitionError,
    ValidationError,
)
from rentbook.models import utcnow
from rentbook.models.bill import Bill, BillStatus
from rentbook.models.payment_claim import ClaimStatus, PartyRole, PaymentClaim
from rentbook.services.audit_service import AuditService
from rentbook.services.bills_service import BillsService
from rentbook.services.validation import (
    EvidenceRef,
    parse_paid_amount,
    require_id,
    validate_evidence,
)

logger = logging.getLogger(__name__)


def _as_role(value: Any, message: str) -> PartyRole:
    try:
        return PartyRole(value)
    except ValueError as e:
        raise ValidationError(message) from e


class PaymentClaimService:
    """Async service for the payment claim workflow."""

    def __init__(self, session: AsyncSession):
        """Initialize with async database session."""
        self.session = session
        self.bills = BillsService(session)

    async def submit_bill_payment_claim(
        self,
        bill_id: int,
        amount_paid: Any,
        remarks: str | None,
        payer: PartyRole | str,
        evidence: EvidenceRef | None = None,
        actor_id: str | None = None,
    ) -> Bill:
        """Record a pending payment claim against a bill.

        The claim does not affect the remaining amount until it is verified.

        Args:
            bill_id: Target bill
            amount_paid: Claimed amount, must be a finite number > 0
            remarks: Optional free text
            payer: Side making the payment ("tenant" or "owner")
            evidence: Optional uploaded evidence (PDF or image)
            actor_id: Identity of the submitting actor

        Returns:
            The bill with the new pending claim

        Raises:
            ValidationError: Bad amount, payer or evidence
            BillNotFoundError: If the bill does not exist
            InvalidStatusTransitionError: If the bill is cancelled
        """
        require_id(bill_id, "Valid bill ID is required.")
        amount = parse_paid_amount(amount_paid)
        payer_role = _as_role(payer, "Payer must be tenant or owner.")
        validate_evidence(evidence)

        bill = await self.bills.get_bill(bill_id)
        if bill.status == BillStatus.CANCELLED:
            raise InvalidStatusTransitionError("Cannot record a payment on a cancelled bill.")

        claim = PaymentClaim(
            bill_id=bill.id,
            amount=amount,
            payer=payer_role,
            submitted_by=actor_id,
            remarks=(remarks or "").strip(),
            proof_url=evidence.url.strip() if evidence else None,
            proof_mime_type=evidence.mime_type if evidence else None,
            proof_name=evidence.name if evidence else None,
            claimed_at=utcnow(),
            status=ClaimStatus.PENDING,
        )

        try:
            self.session.add(claim)
            await self.session.flush()

            AuditService.log(
                session=self.session,
                entity_type="payment_claim",
                entity_id=claim.id,
                action="submit",
                actor_id=actor_id,
                changes={"bill_id": bill.id, "amount": amount, "payer": payer_role},
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Payment claim %d submitted on bill %d: amount=%s payer=%s",
            claim.id,
            bill.id,
            amount,
            payer_role.value,
        )
        return await self.bills.get_bill(bill.id)

    async def verify_bill_payment_claim(
        self,
        bill_id: int,
        claim_id: int,
        verifier: PartyRole | str,
        approve: bool = True,
        actor_id: str | None = None,
    ) -> Bill:
        """Confirm a pending claim on behalf of the counter-party.

        Verification never changes the bill status; use BillsService.mark_bill_paid
        once the payment summary reports the bill as settled.

        Args:
            bill_id: Bill the claim belongs to
            claim_id: Claim to verify
            verifier: Side confirming the payment (must not be the payer)
            approve: Must be True; rejecting claims is not supported
            actor_id: Identity of the verifying actor

        Returns:
            The bill with the claim verified

        Raises:
            ValidationError: approve is False or verifier is not a role
            BillNotFoundError / ClaimNotFoundError: Unknown bill or claim
            ForbiddenError: Verifier is the same side as the payer
            ClaimAlreadyProcessedError: Claim is not pending (also on a lost race)
            InvalidStatusTransitionError: Bill is cancelled
        """
        require_id(bill_id, "Valid bill ID is required.")
        require_id(claim_id, "Payment claim ID is required.")
        verifier_role = _as_role(verifier, "Verifier must be tenant or owner.")
        if not approve:
            raise ValidationError("Rejecting payment claims is not supported.")

        bill = await self.bills.get_bill(bill_id)
        if bill.status == BillStatus.CANCELLED:
            raise InvalidStatusTransitionError("Cannot verify a payment on a cancelled bill.")

        result = await self.session.execute(
            select(PaymentClaim)
            .where(PaymentClaim.id == claim_id, PaymentClaim.bill_id == bill_id)
            .execution_options(populate_existing=True)
        )
        claim = result.scalar_one_or_none()
        if claim is None:
            raise ClaimNotFoundError()
        if claim.status != ClaimStatus.PENDING:
            logger.warning("Rejected repeat verification of claim %d on bill %d", claim_id, bill_id)
            raise ClaimAlreadyProcessedError()
        if claim.payer == verifier_role:
            raise ForbiddenError(
                f"A payment claimed by the {claim.payer.value} must be verified by the "
                f"{claim.payer.counterparty.value}."
            )

        verified_at = utcnow()
        stmt = (
            update(PaymentClaim)
            .where(
                PaymentClaim.id == claim_id,
                PaymentClaim.bill_id == bill_id,
                PaymentClaim.status == ClaimStatus.PENDING,
            )
            .values(
                status=ClaimStatus.VERIFIED,
                verified_by=verifier_role,
                verifier_id=actor_id,
                verified_at=verified_at,
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                await self.session.rollback()
                logger.warning("Claim %d on bill %d was verified concurrently", claim_id, bill_id)
                raise ClaimAlreadyProcessedError()

            await self.session.execute(
                update(Bill)
                .where(Bill.id == bill_id)
                .values(
                    payment_method=claim.payer.value,
                    proof_url=claim.proof_url or bill.proof_url,
                )
                .execution_options(synchronize_session=False)
            )

            AuditService.log(
                session=self.session,
                entity_type="payment_claim",
                entity_id=claim_id,
                action="verify",
                actor_id=actor_id,
                changes={
                    "bill_id": bill_id,
                    "amount": claim.amount,
                    "verified_by": verifier_role,
                },
            )
            await self.session.commit()
        except ClaimAlreadyProcessedError:
            raise
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Payment claim %d on bill %d verified by %s: amount=%s",
            claim_id,
            bill_id,
            verifier_role.value,
            claim.amount,
        )
        return await self.bills.get_bill(bill_id)


__all__ = ["PaymentClaimService"]
