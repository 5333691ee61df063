"""Bill creation, lookup and lifecycle transitions."""

import logging
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rentbook.config import get_settings
from rentbook.errors import (
    BillNotFoundError,
    BillNotSettledError,
    InvalidStatusTransitionError,
)
from rentbook.models import utcnow
from rentbook.models.bill import Bill, BillStatus
from rentbook.services.audit_service import AuditService
from rentbook.services.bill_calculator import (
    AdHocCharge,
    Breakdown,
    FixedCharge,
    MeteredCharge,
    compute_bill_total,
)
from rentbook.services.payment_summary import get_bill_payment_summary
from rentbook.services.property_service import PropertyService
from rentbook.services.validation import (
    MONEY_QUANTUM,
    BillInput,
    MeterReadingInput,
    require_id,
    require_money,
    require_non_negative,
    validate_bill_input,
    validate_meter_readings,
)

logger = logging.getLogger(__name__)

# Allowed status changes; paid and cancelled are terminal
ALLOWED_TRANSITIONS: dict[BillStatus, frozenset[BillStatus]] = {
    BillStatus.PENDING: frozenset({BillStatus.PAID, BillStatus.OVERDUE, BillStatus.CANCELLED}),
    BillStatus.OVERDUE: frozenset({BillStatus.PAID, BillStatus.CANCELLED}),
    BillStatus.PAID: frozenset(),
    BillStatus.CANCELLED: frozenset(),
}


def _metered(readings: MeterReadingInput | None, label: str) -> MeteredCharge | FixedCharge:
    if readings is None:
        return FixedCharge()
    previous, current, rate = validate_meter_readings(readings, label)
    return MeteredCharge(previous_reading=previous, current_reading=current, rate=rate)


def build_breakdown(bill_input: BillInput, penalty_rate: Decimal) -> Breakdown:
    """Build the Breakdown for a validated bill form.

    Without an explicit penalty, the penalty is due * penalty_rate rounded to the
    money scale, so the stored breakdown sums exactly to the stored total.
    """
    due = require_non_negative(bill_input.due, "Due")
    if bill_input.penalty is None:
        penalty = (due * penalty_rate).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
    else:
        penalty = require_non_negative(bill_input.penalty, "Penalty")

    return Breakdown(
        base_rent=require_non_negative(bill_input.base_rent, "Base rent"),
        electricity=_metered(bill_input.electricity, "Electricity"),
        water=_metered(bill_input.water, "Water"),
        internet=require_non_negative(bill_input.internet, "Internet"),
        due=due,
        penalty=penalty,
        others=tuple(
            AdHocCharge(charge.name.strip(), require_non_negative(charge.amount, "Other charge amount"))
            for charge in bill_input.other_charges
        ),
    )


class BillsService:
    """Async service for bill database operations.

    Encapsulates Bill persistence and the bill status lifecycle.
    Used by the payment claim service and the API endpoints.
    """

    def __init__(self, session: AsyncSession):
        """Initialize with async database session."""
        self.session = session

    async def create_bill(self, bill_input: BillInput, actor_id: str | None = None) -> Bill:
        """Validate a bill form and persist a pending bill.

        Args:
            bill_input: Bill creation form
            actor_id: Identity of the owner creating the bill (for audit)

        Returns:
            Created Bill with its (empty) claim list loaded

        Raises:
            ValidationError: If any field is invalid
            PropertyNotFoundError: If the property does not exist
        """
        validate_bill_input(bill_input)

        property_obj = await PropertyService(self.session).get_property(bill_input.property_id)

        breakdown = build_breakdown(bill_input, get_settings().default_penalty_rate)
        total = require_money(compute_bill_total(breakdown), "Bill total")

        bill = Bill(
            property_id=property_obj.id,
            property_name=bill_input.property_name.strip(),
            tenant_name=bill_input.tenant_name.strip(),
            tenant_email=(bill_input.tenant_email or "").strip() or None,
            billing_period=bill_input.billing_period.strip(),
            base_rent=breakdown.base_rent,
            breakdown=breakdown.to_dict(),
            total=total,
            status=BillStatus.PENDING,
        )

        try:
            self.session.add(bill)
            await self.session.flush()

            AuditService.log(
                session=self.session,
                entity_type="bill",
                entity_id=bill.id,
                action="create",
                actor_id=actor_id,
                changes={
                    "property_id": bill.property_id,
                    "billing_period": bill.billing_period,
                    "total": total,
                },
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Created bill %d for property %d (%s): total=%s",
            bill.id,
            bill.property_id,
            bill.billing_period,
            total,
        )
        return await self.get_bill(bill.id)

    async def get_bill(self, bill_id: int) -> Bill:
        """Get a bill with its payment claims.

        Raises:
            ValidationError: If bill_id is not a positive integer
            BillNotFoundError: If no such bill exists
        """
        require_id(bill_id, "Valid bill ID is required.")
        stmt = (
            select(Bill)
            .options(selectinload(Bill.claims))
            .where(Bill.id == bill_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        bill = result.scalar_one_or_none()
        if bill is None:
            raise BillNotFoundError()
        return bill

    async def list_bills(
        self,
        property_id: int | None = None,
        status: BillStatus | None = None,
        billing_period: str | None = None,
    ) -> list[Bill]:
        """List bills, newest first, optionally filtered."""
        stmt = select(Bill).options(selectinload(Bill.claims))
        if property_id is not None:
            stmt = stmt.where(Bill.property_id == property_id)
        if status is not None:
            stmt = stmt.where(Bill.status == status)
        if billing_period:
            stmt = stmt.where(Bill.billing_period == billing_period.strip())
        stmt = stmt.order_by(Bill.created_at.desc(), Bill.id.desc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def transition_bill_status(
        self,
        bill_id: int,
        new_status: BillStatus,
        actor_id: str | None = None,
    ) -> Bill:
        """Move a bill to a new lifecycle status.

        Moving to PAID requires a zero remaining balance. The update is guarded by
        the status read here, so a concurrent transition makes this one fail.

        Raises:
            BillNotFoundError: If the bill does not exist
            InvalidStatusTransitionError: If the transition is not allowed
            BillNotSettledError: If marking paid with a remaining balance
        """
        bill = await self.get_bill(bill_id)
        current_status = bill.status

        if new_status not in ALLOWED_TRANSITIONS[current_status]:
            logger.warning(
                "Rejected bill %d status change %s -> %s",
                bill_id,
                current_status.value,
                new_status.value,
            )
            raise InvalidStatusTransitionError(
                f"Cannot change bill status from {current_status.value} to {new_status.value}."
            )

        values: dict = {"status": new_status}
        if new_status == BillStatus.PAID:
            summary = get_bill_payment_summary(bill)
            if summary.remaining_amount > 0:
                raise BillNotSettledError(
                    f"Bill still has a remaining amount of {summary.remaining_amount}."
                )
            values["paid_at"] = utcnow()

        stmt = (
            update(Bill)
            .where(Bill.id == bill_id, Bill.status == current_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                await self.session.rollback()
                raise InvalidStatusTransitionError(
                    "Bill status changed concurrently; reload and try again."
                )

            AuditService.log(
                session=self.session,
                entity_type="bill",
                entity_id=bill_id,
                action="status",
                actor_id=actor_id,
                changes={"from": current_status, "to": new_status},
            )
            await self.session.commit()
        except InvalidStatusTransitionError:
            raise
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Bill %d status %s -> %s", bill_id, current_status.value, new_status.value)
        return await self.get_bill(bill_id)

    async def mark_bill_paid(self, bill_id: int, actor_id: str | None = None) -> Bill:
        """Mark a fully settled bill as paid."""
        return await self.transition_bill_status(bill_id, BillStatus.PAID, actor_id)

    async def mark_bill_overdue(self, bill_id: int, actor_id: str | None = None) -> Bill:
        """Mark a pending bill as overdue."""
        return await self.transition_bill_status(bill_id, BillStatus.OVERDUE, actor_id)

    async def cancel_bill(self, bill_id: int, actor_id: str | None = None) -> Bill:
        """Cancel a bill that has not been paid."""
        return await self.transition_bill_status(bill_id, BillStatus.CANCELLED, actor_id)


__all__ = ["ALLOWED_TRANSITIONS", "BillsService", "build_breakdown"]
