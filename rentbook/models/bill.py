"""Bill ORM model: one billing cycle for a tenant at a property."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentbook.models import Base, BaseModel


class BillStatus(str, Enum):
    """Lifecycle status of a bill."""

    PENDING = "pending"
    """Issued, awaiting settlement"""

    PAID = "paid"
    """Fully settled (terminal)"""

    OVERDUE = "overdue"
    """Past due date, still awaiting settlement"""

    CANCELLED = "cancelled"
    """Withdrawn by the owner (terminal, never re-opened)"""


class Bill(Base, BaseModel):
    """
    Bill issued by an owner to a tenant for one billing period.

    The itemized charges live in the breakdown JSON column; total is derived from it
    once, at creation. Payment claims never recompute total, they only reduce the
    remaining balance reported by the payment summary.
    """

    __tablename__ = "bills"

    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id"),
        nullable=False,
        index=True,
    )

    property_name: Mapped[str] = mapped_column(String(100), nullable=False)

    tenant_name: Mapped[str] = mapped_column(String(255), nullable=False)

    tenant_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    billing_period: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Billing period label (e.g., 'January 2026')",
    )

    base_rent: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)

    breakdown: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        comment="Itemized charges (see Breakdown.to_dict)",
    )

    total: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)

    status: Mapped[BillStatus] = mapped_column(
        nullable=False,
        default=BillStatus.PENDING,
        index=True,
    )

    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    payment_method: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        comment="Payer role of the last verified claim",
    )

    proof_url: Mapped[str | None] = mapped_column(
        String(1000),
        nullable=True,
        comment="Evidence URL of the last verified claim",
    )

    property: Mapped["Property"] = relationship(  # noqa: F821
        "Property",
        back_populates="bills",
    )

    claims: Mapped[list["PaymentClaim"]] = relationship(  # noqa: F821
        "PaymentClaim",
        back_populates="bill",
        order_by="PaymentClaim.id",
    )

    __table_args__ = (
        Index("idx_bill_property_period", "property_id", "billing_period"),
        Index("idx_bill_property_status", "property_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Bill(id={self.id}, property_id={self.property_id}, "
            f"billing_period={self.billing_period}, total={self.total}, status={self.status})>"
        )


__all__ = ["Bill", "BillStatus"]
