"""Payment claim ORM model: an append-only assertion that a payment was made."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentbook.models import Base, BaseModel, utcnow


class PartyRole(str, Enum):
    """Side of a bill an actor acts for."""

    TENANT = "tenant"
    OWNER = "owner"

    @property
    def counterparty(self) -> "PartyRole":
        return PartyRole.OWNER if self is PartyRole.TENANT else PartyRole.TENANT


class ClaimStatus(str, Enum):
    """Verification state of a payment claim."""

    PENDING = "pending"
    """Submitted, not yet counted toward the paid total"""

    VERIFIED = "verified"
    """Confirmed by the counter-party (terminal)"""

    REJECTED = "rejected"
    """Reserved for dispute handling; never assigned"""


class PaymentClaim(Base, BaseModel):
    """
    Payment claim submitted against a bill.

    Amount, payer, remarks and evidence are fixed at submission. The only mutation
    ever applied is the one-time pending -> verified transition.
    """

    __tablename__ = "payment_claims"

    bill_id: Mapped[int] = mapped_column(
        ForeignKey("bills.id"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)

    payer: Mapped[PartyRole] = mapped_column(nullable=False)

    submitted_by: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Identity of the submitting actor",
    )

    remarks: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    # Evidence reference
    proof_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    proof_mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    proof_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    claimed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    status: Mapped[ClaimStatus] = mapped_column(
        nullable=False,
        default=ClaimStatus.PENDING,
        index=True,
    )

    verified_by: Mapped[PartyRole | None] = mapped_column(nullable=True)

    verifier_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    bill: Mapped["Bill"] = relationship(  # noqa: F821
        "Bill",
        back_populates="claims",
    )

    __table_args__ = (Index("idx_claim_bill_status", "bill_id", "status"),)

    def __repr__(self) -> str:
        return (
            f"<PaymentClaim(id={self.id}, bill_id={self.bill_id}, amount={self.amount}, "
            f"payer={self.payer}, status={self.status})>"
        )


__all__ = ["ClaimStatus", "PartyRole", "PaymentClaim"]
