"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class BaseModel:
    """Base model with common timestamp fields."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from rentbook.models.audit_log import AuditLog  # noqa: E402
from rentbook.models.bill import Bill, BillStatus  # noqa: E402
from rentbook.models.payment_claim import ClaimStatus, PartyRole, PaymentClaim  # noqa: E402
from rentbook.models.property import Property  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "utcnow",
    "AuditLog",
    "Bill",
    "BillStatus",
    "ClaimStatus",
    "PartyRole",
    "PaymentClaim",
    "Property",
]
