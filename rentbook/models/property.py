"""Property ORM model: the billing context that owns bills."""

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentbook.models import Base, BaseModel


class Property(Base, BaseModel):
    """A rented property. One property accumulates many bills over time."""

    __tablename__ = "properties"

    property_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    owner_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Display name of the landlord",
    )

    # Short code tenants use to connect to the property
    property_code: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        unique=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        index=True,
    )

    bills: Mapped[list["Bill"]] = relationship(  # noqa: F821
        "Bill",
        back_populates="property",
    )

    __table_args__ = (Index("idx_property_code", "property_code"),)

    def __repr__(self) -> str:
        return (
            f"<Property(id={self.id}, property_name={self.property_name}, "
            f"property_code={self.property_code}, is_active={self.is_active})>"
        )


__all__ = ["Property"]
