"""Property registry: the billing contexts bills are issued under."""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rentbook.errors import PropertyCodeTakenError, PropertyNotFoundError, ValidationError
from rentbook.models.property import Property
from rentbook.services.audit_service import AuditService
from rentbook.services.validation import require_id, require_text

logger = logging.getLogger(__name__)

# Codes tenants type to join a property
PROPERTY_CODE_PATTERN = re.compile(r"[0-9]{10}")


@dataclass
class PropertyInput:
    """Property creation form."""

    property_name: str
    owner_name: Optional[str] = None
    property_code: Optional[str] = None


class PropertyService:
    """Async service for property database operations."""

    def __init__(self, session: AsyncSession):
        """Initialize with async database session."""
        self.session = session

    async def create_property(self, property_input: PropertyInput, actor_id: str | None = None) -> Property:
        """Register a property.

        Args:
            property_input: Name, optional owner display name and optional 10-digit code
            actor_id: Identity of the owner creating it (for audit)

        Returns:
            Created Property

        Raises:
            ValidationError: Blank name or malformed code
            PropertyCodeTakenError: Code already used by another property
        """
        name = require_text(property_input.property_name, "Property name is required.")
        owner_name = (property_input.owner_name or "").strip() or None
        code = (property_input.property_code or "").strip() or None
        if code is not None and not PROPERTY_CODE_PATTERN.fullmatch(code):
            raise ValidationError("Property code must be exactly 10 digits.")

        if code is not None:
            result = await self.session.execute(select(Property.id).where(Property.property_code == code))
            if result.scalar_one_or_none() is not None:
                raise PropertyCodeTakenError()

        prop = Property(property_name=name, owner_name=owner_name, property_code=code, is_active=True)
        try:
            self.session.add(prop)
            await self.session.flush()

            AuditService.log(
                session=self.session,
                entity_type="property",
                entity_id=prop.id,
                action="create",
                actor_id=actor_id,
                changes={"property_name": name, "property_code": code},
            )
            await self.session.commit()
        except IntegrityError as e:
            # Lost a race for the same code
            await self.session.rollback()
            raise PropertyCodeTakenError() from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Created property %d (%s)", prop.id, name)
        return prop

    async def get_property(self, property_id: int) -> Property:
        """Get a property by id.

        Raises:
            ValidationError: If property_id is not a positive integer
            PropertyNotFoundError: If no such property exists
        """
        require_id(property_id, "Valid property is required.")
        prop = await self.session.get(Property, property_id)
        if prop is None:
            raise PropertyNotFoundError(f"Property {property_id} not found.")
        return prop

    async def list_properties(self, include_inactive: bool = False) -> list[Property]:
        """List properties, newest first."""
        stmt = select(Property)
        if not include_inactive:
            stmt = stmt.where(Property.is_active.is_(True))
        stmt = stmt.order_by(Property.created_at.desc(), Property.id.desc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())


__all__ = ["PROPERTY_CODE_PATTERN", "PropertyInput", "PropertyService"]
