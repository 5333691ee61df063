"""Audit service for logging bill and payment-claim lifecycle events."""

from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from rentbook.models.audit_log import AuditLog


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


class AuditService:
    """Service for audit log operations.

    Entries are added to the caller's session and committed with the change they
    describe, so an audit row never outlives a rolled-back change.
    """

    @staticmethod
    def log(
        session: AsyncSession,
        entity_type: str,
        entity_id: int,
        action: str,
        actor_id: str | None = None,
        changes: dict | None = None,
    ) -> AuditLog:
        """Create audit log entry (one-liner).

        Args:
            session: Database session
            entity_type: Type of entity ("bill", "payment_claim")
            entity_id: Primary key of the entity
            action: Action performed ("create", "submit", "verify", "status")
            actor_id: Identity of the caller (optional)
            changes: Optional snapshot of changed fields; Decimals and enums are stringified

        Returns:
            Created AuditLog object
        """
        audit = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor_id=actor_id,
            changes={key: _jsonable(value) for key, value in changes.items()} if changes else None,
        )
        session.add(audit)
        return audit


__all__ = ["AuditService"]
