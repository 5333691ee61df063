"""Acting identity for API requests."""

from typing import NamedTuple

from fastapi import Header

from rentbook.errors import ForbiddenError, UnauthorizedError, raise_app_error
from rentbook.models.payment_claim import PartyRole


class Actor(NamedTuple):
    """Acting identity, passed explicitly with every request."""

    role: PartyRole
    actor_id: str | None


def get_actor(
    x_actor_role: str | None = Header(None),  # noqa: B008
    x_actor_id: str | None = Header(None),  # noqa: B008
) -> Actor:
    """Resolve the caller from X-Actor-Role / X-Actor-Id headers."""
    try:
        role = PartyRole((x_actor_role or "").strip().lower())
    except ValueError:
        raise_app_error(UnauthorizedError("X-Actor-Role header must be tenant or owner"))
    return Actor(role=role, actor_id=(x_actor_id or "").strip() or None)


def require_owner(actor: Actor) -> None:
    if actor.role != PartyRole.OWNER:
        raise ForbiddenError("Only the owner can perform this action.")


__all__ = ["Actor", "get_actor", "require_owner"]
