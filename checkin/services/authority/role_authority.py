"""Three-tier privilege model.

Tiers are ordered ``USER < ADMIN < SUPER_ADMIN``. Decisions here are pure
functions of the principal and the requested tier; nothing in this module
touches storage.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Mapping, Optional

from checkin.models.account import AccountRole
from checkin.utils.errors import Forbidden, Unauthenticated

logger = logging.getLogger(__name__)


class Tier(IntEnum):
    USER = 1
    ADMIN = 2
    SUPER_ADMIN = 3


@dataclass(frozen=True)
class Principal:
    """Identity and role snapshot taken when a session is resolved"""

    account_id: str
    role: str
    is_super_admin: bool = False

    @property
    def tier(self) -> Tier:
        return effective_tier(self.role, self.is_super_admin)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None


# Fields whose change is an escalation and needs SUPER_ADMIN
PRIVILEGE_FIELDS = ("role", "is_super_admin")

# Fields that would hand over control of the target account
CREDENTIAL_FIELDS = ("email", "password")


def effective_tier(role: str, is_super_admin: bool) -> Tier:
    """Map stored role flags to a tier.

    A super-admin flag on a non-admin row grants nothing beyond USER; the
    storage constraints keep that combination from existing.
    """
    if role == AccountRole.ADMIN.value:
        return Tier.SUPER_ADMIN if is_super_admin else Tier.ADMIN
    return Tier.USER


def authorize(principal: Optional[Principal], required: Tier) -> Decision:
    """Decide whether ``principal`` satisfies ``required``."""
    if principal is None:
        return Decision(False, "Authentication required")
    if principal.tier >= required:
        return Decision(True)
    if required is Tier.SUPER_ADMIN:
        return Decision(False, "Super admin access required")
    return Decision(False, "Admin access required")


def require_tier(principal: Optional[Principal], required: Tier) -> Principal:
    """Guard form of ``authorize``.

    Raises:
        Unauthenticated: If there is no principal
        Forbidden: If the principal's tier is too low
    """
    if principal is None:
        raise Unauthenticated()

    decision = authorize(principal, required)
    if not decision.allowed:
        logger.warning(
            f"Account {principal.account_id} ({principal.tier.name}) denied: "
            f"{required.name} required"
        )
        raise Forbidden(decision.reason)
    return principal


def changed_privilege_fields(current: Any, changes: Mapping[str, Any]) -> list[str]:
    """List the privilege fields whose requested value differs from ``current``."""
    return [
        field
        for field in PRIVILEGE_FIELDS
        if field in changes and changes[field] is not None
        and changes[field] != getattr(current, field)
    ]


def required_tier_for_update(current: Any, changes: Mapping[str, Any]) -> Tier:
    """Tier needed to apply ``changes`` to the account ``current``.

    Ordinary fields need ADMIN. Changing ``role`` or ``is_super_admin``
    needs SUPER_ADMIN, even for an acting admin. So does changing the email
    or password of a super-admin account, which would otherwise let an
    admin take that account over.
    """
    if changed_privilege_fields(current, changes):
        return Tier.SUPER_ADMIN
    if getattr(current, "is_super_admin", False) and any(
        changes.get(field) is not None and changes[field] != getattr(current, field, None)
        for field in CREDENTIAL_FIELDS
    ):
        return Tier.SUPER_ADMIN
    return Tier.ADMIN
