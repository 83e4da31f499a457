"""Role tiers and authorization guards"""

from checkin.services.authority.role_authority import (
    Decision,
    Principal,
    Tier,
    authorize,
    changed_privilege_fields,
    effective_tier,
    require_tier,
    required_tier_for_update,
)

__all__ = [
    "Decision",
    "Principal",
    "Tier",
    "authorize",
    "changed_privilege_fields",
    "effective_tier",
    "require_tier",
    "required_tier_for_update",
]
