from dataclasses import FrozenInstanceError
from types import SimpleNamespace

import pytest

from checkin.services.authority import (
    Principal,
    Tier,
    authorize,
    changed_privilege_fields,
    effective_tier,
    require_tier,
    required_tier_for_update,
)
from checkin.utils.errors import Forbidden, Unauthenticated

USER = Principal(account_id="u1", role="user")
ADMIN = Principal(account_id="a1", role="admin")
SUPER = Principal(account_id="s1", role="admin", is_super_admin=True)


def account(role="user", is_super_admin=False, email="x@example.com"):
    return SimpleNamespace(role=role, is_super_admin=is_super_admin, email=email, password=None)


def test_effective_tier():
    assert effective_tier("user", False) is Tier.USER
    assert effective_tier("admin", False) is Tier.ADMIN
    assert effective_tier("admin", True) is Tier.SUPER_ADMIN


def test_super_admin_flag_without_admin_role_grants_nothing():
    assert effective_tier("user", True) is Tier.USER


def test_tiers_are_ordered():
    assert Tier.USER < Tier.ADMIN < Tier.SUPER_ADMIN


@pytest.mark.parametrize(
    "principal,required,allowed",
    [
        (USER, Tier.USER, True),
        (USER, Tier.ADMIN, False),
        (ADMIN, Tier.ADMIN, True),
        (ADMIN, Tier.SUPER_ADMIN, False),
        (SUPER, Tier.ADMIN, True),
        (SUPER, Tier.SUPER_ADMIN, True),
    ],
)
def test_authorize(principal, required, allowed):
    assert authorize(principal, required).allowed is allowed


def test_authorize_reasons():
    assert authorize(None, Tier.USER).reason == "Authentication required"
    assert authorize(USER, Tier.ADMIN).reason == "Admin access required"
    assert authorize(ADMIN, Tier.SUPER_ADMIN).reason == "Super admin access required"


def test_require_tier_raises():
    with pytest.raises(Unauthenticated):
        require_tier(None, Tier.USER)
    with pytest.raises(Forbidden) as exc_info:
        require_tier(ADMIN, Tier.SUPER_ADMIN)
    assert exc_info.value.status_code == 403
    assert require_tier(SUPER, Tier.SUPER_ADMIN) is SUPER


def test_principal_is_immutable():
    with pytest.raises(FrozenInstanceError):
        USER.role = "admin"


def test_ordinary_fields_need_admin():
    assert required_tier_for_update(account(), {"name": "New", "strikes": 2}) is Tier.ADMIN


def test_promotion_needs_super_admin():
    assert required_tier_for_update(account(), {"role": "admin"}) is Tier.SUPER_ADMIN


def test_demotion_needs_super_admin():
    target = account(role="admin")
    assert required_tier_for_update(target, {"role": "user"}) is Tier.SUPER_ADMIN


def test_super_admin_flag_needs_super_admin():
    target = account(role="admin")
    assert required_tier_for_update(target, {"is_super_admin": True}) is Tier.SUPER_ADMIN


def test_unchanged_privilege_fields_are_not_escalation():
    target = account(role="admin")
    changes = {"role": "admin", "is_super_admin": False, "name": "Same"}

    assert changed_privilege_fields(target, changes) == []
    assert required_tier_for_update(target, changes) is Tier.ADMIN


def test_credentials_of_super_admin_need_super_admin():
    target = account(role="admin", is_super_admin=True, email="root@example.com")

    assert required_tier_for_update(target, {"password": "new-password"}) is Tier.SUPER_ADMIN
    assert required_tier_for_update(target, {"email": "other@example.com"}) is Tier.SUPER_ADMIN
    assert required_tier_for_update(target, {"email": "root@example.com"}) is Tier.ADMIN
    assert required_tier_for_update(target, {"strikes": 1}) is Tier.ADMIN


def test_credentials_of_plain_user_need_admin():
    assert required_tier_for_update(account(), {"password": "new-password"}) is Tier.ADMIN
