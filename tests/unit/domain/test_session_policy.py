from datetime import timedelta

import pytest
from pydantic import ValidationError

from config import ApplicationConfig
from src.domain.entities import AccountRole
from src.domain.session_policy import SessionPolicy


def test_from_config_defaults():
    policy = SessionPolicy.from_config(ApplicationConfig)

    assert policy.for_role("client").limit == 1
    assert policy.for_role("client").ttl == timedelta(minutes=10)
    assert policy.for_role("admin").limit == 2
    assert policy.for_role("admin").ttl == timedelta(days=30)
    assert policy.admits_missing_sessions is False


def test_enum_roles_and_case_are_normalized(policy):
    assert policy.for_role(AccountRole.admin).limit == 2
    assert policy.for_role(" ADMIN ").limit == 2


def test_unknown_role_uses_default_role(policy):
    assert policy.for_role("auditor") == policy.for_role("client")
    assert policy.for_role(None) == policy.for_role("client")


def test_cutoff_and_prune_horizon(policy, now):
    assert policy.cutoff("client", now) == now - timedelta(minutes=10)
    assert policy.prune_before("client", now) == now - timedelta(minutes=10) - timedelta(days=7)


@pytest.mark.parametrize(
    "roles",
    [
        {"client": {"limit": 0, "ttl_seconds": 600}},
        {"client": {"limit": 1, "ttl_seconds": 0}},
        {},
    ],
)
def test_invalid_policy_refuses_to_build(roles):
    with pytest.raises(ValidationError):
        SessionPolicy(roles=roles)


def test_default_role_must_have_an_entry():
    with pytest.raises(ValidationError):
        SessionPolicy(roles={"admin": {"limit": 2, "ttl_seconds": 60}}, default_role="client")


def test_missing_session_mode():
    roles = {"client": {"limit": 1, "ttl_seconds": 600}}

    assert SessionPolicy(roles=roles, missing_session="ADMIT").admits_missing_sessions is True
    with pytest.raises(ValidationError):
        SessionPolicy(roles=roles, missing_session="sometimes")
