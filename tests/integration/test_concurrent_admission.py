"""
Concurrent admissions for one account must never exceed the role limit
"""

import asyncio

import pytest
from httpx import AsyncClient

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.admission_controller import AdmissionController
from src.domain.base import utcnow
from src.domain.client_meta import ClientMeta
from src.domain.session_policy import SessionPolicy

POLICY = SessionPolicy(
    roles={
        "admin": {"limit": 2, "ttl_seconds": 3600},
        "client": {"limit": 1, "ttl_seconds": 600},
    }
)


async def active_tokens(session_factory, account):
    async with session_factory() as session:
        uow = SqlAlchemyUnitOfWork(session)
        async with uow:
            active = await uow.sessions.list_active(
                account.id, POLICY.cutoff(account.role, utcnow())
            )
            return {s.session_token for s in active}


@pytest.mark.asyncio
@pytest.mark.parametrize("role_key,limit", [("admin", 2), ("client", 1)])
async def test_concurrent_admissions_respect_limit(session_factory, accounts, role_key, limit):
    account = accounts[role_key]

    async def admit(token):
        async with session_factory() as session:
            uow = SqlAlchemyUnitOfWork(session)
            async with uow:
                result = await AdmissionController(uow, POLICY).admit(
                    account.id, account.role, token, ClientMeta(device_id=token)
                )
                await uow.commit()
            return result

    tokens = [f"tab-{i}" for i in range(8)]
    results = await asyncio.gather(*(admit(t) for t in tokens))

    assert all(r.is_ok() for r in results)
    evicted = [t for r in results for t in r.value.evicted_tokens]
    assert len(evicted) == len(tokens) - limit
    assert len(set(evicted)) == len(evicted)

    active = await active_tokens(session_factory, account)
    assert len(active) == limit
    assert active == set(tokens) - set(evicted)


@pytest.mark.asyncio
@pytest.mark.parametrize("role_key,limit", [("admin", 2), ("client", 1)])
async def test_concurrent_logins_respect_limit(
    client: AsyncClient, per_request_sessions, session_factory, accounts, login, role_key, limit
):
    tokens = [f"tab-{i}" for i in range(8)]

    responses = await asyncio.gather(*(login(role_key, session_token=t) for t in tokens))

    assert [r.status_code for r in responses] == [200] * len(tokens)
    sessions = [r.json()["session"] for r in responses]
    assert sorted(s["session_token"] for s in sessions) == sorted(tokens)
    evicted = [t for s in sessions for t in s["evicted_tokens"]]
    assert len(evicted) == len(tokens) - limit
    assert len(set(evicted)) == len(evicted)

    active = await active_tokens(session_factory, accounts[role_key])
    assert active == set(tokens) - set(evicted)


@pytest.mark.asyncio
async def test_heartbeats_interleaved_with_other_account_logins(
    client: AsyncClient, per_request_sessions, session_factory, accounts, login, auth_headers
):
    admin = {}
    for token in ("adm-1", "adm-2"):
        admin[token] = (await login("admin", session_token=token)).json()

    heartbeats = [
        client.post("/sessions/heartbeat", headers=auth_headers(admin[token]))
        for token in ("adm-1", "adm-2")
        for _ in range(3)
    ]
    logins = [login("client", session_token=f"tab-{i}") for i in range(len(heartbeats))]
    work = [call for pair in zip(heartbeats, logins) for call in pair]

    responses = await asyncio.gather(*work)

    beats = responses[0::2]
    assert [r.status_code for r in beats] == [200] * len(beats)
    assert all(r.json()["alive"] is True for r in beats)
    assert await active_tokens(session_factory, accounts["admin"]) == {"adm-1", "adm-2"}
    assert len(await active_tokens(session_factory, accounts["client"])) == 1
