import pytest

from src.client.local_store import LocalStore
from src.client.mirror import SessionMirror


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def store():
    return LocalStore()


@pytest.fixture
def fake_clock():
    return FakeClock()


def make_tab(store, clock, limit=1, ttl_seconds=600, logouts=None):
    return SessionMirror(
        store,
        account_id="acc-1",
        limit=limit,
        ttl_seconds=ttl_seconds,
        on_forced_logout=(logouts.append if logouts is not None else None),
        clock=clock,
    )


def test_login_in_second_tab_forces_first_tab_out(store, fake_clock):
    logouts_a, logouts_b = [], []
    tab_a = make_tab(store, fake_clock, logouts=logouts_a)
    tab_b = make_tab(store, fake_clock, logouts=logouts_b)

    tab_a.record_login("tok-a")
    fake_clock.now += 5
    removed = tab_b.record_login("tok-b")

    assert removed == ["tok-a"]
    assert logouts_a == ["evicted"]
    assert logouts_b == []
    assert tab_a.may_continue() is False
    assert tab_b.may_continue() is True


def test_limit_two_evicts_least_recently_active(store, fake_clock):
    logouts = {"a": [], "b": [], "c": []}
    tabs = {name: make_tab(store, fake_clock, limit=2, logouts=logouts[name]) for name in logouts}

    tabs["a"].record_login("tok-a")
    fake_clock.now += 1
    tabs["b"].record_login("tok-b")
    fake_clock.now += 1
    tabs["a"].record_heartbeat(True)
    fake_clock.now += 1
    tabs["c"].record_login("tok-c")

    assert logouts == {"a": [], "b": ["evicted"], "c": []}
    assert [e.session_token for e in tabs["c"].entries()] == ["tok-a", "tok-c"]


def test_relogin_of_same_token_is_a_renewal(store, fake_clock):
    logouts = []
    tab = make_tab(store, fake_clock, logouts=logouts)

    tab.record_login("tok-a")
    fake_clock.now += 10
    removed = tab.record_login("tok-a")

    assert removed == []
    assert logouts == []
    assert tab.entries()[0].last_active_at == fake_clock.now


def test_server_reported_evictions_are_applied(store, fake_clock):
    logouts = []
    tab_a = make_tab(store, fake_clock, limit=2, logouts=logouts)
    tab_b = make_tab(store, fake_clock, limit=2)

    tab_a.record_login("tok-a")
    tab_b.record_login("tok-b", evicted_tokens=["tok-a"])

    assert logouts == ["evicted"]


def test_heartbeat_not_alive_forces_logout(store, fake_clock):
    logouts = []
    tab = make_tab(store, fake_clock, logouts=logouts)
    tab.record_login("tok-a")

    tab.record_heartbeat(False)

    assert logouts == ["not_alive"]
    assert store.get(tab.key) is None


def test_expired_entries_do_not_count(store, fake_clock):
    tab = make_tab(store, fake_clock, ttl_seconds=60)
    tab.record_login("tok-a")

    fake_clock.now += 61

    assert tab.may_continue() is False


@pytest.mark.parametrize(
    "status_code,code,forced",
    [
        (401, "SESSION_REVOKED", True),
        (401, "SESSION_EXPIRED", True),
        (401, None, True),
        (403, "FORBIDDEN", False),
        (503, "STORE_UNAVAILABLE", False),
    ],
)
def test_rejections(store, fake_clock, status_code, code, forced):
    logouts = []
    tab = make_tab(store, fake_clock, logouts=logouts)
    tab.record_login("tok-a")

    assert tab.record_rejection(status_code, code) is forced
    assert bool(logouts) is forced


def test_voluntary_logout_does_not_fire_forced_logout(store, fake_clock):
    logouts = []
    tab = make_tab(store, fake_clock, logouts=logouts)
    tab.record_login("tok-a")

    tab.logout()

    assert logouts == []
    assert tab.may_continue() is False
