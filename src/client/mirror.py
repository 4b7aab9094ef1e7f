"""
Client Mirror

Optimistic, non-authoritative copy of the server's admission decisions, kept
in the LocalStore so every tab of the profile sees the same active set. The
mirror can only end a local session early; it never grants access the server
has not granted.
"""

import logging
import time
from dataclasses import asdict, dataclass
from typing import Callable, Iterable, List, Optional

from src.client.local_store import LocalStore
from src.domain.admission import plan_admission

logger = logging.getLogger(__name__)

SESSION_REJECTION_CODES = frozenset(
    {
        "UNAUTHENTICATED",
        "SESSION_MISSING",
        "SESSION_UNKNOWN",
        "SESSION_REVOKED",
        "SESSION_EXPIRED",
    }
)


@dataclass
class MirrorEntry:
    session_token: str
    started_at: float
    last_active_at: float


class SessionMirror:
    """
    Locally known active sessions of one account, seen from one tab.

    Forced logout fires when this tab's token leaves the shared active set,
    when a heartbeat reports alive=false, or when the server rejects the
    session with a 401.
    """

    def __init__(
        self,
        store: LocalStore,
        account_id: str,
        limit: int,
        ttl_seconds: int,
        on_forced_logout: Optional[Callable[[str], None]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.account_id = account_id
        self.limit = limit
        self.ttl_seconds = ttl_seconds
        self.on_forced_logout = on_forced_logout
        self.clock = clock
        self.session_token: Optional[str] = None
        self.forced_logout_reason: Optional[str] = None
        self._unsubscribe = store.subscribe(self._on_change)

    @property
    def key(self) -> str:
        return f"sessions:{self.account_id}"

    def entries(self) -> List[MirrorEntry]:
        """Entries still within the TTL, least recently active first"""
        cutoff = self.clock() - self.ttl_seconds
        raw = self.store.get(self.key, []) or []
        fresh = [MirrorEntry(**item) for item in raw if item["last_active_at"] >= cutoff]
        return sorted(fresh, key=lambda e: (e.last_active_at, e.started_at))

    def record_login(self, session_token: str, evicted_tokens: Iterable[str] = ()) -> List[str]:
        """
        Apply a login of this tab to the shared set.

        Tokens the server reported as evicted are dropped first, then the same
        LRU plan as the server runs on what remains. Returns the tokens this
        tab removed from the set.
        """
        now = self.clock()
        evicted = set(evicted_tokens)
        entries = [e for e in self.entries() if e.session_token not in evicted]
        plan = plan_admission(entries, session_token, self.limit)

        victims = {e.session_token for e in plan.evict}
        kept = [e for e in entries if e.session_token not in victims]
        own = next((e for e in kept if e.session_token == session_token), None)
        if own is None:
            kept.append(MirrorEntry(session_token, started_at=now, last_active_at=now))
        else:
            own.last_active_at = max(own.last_active_at, now)

        self.session_token = session_token
        self.forced_logout_reason = None
        self._write(kept)
        return sorted(evicted | victims)

    def record_heartbeat(self, alive: bool) -> None:
        if self.session_token is None:
            return
        if not alive:
            self.force_logout("not_alive")
            return

        now = self.clock()
        entries = self.entries()
        for entry in entries:
            if entry.session_token == self.session_token:
                entry.last_active_at = max(entry.last_active_at, now)
                break
        else:
            self.force_logout("evicted")
            return
        self._write(entries)

    def record_rejection(self, status_code: int, code: Optional[str]) -> bool:
        """Force logout on a session rejection. Returns True if one happened."""
        if status_code == 401 and (code is None or code in SESSION_REJECTION_CODES):
            self.force_logout((code or "UNAUTHENTICATED").lower())
            return True
        return False

    def may_continue(self) -> bool:
        if self.session_token is None:
            return False
        return any(e.session_token == self.session_token for e in self.entries())

    def force_logout(self, reason: str) -> None:
        if self.session_token is None:
            return
        logger.info("Forced logout of account %s: %s", self.account_id, reason)
        self._drop_own()
        self.forced_logout_reason = reason
        if self.on_forced_logout is not None:
            self.on_forced_logout(reason)

    def logout(self) -> None:
        self._drop_own()

    def close(self) -> None:
        self._unsubscribe()

    def _drop_own(self) -> None:
        token = self.session_token
        self.session_token = None
        if token is None:
            return
        remaining = [e for e in self.entries() if e.session_token != token]
        self._write(remaining)

    def _write(self, entries: List[MirrorEntry]) -> None:
        if entries:
            self.store.set(self.key, [asdict(e) for e in entries])
        else:
            self.store.remove(self.key)

    def _on_change(self, key: str, value) -> None:
        if key != self.key or self.session_token is None:
            return
        tokens = {item["session_token"] for item in value or []}
        if self.session_token not in tokens:
            self.force_logout("evicted")
