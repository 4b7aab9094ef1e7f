"""
Admission planning shared by the server and the client mirror.

Works on anything exposing ``session_token``, ``last_active_at`` and
``started_at`` so both the persisted Session rows and the client's local
entries go through the exact same decision.
"""

from dataclasses import dataclass, field
from typing import Generic, List, Protocol, Sequence, TypeVar


class SessionLike(Protocol):
    session_token: str
    last_active_at: object
    started_at: object


S = TypeVar("S", bound=SessionLike)


@dataclass
class AdmissionPlan(Generic[S]):
    renew: bool
    evict: List[S] = field(default_factory=list)


def lru_order(active: Sequence[S]) -> List[S]:
    """Least recently active first; ties broken by earliest start."""
    return sorted(active, key=lambda s: (s.last_active_at, s.started_at))


def plan_admission(active: Sequence[S], token: str, limit: int) -> AdmissionPlan[S]:
    """
    Decide how to admit ``token`` given the currently active set.

    A token already in the active set is renewed and nothing is evicted. Otherwise
    the least recently active sessions are evicted until the new one fits.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    if any(s.session_token == token for s in active):
        return AdmissionPlan(renew=True)

    overflow = len(active) - limit + 1
    if overflow <= 0:
        return AdmissionPlan(renew=False)
    return AdmissionPlan(renew=False, evict=lru_order(active)[:overflow])
