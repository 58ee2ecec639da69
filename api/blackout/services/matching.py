from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from ..domain import AssignmentResult, CandidatePair, Participant
from .adjustments import apply_adjustments
from .compatibility import compute_compatibility
from .preferences import preferences_compatible


def build_candidate_pairs(
    users: list[Participant],
    cycle_set_id: str,
    *,
    now: datetime,
    history: set[tuple[str, str]] | None = None,
    cfg: dict[str, Any] | None = None,
) -> list[CandidatePair]:
    """Score every mutually eligible unordered pair in the pool.

    O(n^2) in pool size. If pools get large, bucket by mutual preference
    before scoring.
    """
    history = history or set()
    candidates: list[CandidatePair] = []

    for i in range(len(users)):
        for j in range(i + 1, len(users)):
            u = users[i]
            v = users[j]
            if u.id == v.id:
                continue
            if not preferences_compatible(u, v):
                continue

            raw = compute_compatibility(u, v, cycle_set_id)
            score, breakdown = apply_adjustments(raw, u, v, history=history, now=now, cfg=cfg)
            candidates.append(CandidatePair(user_a_id=u.id, user_b_id=v.id, score=score, breakdown=breakdown))
    return candidates


def rank_pairs(pairs: Iterable[CandidatePair]) -> list[CandidatePair]:
    # Equal scores resolve by the lexicographically smallest canonical id pair.
    return sorted(pairs, key=lambda p: (-p.score, p.key))


def greedy_one_to_one_match(pairs: list[CandidatePair], pool_ids: Iterable[str] = ()) -> AssignmentResult:
    """Walk pairs best-first, committing a pair when neither side is taken.

    Maximal, not maximum-weight: a strong pair can block two slightly weaker
    pairs whose total is higher.
    """
    matched: set[str] = set()
    committed: list[CandidatePair] = []
    for pair in rank_pairs(pairs):
        if pair.user_a_id in matched or pair.user_b_id in matched:
            continue
        matched.add(pair.user_a_id)
        matched.add(pair.user_b_id)
        committed.append(pair)

    unmatched: list[str] = []
    seen: set[str] = set()
    for uid in pool_ids:
        if uid in matched or uid in seen:
            continue
        seen.add(uid)
        unmatched.append(uid)
    return AssignmentResult(committed=committed, unmatched=unmatched)
