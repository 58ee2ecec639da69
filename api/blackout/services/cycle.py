from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError

from .. import repo
from ..config import MATCH_TIMEZONE, MIN_POOL_SIZE
from ..database import SessionLocal
from ..domain import ASSIGNED_BY_ALGORITHM, CandidatePair, as_utc
from ..errors import CycleInputError, MatchConflictError, StoreUnavailableError
from .events import log_match_event
from .matching import build_candidate_pairs, greedy_one_to_one_match

logger = logging.getLogger(__name__)


def week_bounds_for_date(day: date, tz: str = MATCH_TIMEZONE) -> tuple[datetime, datetime]:
    """Monday 00:00 through Sunday 23:59:59.999999 local time, returned in UTC."""
    zone = ZoneInfo(tz)
    monday = day - timedelta(days=day.weekday())
    start_local = datetime.combine(monday, time.min, tzinfo=zone)
    end_local = datetime.combine(monday + timedelta(days=6), time.max, tzinfo=zone)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def get_week_bounds(now: datetime, tz: str = MATCH_TIMEZONE) -> tuple[datetime, datetime]:
    local_now = as_utc(now).astimezone(ZoneInfo(tz))
    return week_bounds_for_date(local_now.date(), tz)


@dataclass
class CycleResult:
    week_start: datetime
    week_end: datetime
    cycle_set_id: str
    eligible_count: int = 0
    candidate_pairs: int = 0
    committed: list[dict[str, Any]] = field(default_factory=list)
    unmatched: list[str] = field(default_factory=list)
    already_matched: list[str] = field(default_factory=list)
    conflicts: list[dict[str, Any]] = field(default_factory=list)
    failures: list[dict[str, Any]] = field(default_factory=list)
    dry_run: bool = False

    @property
    def complete(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        return {
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "cycle_set_id": self.cycle_set_id,
            "eligible_count": self.eligible_count,
            "candidate_pairs": self.candidate_pairs,
            "matched_pairs": len(self.committed),
            "committed": self.committed,
            "unmatched": self.unmatched,
            "already_matched": self.already_matched,
            "conflicts": self.conflicts,
            "failures": self.failures,
            "dry_run": self.dry_run,
            "complete": self.complete,
        }


def _resolve_cycle_set(db, cycle_set_id: str | None, week_start: datetime) -> str:
    if cycle_set_id:
        if not repo.get_cycle_set(db, cycle_set_id):
            raise CycleInputError("unknown_cycle_set", f"Question set {cycle_set_id} not found")
        return cycle_set_id
    found = repo.find_cycle_set_for_week(db, week_start)
    if not found:
        raise CycleInputError("missing_cycle_set", f"No question set covers week starting {week_start.date()}")
    return found["id"]


def _persist_pair(pair: CandidatePair, week_start: datetime, week_end: datetime) -> str:
    with SessionLocal() as db:
        match_id = repo.insert_match(
            db,
            user_a_id=pair.user_a_id,
            user_b_id=pair.user_b_id,
            week_start=week_start,
            week_end=week_end,
            compatibility=pair.score,
            assigned_by=ASSIGNED_BY_ALGORITHM,
            score_breakdown=pair.breakdown,
        )
        log_match_event(
            db,
            match_id,
            "match_created",
            {"week_start": week_start.isoformat(), "score": pair.score, "assigned_by": ASSIGNED_BY_ALGORITHM},
        )
        db.commit()
    return match_id


def run_matching_cycle(
    week_start: datetime,
    week_end: datetime,
    cycle_set_id: str | None = None,
    *,
    now: datetime | None = None,
    cfg: dict[str, Any] | None = None,
    dry_run: bool = False,
    min_pool_size: int = MIN_POOL_SIZE,
) -> CycleResult:
    now = as_utc(now) if now else datetime.now(timezone.utc)
    week_start = as_utc(week_start)
    week_end = as_utc(week_end)
    if week_end <= week_start:
        raise CycleInputError("invalid_week_bounds", "week_end must be after week_start")

    try:
        with SessionLocal() as db:
            resolved_set_id = _resolve_cycle_set(db, cycle_set_id, week_start)
            participants = repo.fetch_eligible_participants(db, resolved_set_id)
            history = repo.fetch_match_history_pairs(db)
            taken = repo.fetch_matched_user_ids_for_week(db, week_start)
    except (OperationalError, InterfaceError) as exc:
        logger.warning("[MATCHING] store unavailable while loading pool: %s", exc)
        raise StoreUnavailableError("store_unavailable", "Could not load matching pool") from exc

    if len(participants) < min_pool_size:
        raise CycleInputError(
            "pool_too_small",
            f"Need at least {min_pool_size} eligible participants, found {len(participants)}",
        )

    pool = [p for p in participants if p.id not in taken]
    result = CycleResult(
        week_start=week_start,
        week_end=week_end,
        cycle_set_id=resolved_set_id,
        eligible_count=len(participants),
        already_matched=[p.id for p in participants if p.id in taken],
        dry_run=dry_run,
    )
    logger.info(
        "[MATCHING] cycle start week_start=%s cycle_set_id=%s eligible=%d already_matched=%d history_pairs=%d",
        week_start.isoformat(),
        resolved_set_id,
        len(participants),
        len(result.already_matched),
        len(history),
    )

    pairs = build_candidate_pairs(pool, resolved_set_id, now=now, history=history, cfg=cfg)
    assignment = greedy_one_to_one_match(pairs, [p.id for p in pool])
    result.candidate_pairs = len(pairs)

    dropped: set[str] = set()
    for pair in assignment.committed:
        if dry_run:
            result.committed.append({**pair.to_dict(), "match_id": None})
            continue
        try:
            match_id = _persist_pair(pair, week_start, week_end)
        except MatchConflictError:
            logger.warning(
                "[MATCHING] slot already taken, skipping pair %s/%s week_start=%s",
                pair.user_a_id,
                pair.user_b_id,
                week_start.isoformat(),
            )
            result.conflicts.append(pair.to_dict())
            dropped.update((pair.user_a_id, pair.user_b_id))
            continue
        except SQLAlchemyError as exc:
            logger.warning("[MATCHING] failed to persist pair %s/%s: %s", pair.user_a_id, pair.user_b_id, exc)
            result.failures.append({**pair.to_dict(), "error": str(exc)})
            dropped.update((pair.user_a_id, pair.user_b_id))
            continue
        result.committed.append({**pair.to_dict(), "match_id": match_id})

    unmatched = set(assignment.unmatched) | dropped
    result.unmatched = [p.id for p in pool if p.id in unmatched]

    logger.info(
        "[MATCHING] cycle done week_start=%s candidates=%d committed=%d unmatched=%d conflicts=%d failures=%d dry_run=%s",
        week_start.isoformat(),
        result.candidate_pairs,
        len(result.committed),
        len(result.unmatched),
        len(result.conflicts),
        len(result.failures),
        dry_run,
    )
    return result
