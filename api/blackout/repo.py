import logging
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select, text, update
from sqlalchemy.exc import IntegrityError

from .config import ELIGIBLE_STATUS, PARTICIPANT_ROLE
from .domain import MATCH_ACTIVE, Coordinates, Participant, as_utc, canonical_pair, parse_answer
from .models import AppUser, ChatMessage, MatchSlot, QuestionAnswer, WeeklyMatch, WeeklyQuestionSet
from .errors import MatchConflictError

logger = logging.getLogger(__name__)


def _cycle_set_row(row: WeeklyQuestionSet) -> dict[str, Any]:
    return {"id": str(row.id), "week_start": as_utc(row.week_start), "week_end": as_utc(row.week_end)}


def get_cycle_set(db, cycle_set_id: str) -> dict[str, Any] | None:
    row = db.get(WeeklyQuestionSet, cycle_set_id)
    return _cycle_set_row(row) if row else None


def find_cycle_set_for_week(db, week_start: datetime) -> dict[str, Any] | None:
    week_start = as_utc(week_start)
    row = db.execute(
        select(WeeklyQuestionSet)
        .where(WeeklyQuestionSet.week_start <= week_start, WeeklyQuestionSet.week_end >= week_start)
        .order_by(WeeklyQuestionSet.created_at.desc(), WeeklyQuestionSet.id)
        .limit(1)
    ).scalars().first()
    return _cycle_set_row(row) if row else None


def fetch_eligible_participants(db, cycle_set_id: str) -> list[Participant]:
    users = db.execute(
        select(AppUser)
        .where(AppUser.status == ELIGIBLE_STATUS, AppUser.role == PARTICIPANT_ROLE)
        .order_by(AppUser.created_at, AppUser.id)
    ).scalars().all()
    if not users:
        return []

    user_ids = [str(u.id) for u in users]
    answer_rows = db.execute(
        select(QuestionAnswer)
        .where(QuestionAnswer.weekly_set_id == cycle_set_id, QuestionAnswer.user_id.in_(user_ids))
        .order_by(QuestionAnswer.user_id, QuestionAnswer.question_id)
    ).scalars().all()

    answers_by_user: dict[str, list] = {uid: [] for uid in user_ids}
    skipped = 0
    for row in answer_rows:
        answer = parse_answer(str(row.question_id), cycle_set_id, row.answer)
        if answer is None:
            skipped += 1
            continue
        answers_by_user[str(row.user_id)].append(answer)
    if skipped:
        logger.warning("[STORE] skipped %d malformed answers for cycle_set_id=%s", skipped, cycle_set_id)

    participants: list[Participant] = []
    for u in users:
        coords = None
        if u.latitude is not None and u.longitude is not None:
            coords = Coordinates(latitude=float(u.latitude), longitude=float(u.longitude))
        participants.append(
            Participant(
                id=str(u.id),
                joined_at=as_utc(u.created_at),
                gender=u.gender,
                preference=u.preference,
                coordinates=coords,
                status=u.status,
                role=u.role,
                answers=tuple(answers_by_user[str(u.id)]),
            )
        )
    return participants


def fetch_match_history_pairs(db) -> set[tuple[str, str]]:
    rows = db.execute(text("SELECT user_a_id, user_b_id FROM weekly_match")).mappings().all()
    return {canonical_pair(str(r["user_a_id"]), str(r["user_b_id"])) for r in rows}


def fetch_matched_user_ids_for_week(db, week_start: datetime) -> set[str]:
    rows = db.execute(select(MatchSlot.user_id).where(MatchSlot.week_start == as_utc(week_start))).scalars().all()
    return {str(r) for r in rows}


def insert_match(
    db,
    *,
    user_a_id: str,
    user_b_id: str,
    week_start: datetime,
    week_end: datetime,
    compatibility: float,
    assigned_by: str,
    score_breakdown: dict[str, Any] | None = None,
) -> str:
    """Insert an active match plus its two week slots. Raises MatchConflictError
    (after rolling back) if either participant already holds a slot."""
    match_id = str(uuid.uuid4())
    week_start = as_utc(week_start)
    try:
        db.add(
            WeeklyMatch(
                id=match_id,
                user_a_id=user_a_id,
                user_b_id=user_b_id,
                week_start=week_start,
                week_end=as_utc(week_end),
                compatibility=compatibility,
                score_breakdown=score_breakdown,
                assigned_by=assigned_by,
                status=MATCH_ACTIVE,
            )
        )
        db.flush()
        db.add_all(
            [
                MatchSlot(id=str(uuid.uuid4()), match_id=match_id, user_id=user_a_id, week_start=week_start),
                MatchSlot(id=str(uuid.uuid4()), match_id=match_id, user_id=user_b_id, week_start=week_start),
            ]
        )
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise MatchConflictError(user_a_id, user_b_id, week_start) from exc
    return match_id


def fetch_expired_active_matches(db, now: datetime) -> list[dict[str, Any]]:
    rows = db.execute(
        select(WeeklyMatch)
        .where(WeeklyMatch.status == MATCH_ACTIVE, WeeklyMatch.week_end < as_utc(now))
        .order_by(WeeklyMatch.week_end, WeeklyMatch.id)
    ).scalars().all()
    return [
        {
            "id": str(r.id),
            "user_a_id": str(r.user_a_id),
            "user_b_id": str(r.user_b_id),
            "week_start": as_utc(r.week_start),
            "week_end": as_utc(r.week_end),
            "status": r.status,
        }
        for r in rows
    ]


def delete_messages_for_match(db, match_id: str) -> int:
    res = db.execute(delete(ChatMessage).where(ChatMessage.match_id == match_id))
    return int(res.rowcount or 0)


def update_match_status(db, match_id: str, from_status: str, to_status: str) -> bool:
    res = db.execute(
        update(WeeklyMatch)
        .where(WeeklyMatch.id == match_id, WeeklyMatch.status == from_status)
        .values(status=to_status)
    )
    return int(res.rowcount or 0) == 1
