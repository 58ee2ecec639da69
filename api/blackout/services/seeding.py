import random
import uuid
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import delete

from ..config import ELIGIBLE_STATUS, MATCH_TIMEZONE, PARTICIPANT_ROLE
from ..models import AppUser, ChatMessage, MatchEvent, MatchSlot, QuestionAnswer, WeeklyMatch, WeeklyQuestionSet
from .cycle import get_week_bounds

SCALE_QUESTIONS = ["Q_ADVENTURE", "Q_ALONE_TIME", "Q_SPONTANEITY", "Q_FITNESS", "Q_CAREER"]
CHOICE_QUESTIONS = {
    "Q_SATURDAY": ["cozy_night_in", "trendy_restaurant", "live_music", "dinner_party"],
    "Q_LOVE_LANGUAGE": ["words", "quality_time", "touch", "acts_of_service"],
    "Q_VACATION": ["adventure", "beach", "culture", "staycation"],
}
TEXT_QUESTIONS = ["Q_PERFECT_DATE"]

GENDER_OPTIONS = ["male", "female", "non_binary", "other"]
PREFERENCE_PROFILES: dict[str, list[str]] = {
    "male": ["female", "female", "male", "everyone"],
    "female": ["male", "male", "female", "everyone"],
    "non_binary": ["everyone", "male", "female"],
    "other": ["everyone"],
}

# Rough city centres so distance penalties show up in seeded pools.
CITY_CENTRES = [
    (40.7128, -74.0060),
    (42.3601, -71.0589),
    (39.9526, -75.1652),
    (34.0522, -118.2437),
]


def _generate_gender_preference(index: int, rng: random.Random) -> tuple[str, str]:
    if index % 5 != 0:
        if index % 2 == 0:
            return "male", "female"
        return "female", "male"
    gender = rng.choices(GENDER_OPTIONS, weights=[0.42, 0.42, 0.12, 0.04], k=1)[0]
    return gender, rng.choice(PREFERENCE_PROFILES[gender])


def _coordinates(rng: random.Random) -> tuple[float | None, float | None]:
    if rng.random() < 0.15:
        return None, None
    lat, lon = rng.choice(CITY_CENTRES)
    return round(lat + rng.uniform(-0.3, 0.3), 5), round(lon + rng.uniform(-0.3, 0.3), 5)


def _answers_for(rng: random.Random) -> dict[str, dict[str, Any]]:
    out: dict[str, dict[str, Any]] = {}
    for code in SCALE_QUESTIONS:
        out[code] = {"type": "scale", "value": rng.randint(1, 5)}
    for code, options in CHOICE_QUESTIONS.items():
        out[code] = {"type": "multiple_choice", "value": rng.choice(options)}
    for code in TEXT_QUESTIONS:
        out[code] = {"type": "short_text", "value": rng.choice(["picnic", "museum then tacos", "karaoke"])}
    return out


def reset_matching_data(db) -> dict[str, int]:
    deleted: dict[str, int] = {}
    for model in [ChatMessage, MatchEvent, MatchSlot, WeeklyMatch, QuestionAnswer, WeeklyQuestionSet, AppUser]:
        res = db.execute(delete(model))
        deleted[model.__tablename__] = int(res.rowcount or 0)
    return deleted


def seed_dummy_pool(
    db,
    n_users: int = 40,
    seed: int = 42,
    now: datetime | None = None,
    reset: bool = False,
) -> dict[str, Any]:
    rng = random.Random(seed)
    now = now or datetime.now(timezone.utc)
    deleted = reset_matching_data(db) if reset else {}

    week_start, week_end = get_week_bounds(now, MATCH_TIMEZONE)
    question_set = WeeklyQuestionSet(id=str(uuid.uuid4()), week_start=week_start, week_end=week_end, created_at=now)
    db.add(question_set)
    db.flush()

    genders: Counter = Counter()
    fresh = 0
    for i in range(n_users):
        gender, preference = _generate_gender_preference(i, rng)
        lat, lon = _coordinates(rng)
        joined_days_ago = rng.choice([1, 3, 5, 10, 20, 45, 90])
        if joined_days_ago < 7:
            fresh += 1
        user_id = str(uuid.uuid4())
        db.add(
            AppUser(
                id=user_id,
                name=f"Seed User {i + 1}",
                role=PARTICIPANT_ROLE,
                status=ELIGIBLE_STATUS,
                gender=gender,
                preference=preference,
                latitude=lat,
                longitude=lon,
                created_at=now - timedelta(days=joined_days_ago),
            )
        )
        db.flush()
        genders[gender] += 1
        for code, payload in _answers_for(rng).items():
            db.add(
                QuestionAnswer(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    question_id=code,
                    weekly_set_id=question_set.id,
                    answer=payload,
                )
            )

    db.commit()
    return {
        "cycle_set_id": question_set.id,
        "week_start": week_start.isoformat(),
        "week_end": week_end.isoformat(),
        "users": n_users,
        "fresh_users": fresh,
        "genders": dict(genders),
        "deleted": deleted,
    }
