from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union

MATCH_ACTIVE = "active"
MATCH_COMPLETED = "completed"
MATCH_REPORTED = "reported"

ASSIGNED_BY_ALGORITHM = "algorithm"
ASSIGNED_BY_ADMIN = "admin"

PREFERENCE_EVERYONE = "everyone"

SCALE_MIN = 1
SCALE_MAX = 5


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class ScaleAnswer:
    question_id: str
    cycle_set_id: str
    value: int


@dataclass(frozen=True)
class ChoiceAnswer:
    question_id: str
    cycle_set_id: str
    label: str


@dataclass(frozen=True)
class TextAnswer:
    question_id: str
    cycle_set_id: str
    text: str


Answer = Union[ScaleAnswer, ChoiceAnswer, TextAnswer]


def _scale_value(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return None
    if not isinstance(value, int):
        return None
    if value < SCALE_MIN or value > SCALE_MAX:
        return None
    return value


def parse_answer(question_id: str, cycle_set_id: str, payload: Any) -> Answer | None:
    """Turn a stored ``{"type": ..., "value": ...}`` payload into a typed answer.

    Returns None for anything that cannot be scored or shown safely: unknown
    tags, scale values outside 1-5, non-string labels.
    """
    if not isinstance(payload, dict):
        return None
    kind = str(payload.get("type") or "").strip().lower()
    value = payload.get("value")
    if kind == "scale":
        scale = _scale_value(value)
        if scale is None:
            return None
        return ScaleAnswer(question_id=question_id, cycle_set_id=cycle_set_id, value=scale)
    if kind == "multiple_choice":
        if not isinstance(value, str):
            return None
        return ChoiceAnswer(question_id=question_id, cycle_set_id=cycle_set_id, label=value)
    if kind == "short_text":
        if not isinstance(value, str):
            return None
        return TextAnswer(question_id=question_id, cycle_set_id=cycle_set_id, text=value)
    return None


@dataclass(frozen=True)
class Participant:
    id: str
    joined_at: datetime
    gender: str | None = None
    preference: str | None = None
    coordinates: Coordinates | None = None
    status: str = "active"
    role: str = "participant"
    answers: tuple[Answer, ...] = ()

    def answers_for(self, cycle_set_id: str) -> dict[str, Answer]:
        return {a.question_id: a for a in self.answers if a.cycle_set_id == cycle_set_id}


@dataclass
class CandidatePair:
    user_a_id: str
    user_b_id: str
    score: float
    breakdown: dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str]:
        return canonical_pair(self.user_a_id, self.user_b_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_a_id": self.user_a_id,
            "user_b_id": self.user_b_id,
            "score": self.score,
            "breakdown": dict(self.breakdown),
        }


@dataclass
class AssignmentResult:
    committed: list[CandidatePair]
    unmatched: list[str]


def canonical_pair(user_a: str, user_b: str) -> tuple[str, str]:
    return tuple(sorted((user_a, user_b)))


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
