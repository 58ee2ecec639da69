from __future__ import annotations

from ..domain import SCALE_MAX, SCALE_MIN, Answer, ChoiceAnswer, Participant, ScaleAnswer

SCALE_SPAN = SCALE_MAX - SCALE_MIN


def _valid_scale(value: int) -> bool:
    return not isinstance(value, bool) and isinstance(value, int) and SCALE_MIN <= value <= SCALE_MAX


def question_contribution(a: Answer, b: Answer) -> float | None:
    """Score one shared question, or None when it is not counted.

    Free text, mismatched answer types and out-of-range scale values are
    all unscoreable.
    """
    if isinstance(a, ScaleAnswer) and isinstance(b, ScaleAnswer):
        if not _valid_scale(a.value) or not _valid_scale(b.value):
            return None
        return (SCALE_SPAN - abs(a.value - b.value)) / SCALE_SPAN
    if isinstance(a, ChoiceAnswer) and isinstance(b, ChoiceAnswer):
        return 1.0 if a.label == b.label else 0.0
    return None


def score_answers(answers_a: dict[str, Answer], answers_b: dict[str, Answer]) -> float:
    total = 0.0
    counted = 0
    for question_id, ans_a in answers_a.items():
        ans_b = answers_b.get(question_id)
        if ans_b is None:
            continue
        contribution = question_contribution(ans_a, ans_b)
        if contribution is None:
            continue
        total += contribution
        counted += 1
    if counted == 0:
        return 0.0
    return total / counted


def compute_compatibility(a: Participant, b: Participant, cycle_set_id: str) -> float:
    return score_answers(a.answers_for(cycle_set_id), b.answers_for(cycle_set_id))
