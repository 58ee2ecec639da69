from datetime import datetime, timezone

import pytest

from blackout.domain import ChoiceAnswer, Participant, ScaleAnswer, TextAnswer, parse_answer
from blackout.services.compatibility import compute_compatibility, question_contribution, score_answers

JOINED = datetime(2026, 1, 1, tzinfo=timezone.utc)
SET_ID = "set-1"


def _p(pid: str, *answers) -> Participant:
    return Participant(id=pid, joined_at=JOINED, answers=tuple(answers))


def _scale(q: str, v: int, set_id: str = SET_ID) -> ScaleAnswer:
    return ScaleAnswer(question_id=q, cycle_set_id=set_id, value=v)


def _choice(q: str, label: str, set_id: str = SET_ID) -> ChoiceAnswer:
    return ChoiceAnswer(question_id=q, cycle_set_id=set_id, label=label)


def _text(q: str, text: str, set_id: str = SET_ID) -> TextAnswer:
    return TextAnswer(question_id=q, cycle_set_id=set_id, text=text)


def test_single_scale_question_two_vs_five():
    a = _p("a", _scale("q1", 2))
    b = _p("b", _scale("q1", 5))
    assert compute_compatibility(a, b, SET_ID) == pytest.approx(0.25)


def test_scale_contribution_endpoints():
    assert question_contribution(_scale("q", 3), _scale("q", 3)) == 1.0
    assert question_contribution(_scale("q", 1), _scale("q", 5)) == 0.0


def test_multiple_choice_identical_and_different():
    a = _p("a", _choice("q1", "beach"), _choice("q2", "words"))
    b = _p("b", _choice("q1", "beach"), _choice("q2", "touch"))
    assert compute_compatibility(a, b, SET_ID) == pytest.approx(0.5)


def test_short_text_is_not_counted():
    a = _p("a", _scale("q1", 4), _text("q2", "picnic"))
    b = _p("b", _scale("q1", 4), _text("q2", "karaoke"))
    assert compute_compatibility(a, b, SET_ID) == 1.0


def test_only_short_text_scores_zero():
    a = _p("a", _text("q1", "picnic"))
    b = _p("b", _text("q1", "picnic"))
    assert compute_compatibility(a, b, SET_ID) == 0.0


def test_zero_answers_scores_exactly_zero():
    a = _p("a")
    b = _p("b", _scale("q1", 3), _choice("q2", "beach"))
    assert compute_compatibility(a, b, SET_ID) == 0
    assert compute_compatibility(b, a, SET_ID) == 0


def test_answers_from_other_cycle_sets_are_ignored():
    a = _p("a", _scale("q1", 1, set_id="old"), _scale("q2", 3))
    b = _p("b", _scale("q1", 5, set_id="old"), _scale("q2", 3))
    assert compute_compatibility(a, b, SET_ID) == 1.0
    assert compute_compatibility(a, b, "unknown-set") == 0.0


def test_questions_missing_on_one_side_are_skipped():
    a = _p("a", _scale("q1", 5), _scale("q2", 1))
    b = _p("b", _scale("q1", 5))
    assert compute_compatibility(a, b, SET_ID) == 1.0


def test_mismatched_answer_types_are_unscoreable():
    a = _p("a", _scale("q1", 3), _scale("q2", 2))
    b = _p("b", _choice("q1", "3"), _scale("q2", 2))
    assert question_contribution(a.answers[0], b.answers[0]) is None
    assert compute_compatibility(a, b, SET_ID) == 1.0


def test_out_of_range_scale_does_not_crash_scoring():
    a = _p("a", _scale("q1", 9), _scale("q2", 4))
    b = _p("b", _scale("q1", 1), _scale("q2", 2))
    assert compute_compatibility(a, b, SET_ID) == pytest.approx(0.5)


def test_score_is_symmetric():
    a = _p("a", _scale("q1", 1), _scale("q2", 4), _choice("q3", "x"), _text("q4", "hi"))
    b = _p("b", _scale("q1", 3), _scale("q2", 5), _choice("q3", "y"), _text("q4", "yo"))
    assert compute_compatibility(a, b, SET_ID) == compute_compatibility(b, a, SET_ID)
    assert score_answers(a.answers_for(SET_ID), b.answers_for(SET_ID)) == pytest.approx((0.5 + 0.75 + 0.0) / 3)


class TestParseAnswer:
    def test_valid_payloads(self):
        assert parse_answer("q", SET_ID, {"type": "scale", "value": 4}) == _scale("q", 4)
        assert parse_answer("q", SET_ID, {"type": "scale", "value": 2.0}) == _scale("q", 2)
        assert parse_answer("q", SET_ID, {"type": "scale", "value": "5"}) == _scale("q", 5)
        assert parse_answer("q", SET_ID, {"type": "multiple_choice", "value": "beach"}) == _choice("q", "beach")
        assert parse_answer("q", SET_ID, {"type": "short_text", "value": "hi"}) == _text("q", "hi")

    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "scale", "value": 0},
            {"type": "scale", "value": 6},
            {"type": "scale", "value": 2.5},
            {"type": "scale", "value": True},
            {"type": "scale", "value": "lots"},
            {"type": "scale", "value": None},
            {"type": "multiple_choice", "value": 3},
            {"type": "short_text", "value": None},
            {"type": "ranking", "value": [1, 2]},
            {"value": 3},
            "scale:3",
            None,
        ],
    )
    def test_malformed_payloads_are_dropped(self, payload):
        assert parse_answer("q", SET_ID, payload) is None
