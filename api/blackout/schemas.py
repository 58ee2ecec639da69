from datetime import date
from typing import Any
from pydantic import BaseModel, Field


class RunWeeklyRequest(BaseModel):
    week_start: date | None = None
    cycle_set_id: str | None = None
    dry_run: bool = False


class CommittedPair(BaseModel):
    user_a_id: str
    user_b_id: str
    score: float
    breakdown: dict[str, Any] = Field(default_factory=dict)
    match_id: str | None = None


class RunWeeklyResponse(BaseModel):
    week_start: str
    week_end: str
    cycle_set_id: str
    eligible_count: int
    candidate_pairs: int
    matched_pairs: int
    committed: list[CommittedPair]
    unmatched: list[str]
    already_matched: list[str]
    conflicts: list[dict[str, Any]]
    failures: list[dict[str, Any]]
    dry_run: bool
    complete: bool


class SweepResponse(BaseModel):
    deleted_messages: int
    completed_matches: int
    match_ids: list[str]
