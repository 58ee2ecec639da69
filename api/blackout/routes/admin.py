from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder

from ..config import MATCH_TIMEZONE
from ..deps import http_error_for, require_admin_token
from ..errors import MatchingError
from ..schemas import RunWeeklyRequest, RunWeeklyResponse, SweepResponse
from ..services import cycle as cycle_service
from ..services import expiry as expiry_service

router = APIRouter()


def _json(data: Any) -> Any:
    return jsonable_encoder(data)


@router.post("/admin/matches/run-weekly", response_model=RunWeeklyResponse, dependencies=[Depends(require_admin_token)])
def run_weekly_matching(payload: RunWeeklyRequest | None = None) -> Any:
    payload = payload or RunWeeklyRequest()
    now = datetime.now(timezone.utc)
    if payload.week_start:
        week_start, week_end = cycle_service.week_bounds_for_date(payload.week_start, MATCH_TIMEZONE)
    else:
        week_start, week_end = cycle_service.get_week_bounds(now, MATCH_TIMEZONE)
    try:
        result = cycle_service.run_matching_cycle(
            week_start,
            week_end,
            payload.cycle_set_id,
            now=now,
            dry_run=payload.dry_run,
        )
    except MatchingError as exc:
        raise http_error_for(exc) from exc
    return _json(result.to_dict())


@router.post("/admin/matches/sweep-expired", response_model=SweepResponse, dependencies=[Depends(require_admin_token)])
def sweep_expired_matches() -> Any:
    try:
        result = expiry_service.sweep_expired_matches(datetime.now(timezone.utc))
    except MatchingError as exc:
        raise http_error_for(exc) from exc
    return _json(result.to_dict())
