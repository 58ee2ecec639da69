import uuid
from typing import Any

from ..models import MatchEvent


def log_match_event(
    db,
    match_id: str | None,
    event_type: str,
    payload: dict[str, Any] | None = None,
) -> None:
    payload = payload or {}
    db.add(
        MatchEvent(
            id=str(uuid.uuid4()),
            match_id=match_id,
            event_type=event_type,
            payload=payload,
        )
    )
