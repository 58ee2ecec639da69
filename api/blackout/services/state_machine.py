from datetime import datetime

from ..domain import MATCH_ACTIVE, MATCH_COMPLETED, MATCH_REPORTED


def transition_status(current: str, action: str, now: datetime, week_end: datetime) -> str:
    if current in {MATCH_COMPLETED, MATCH_REPORTED}:
        return current

    if action == "expire":
        if current == MATCH_ACTIVE and week_end < now:
            return MATCH_COMPLETED
        return current

    if action == "report":
        if current == MATCH_ACTIVE:
            return MATCH_REPORTED
        return current

    return current
