from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import InterfaceError, OperationalError

from .. import repo
from ..database import SessionLocal
from ..domain import MATCH_ACTIVE, MATCH_COMPLETED, as_utc
from ..errors import StoreUnavailableError
from .events import log_match_event
from .state_machine import transition_status

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    deleted_messages: int = 0
    completed_matches: int = 0
    match_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "deleted_messages": self.deleted_messages,
            "completed_matches": self.completed_matches,
            "match_ids": self.match_ids,
        }


def _expire_one(match: dict[str, Any]) -> int | None:
    """Delete one match's messages and complete it in a single transaction.

    Returns the number of deleted messages, or None when another writer got
    there first and nothing was changed.
    """
    with SessionLocal() as db:
        deleted = repo.delete_messages_for_match(db, match["id"])
        if not repo.update_match_status(db, match["id"], MATCH_ACTIVE, MATCH_COMPLETED):
            db.rollback()
            return None
        log_match_event(db, match["id"], "match_expired", {"deleted_messages": deleted, "week_end": match["week_end"].isoformat()})
        db.commit()
    return deleted


def sweep_expired_matches(now: datetime | None = None) -> SweepResult:
    now = as_utc(now) if now else datetime.now(timezone.utc)
    try:
        with SessionLocal() as db:
            expired = repo.fetch_expired_active_matches(db, now)
    except (OperationalError, InterfaceError) as exc:
        logger.warning("[EXPIRY] store unavailable: %s", exc)
        raise StoreUnavailableError("store_unavailable", "Could not load expired matches") from exc

    result = SweepResult()
    for match in expired:
        if transition_status(match["status"], "expire", now, match["week_end"]) != MATCH_COMPLETED:
            continue
        try:
            deleted = _expire_one(match)
        except (OperationalError, InterfaceError) as exc:
            logger.warning("[EXPIRY] store unavailable while expiring match %s: %s", match["id"], exc)
            raise StoreUnavailableError("store_unavailable", f"Could not expire match {match['id']}") from exc
        if deleted is None:
            logger.info("[EXPIRY] match %s already transitioned, skipping", match["id"])
            continue
        result.deleted_messages += deleted
        result.completed_matches += 1
        result.match_ids.append(match["id"])

    logger.info(
        "[EXPIRY] sweep done now=%s completed=%d deleted_messages=%d",
        now.isoformat(),
        result.completed_matches,
        result.deleted_messages,
    )
    return result
