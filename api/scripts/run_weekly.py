import argparse
import json
import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from blackout.config import LOG_LEVEL, MATCH_TIMEZONE
from blackout.errors import MatchingError
from blackout.services.cycle import get_week_bounds, run_matching_cycle, week_bounds_for_date


def main() -> int:
    parser = argparse.ArgumentParser(description="Run one weekly matching cycle")
    parser.add_argument("--week-start", type=date.fromisoformat, default=None, help="any date inside the target week (YYYY-MM-DD)")
    parser.add_argument("--cycle-set-id", type=str, default="")
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL)
    now = datetime.now(timezone.utc)
    if args.week_start:
        week_start, week_end = week_bounds_for_date(args.week_start, MATCH_TIMEZONE)
    else:
        week_start, week_end = get_week_bounds(now, MATCH_TIMEZONE)

    try:
        result = run_matching_cycle(
            week_start,
            week_end,
            args.cycle_set_id.strip() or None,
            now=now,
            dry_run=args.dry_run,
        )
    except MatchingError as exc:
        print(json.dumps({"success": False, "reason": exc.reason, "message": exc.detail, "trace_id": exc.trace_id}, indent=2))
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.complete else 2


if __name__ == "__main__":
    sys.exit(main())
