import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from blackout.config import LOG_LEVEL
from blackout.errors import MatchingError
from blackout.services.expiry import sweep_expired_matches


def main() -> int:
    parser = argparse.ArgumentParser(description="Complete finished matches and purge their chat messages")
    parser.add_argument("--now", type=datetime.fromisoformat, default=None, help="override the sweep clock (ISO timestamp)")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL)
    now = args.now or datetime.now(timezone.utc)
    try:
        result = sweep_expired_matches(now)
    except MatchingError as exc:
        print(json.dumps({"success": False, "reason": exc.reason, "message": exc.detail, "trace_id": exc.trace_id}, indent=2))
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
