import json
import os
from typing import Any

ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "")
MATCH_TIMEZONE = os.getenv("MATCH_TIMEZONE", "UTC")
MIN_POOL_SIZE = int(os.getenv("MIN_POOL_SIZE", "2"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

ELIGIBLE_STATUS = "active"
PARTICIPANT_ROLE = "participant"

DEFAULT_MATCHING_CONFIG: dict[str, Any] = {
    "HISTORY_PENALTY": float(os.getenv("HISTORY_PENALTY", "0.3")),
    "FRESHNESS_BONUS": float(os.getenv("FRESHNESS_BONUS", "1.15")),
    "FRESHNESS_WINDOW_DAYS": float(os.getenv("FRESHNESS_WINDOW_DAYS", "7")),
    "DISTANCE_THRESHOLD_KM": float(os.getenv("DISTANCE_THRESHOLD_KM", "100")),
    "DISTANCE_SCALE_KM": float(os.getenv("DISTANCE_SCALE_KM", "1000")),
    "DISTANCE_FLOOR": float(os.getenv("DISTANCE_FLOOR", "0.5")),
    "EARTH_RADIUS_KM": float(os.getenv("EARTH_RADIUS_KM", "6371")),
}

if os.getenv("MATCHING_CONFIG_JSON"):
    try:
        DEFAULT_MATCHING_CONFIG.update(json.loads(os.getenv("MATCHING_CONFIG_JSON", "{}")))
    except json.JSONDecodeError:
        pass


def cfg_value(cfg: dict[str, Any] | None, key: str) -> float:
    if cfg and key in cfg:
        return float(cfg[key])
    return float(DEFAULT_MATCHING_CONFIG[key])
