from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Any

from ..config import cfg_value
from ..domain import Coordinates, Participant, as_utc, canonical_pair


def haversine_km(a: Coordinates | None, b: Coordinates | None, radius_km: float = 6371.0) -> float:
    if a is None or b is None:
        return 0.0
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    # Rounding can push near-antipodal points just outside [0, 1].
    h = min(1.0, max(0.0, h))
    return radius_km * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def is_fresh(joined_at: datetime, now: datetime, window_days: float = 7) -> bool:
    return as_utc(joined_at) > as_utc(now) - timedelta(days=window_days)


def distance_multiplier(distance_km: float, cfg: dict[str, Any] | None = None) -> float:
    if distance_km <= cfg_value(cfg, "DISTANCE_THRESHOLD_KM"):
        return 1.0
    return max(cfg_value(cfg, "DISTANCE_FLOOR"), 1.0 - distance_km / cfg_value(cfg, "DISTANCE_SCALE_KM"))


def apply_adjustments(
    raw_score: float,
    a: Participant,
    b: Participant,
    *,
    history: set[tuple[str, str]],
    now: datetime,
    cfg: dict[str, Any] | None = None,
) -> tuple[float, dict[str, Any]]:
    """History penalty, then per-participant freshness bonus, then distance.

    The result is not clamped; two fresh participants can push a pair above 1.
    """
    score = raw_score

    repeat = canonical_pair(a.id, b.id) in history
    if repeat:
        score *= cfg_value(cfg, "HISTORY_PENALTY")

    window = cfg_value(cfg, "FRESHNESS_WINDOW_DAYS")
    bonus = cfg_value(cfg, "FRESHNESS_BONUS")
    fresh_a = is_fresh(a.joined_at, now, window)
    fresh_b = is_fresh(b.joined_at, now, window)
    if fresh_a:
        score *= bonus
    if fresh_b:
        score *= bonus

    distance_km = haversine_km(a.coordinates, b.coordinates, cfg_value(cfg, "EARTH_RADIUS_KM"))
    dist_mult = distance_multiplier(distance_km, cfg)
    score *= dist_mult

    return score, {
        "raw_score": round(raw_score, 6),
        "repeat_pair": repeat,
        "fresh_a": fresh_a,
        "fresh_b": fresh_b,
        "distance_km": round(distance_km, 3),
        "distance_multiplier": round(dist_mult, 6),
    }
