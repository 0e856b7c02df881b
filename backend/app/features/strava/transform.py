"""
Strava activity -> Run mapping.

Pure functions, no I/O. The dict returned by transform_activity is the
exact column set that sync writes, so an upsert only ever touches these
keys.
"""

import math
from datetime import datetime
from typing import Any, Optional

from app.models.base import utcnow
from app.shared.constants import RUN_ACTIVITY_TYPE


def is_run(activity: dict) -> bool:
    """Exact match on the activity type; everything else is dropped."""
    return activity.get("type") == RUN_ACTIVITY_TYPE


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def calculate_pace(moving_time_s: Optional[float], distance_m: Optional[float]) -> Optional[float]:
    """
    Average pace in min/km, two decimals.

    Returns None when either input is missing or zero.
    """
    if not moving_time_s or not distance_m:
        return None
    return round((moving_time_s / 60) / (distance_m / 1000), 2)


def step_cadence(average_cadence: Optional[float]) -> Optional[int]:
    """Strava reports single-leg cadence for runs; steps per minute is double."""
    if not average_cadence:
        return None
    return round_half_up(average_cadence * 2)


def parse_start_date(value: str) -> datetime:
    """Parse Strava's ISO-8601 start_date (trailing Z)."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def transform_activity(activity: dict, user_id: str) -> dict[str, Any]:
    """
    Map a Strava activity to Run columns.

    Args:
        activity: Activity from the list or detail endpoint
        user_id: Owning local user

    Returns:
        Dict keyed by Run column name
    """
    distance = activity.get("distance") or 0
    moving_time = activity.get("moving_time")

    return {
        "user_id": user_id,
        "strava_activity_id": str(activity["id"]),
        "name": activity.get("name"),
        "date": parse_start_date(activity["start_date"]),
        "distance": round_half_up(distance),
        "duration": moving_time,
        "pace": calculate_pace(moving_time, distance),
        "avg_heart_rate": round_half_up(activity.get("average_heartrate") or 0),
        "cadence": step_cadence(activity.get("average_cadence")),
        "elevation_gain": round_half_up(activity.get("total_elevation_gain") or 0),
        "updated_at": utcnow(),
    }
