"""Shared validation utilities"""

import re
from datetime import date, datetime

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(:[0-5]\d)?$")


def time_to_minutes(value: str) -> int:
    """
    Convert "HH:MM" (or "HH:MM:SS", seconds ignored) to minutes after midnight.

    Raises:
        ValueError: If the value is not a valid 24h time
    """
    match = TIME_PATTERN.match(value.strip()) if value else None
    if not match:
        raise ValueError(f"Invalid time '{value}'. Expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(minutes: int) -> str:
    """Convert minutes after midnight to "HH:MM" """
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value: str) -> str:
    """Canonical HH:MM form, e.g. "09:00:00" -> "09:00" """
    return minutes_to_time(time_to_minutes(value))


def parse_iso_date(value: str) -> date:
    """
    Parse a YYYY-MM-DD date.

    Raises:
        ValueError: If the value is not an ISO date
    """
    return datetime.strptime(value, "%Y-%m-%d").date()
