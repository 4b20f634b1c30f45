"""
Pure duration arithmetic. All durations are hours as float; rounding to
minutes is a presentation concern and never happens here.
"""
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from worktime.core.errors import InvalidRange

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600.0


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive values (e.g. read back from SQLite) are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed_hours(start: datetime, end: datetime) -> float:
    start = as_utc(start)
    end = as_utc(end)
    if end < start:
        raise InvalidRange(f"End time {end.isoformat()} is before start time {start.isoformat()}")
    return (end - start).total_seconds() / SECONDS_PER_HOUR


def net_duration(total: float, break_total: float) -> float:
    if break_total > total:
        logger.warning(
            "Break time exceeds total time; net duration clamped to zero",
            extra={"total_hours": total, "break_hours": break_total},
        )
    return max(total - break_total, 0.0)


def sum_breaks(breaks: Iterable) -> float:
    total = 0.0
    for b in breaks:
        if b.end_time is None:
            continue
        total += float(b.duration or 0.0)
    return total
