from datetime import datetime
from enum import Enum


class ContestStatus(str, Enum):
    upcoming = "upcoming"
    live = "live"
    ended = "ended"


def is_upcoming(now: datetime, start_time: datetime) -> bool:
    return now < start_time


def has_ended(now: datetime, end_time: datetime) -> bool:
    return now > end_time


def is_live(now: datetime, start_time: datetime, end_time: datetime, is_active: bool) -> bool:
    return bool(is_active) and start_time <= now <= end_time


def contest_status(now: datetime, start_time: datetime, end_time: datetime) -> ContestStatus:
    if is_upcoming(now, start_time):
        return ContestStatus.upcoming
    if has_ended(now, end_time):
        return ContestStatus.ended
    return ContestStatus.live


def effective_duration_minutes(duration_minutes: int, end_time: datetime, now: datetime) -> int:
    """Attempt length in whole minutes, never running past the contest end."""
    max_duration_ms = duration_minutes * 60 * 1000
    until_end_ms = (end_time - now).total_seconds() * 1000
    effective_ms = min(max_duration_ms, until_end_ms)
    return max(int(effective_ms // 60000), 0)
