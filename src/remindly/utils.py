import re
from datetime import datetime

__all__ = ["DATE_PATTERN", "TIME_PATTERN", "now_local",
           "is_date_str", "is_time_str", "parse_local_min"]

DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
TIME_PATTERN = re.compile(r"^[0-9]{2}:[0-9]{2}$")


def now_local() -> datetime:
    """Current local wall-clock time (naive)"""
    return datetime.now()


def is_date_str(value: object) -> bool:
    return isinstance(value, str) and DATE_PATTERN.fullmatch(value) is not None


def is_time_str(value: object) -> bool:
    return isinstance(value, str) and TIME_PATTERN.fullmatch(value) is not None


def parse_local_min(date_str: str | None, time_str: str | None) -> datetime | None:
    """Combine 'YYYY-MM-DD' and 'HH:MM' into a naive local datetime.

    Returns None when either part is missing, has the wrong shape, or names a
    non-existent calendar date/time (e.g. 2025-02-30 or 24:00).
    """
    if not is_date_str(date_str) or not is_time_str(time_str):
        return None
    try:
        return datetime.strptime(f"{date_str} {time_str}", "%Y-%m-%d %H:%M")
    except ValueError:
        return None
