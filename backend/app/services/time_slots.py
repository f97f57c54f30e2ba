from __future__ import annotations

import re
from collections.abc import Iterator

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

MINUTES_PER_DAY = 24 * 60
SEARCH_FIRST_START = 8 * 60
SEARCH_LAST_START = 20 * 60
SLOT_STEP_MINUTES = 30
# Nothing may run into or past 21:00.
DAY_END_LIMIT = 21 * 60


def parse_time_to_minutes(value: str) -> int:
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(value: int) -> str:
    hours = value // 60
    minutes = value % 60
    return f"{hours:02d}:{minutes:02d}"


def is_valid_time(value: object) -> bool:
    return isinstance(value, str) and bool(TIME_PATTERN.match(value))


def duration(start: str, end: str) -> int:
    """Minutes from ``start`` to ``end``. Negative when ``end`` is earlier."""
    return parse_time_to_minutes(end) - parse_time_to_minutes(start)


def minute_ranges_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    return start_a < end_b and end_a > start_b


def overlaps(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Half-open interval test: a range ending at 10:00 does not touch one starting at 10:00."""
    return minute_ranges_overlap(
        parse_time_to_minutes(start_a),
        parse_time_to_minutes(end_a),
        parse_time_to_minutes(start_b),
        parse_time_to_minutes(end_b),
    )


def add_minutes(time: str, minutes: int) -> str | None:
    total = parse_time_to_minutes(time) + minutes
    if total >= DAY_END_LIMIT:
        return None
    return minutes_to_time(total)


def candidate_start_times() -> Iterator[str]:
    """Half-hour aligned start times from 08:00 through 20:00."""
    for value in range(SEARCH_FIRST_START, SEARCH_LAST_START + 1, SLOT_STEP_MINUTES):
        yield minutes_to_time(value)


def day_name(day_of_week: int) -> str:
    return DAY_NAMES[day_of_week]
