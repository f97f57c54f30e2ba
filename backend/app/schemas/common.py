from __future__ import annotations

from app.services.time_slots import DAY_NAMES, TIME_PATTERN, parse_time_to_minutes


def validate_time_value(value: str | None) -> str | None:
    if value is None:
        return value
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


def validate_day_value(value: int | None) -> int | None:
    if value is None:
        return value
    if not 0 <= value < len(DAY_NAMES):
        raise ValueError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")
    return value


def ensure_time_order(start_time: str | None, end_time: str | None) -> None:
    if start_time is None or end_time is None:
        return
    if parse_time_to_minutes(end_time) <= parse_time_to_minutes(start_time):
        raise ValueError("end_time must be after start_time")


def reject_null(value):
    """Partial updates may omit a required column but never clear it."""
    if value is None:
        raise ValueError("Field cannot be null")
    return value
