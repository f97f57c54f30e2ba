from __future__ import annotations

import logging
from collections.abc import Iterable

from app.services.schedule import Conflict, ConstraintRecord, Placement, SessionRecord, WeekSchedule
from app.services.time_slots import (
    DAY_NAMES,
    MINUTES_PER_DAY,
    add_minutes,
    candidate_start_times,
    duration,
    is_valid_time,
    minute_ranges_overlap,
    parse_time_to_minutes,
)

logger = logging.getLogger(__name__)

NO_SLOT_REASON = "No available time slots found"
NO_SLOT_SUGGESTIONS = (
    "Consider adjusting session timing",
    "Check for conflicting constraints",
    "Review other sessions on this day",
)
INVALID_SESSION_REASON = "Invalid session data"
INVALID_SESSION_SUGGESTIONS = ("Check the session's day, type and times",)

# Monday through Friday, tried in this order when the preferred day is full.
FALLBACK_DAYS = (1, 2, 3, 4, 5)


def is_well_formed(session: SessionRecord) -> bool:
    if not session.type:
        return False
    if not isinstance(session.day_of_week, int) or isinstance(session.day_of_week, bool):
        return False
    if not 0 <= session.day_of_week < len(DAY_NAMES):
        return False
    if not is_valid_time(session.start_time) or not is_valid_time(session.end_time):
        return False
    return duration(session.start_time, session.end_time) > 0


def invalid_session_conflict(session: SessionRecord) -> Conflict:
    return Conflict(session=session, reason=INVALID_SESSION_REASON, suggestions=INVALID_SESSION_SUGGESTIONS)


def _constraint_window(constraint: ConstraintRecord) -> tuple[int, int]:
    start = parse_time_to_minutes(constraint.start_time) if constraint.start_time else 0
    end = parse_time_to_minutes(constraint.end_time) if constraint.end_time else MINUTES_PER_DAY
    return start, end


class PlacementEngine:
    """Greedy first-fit slot search against the schedule built so far.

    Only ``unavailable`` constraints block a slot. Other constraint types are
    advisory and never affect feasibility.
    """

    def __init__(self, constraints: Iterable[ConstraintRecord]) -> None:
        self.blocked_windows: list[tuple[int | None, int, int]] = [
            (constraint.day_of_week, *_constraint_window(constraint))
            for constraint in constraints
            if constraint.type == "unavailable"
        ]

    def is_slot_available(self, schedule: WeekSchedule, day: int, start_time: str, end_time: str) -> bool:
        start = parse_time_to_minutes(start_time)
        end = parse_time_to_minutes(end_time)
        for existing in schedule[day].placements:
            if minute_ranges_overlap(start, end, existing.start_minutes, existing.end_minutes):
                return False
        for blocked_day, blocked_start, blocked_end in self.blocked_windows:
            if blocked_day is not None and blocked_day != day:
                continue
            if minute_ranges_overlap(start, end, blocked_start, blocked_end):
                return False
        return True

    def find_slot_on_day(self, schedule: WeekSchedule, day: int, length_minutes: int) -> tuple[str, str] | None:
        for start_time in candidate_start_times():
            end_time = add_minutes(start_time, length_minutes)
            if end_time is None:
                continue
            if self.is_slot_available(schedule, day, start_time, end_time):
                return start_time, end_time
        return None

    def find_placement(self, session: SessionRecord, schedule: WeekSchedule) -> Placement | Conflict:
        day = session.day_of_week
        if self.is_slot_available(schedule, day, session.start_time, session.end_time):
            return Placement(
                session=session,
                day_of_week=day,
                start_time=session.start_time,
                end_time=session.end_time,
            )

        length = duration(session.start_time, session.end_time)
        same_day = self.find_slot_on_day(schedule, day, length)
        if same_day is not None:
            return Placement(
                session=session,
                day_of_week=day,
                start_time=same_day[0],
                end_time=same_day[1],
                is_alternative=True,
            )

        for other_day in FALLBACK_DAYS:
            if other_day == day:
                continue
            slot = self.find_slot_on_day(schedule, other_day, length)
            if slot is not None:
                return Placement(
                    session=session,
                    day_of_week=other_day,
                    start_time=slot[0],
                    end_time=slot[1],
                    is_different_day=True,
                )

        logger.debug(
            "No slot found | session_id=%s | course_id=%s | day=%s | %s-%s",
            session.id,
            session.course_id,
            day,
            session.start_time,
            session.end_time,
        )
        return Conflict(session=session, reason=NO_SLOT_REASON, suggestions=NO_SLOT_SUGGESTIONS)
