from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from time import perf_counter

from app.schemas.timetable import (
    ConflictOut,
    DayScheduleOut,
    GenerationResult,
    PlacedSession,
    SessionSnapshot,
    TimetableStats,
)
from app.services.placement import PlacementEngine, invalid_session_conflict, is_well_formed
from app.services.prioritizer import prioritize_sessions
from app.services.schedule import Conflict, Placement, SessionRecord, WeekSchedule
from app.services.scoring import calculate_score
from app.services.store import TimetableStore
from app.services.suggestions import generate_suggestions

logger = logging.getLogger(__name__)

EMPTY_INPUT_SUGGESTION = "Add some courses and sessions to generate your timetable"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float, places: int = 0) -> float:
    """Round halves away from zero: 2.25 -> 2.3, 94.5 -> 95."""
    step = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(step, rounding=ROUND_HALF_UP))


def session_snapshot(session: SessionRecord) -> SessionSnapshot:
    return SessionSnapshot(
        id=session.id,
        course_id=session.course_id,
        type=session.type,
        day_of_week=session.day_of_week,
        start_time=session.start_time,
        end_time=session.end_time,
        location=session.location,
        instructor=session.instructor,
        course_name=session.course_name,
        course_code=session.course_code,
        course_color=session.course_color,
    )


def placed_session(placement: Placement) -> PlacedSession:
    session = placement.session
    return PlacedSession(
        **session_snapshot(session).model_dump(exclude={"day_of_week", "start_time", "end_time"}),
        day_of_week=placement.day_of_week,
        start_time=placement.start_time,
        end_time=placement.end_time,
        duration=placement.duration,
        requested_day_of_week=session.day_of_week,
        requested_start_time=session.start_time,
        requested_end_time=session.end_time,
        is_alternative=placement.is_alternative,
        is_different_day=placement.is_different_day,
    )


def conflict_out(conflict: Conflict) -> ConflictOut:
    return ConflictOut(
        session=session_snapshot(conflict.session),
        reason=conflict.reason,
        suggestions=list(conflict.suggestions),
    )


def schedule_out(schedule: WeekSchedule) -> dict[int, DayScheduleOut]:
    return {
        bucket.day: DayScheduleOut(
            day=bucket.day,
            day_name=bucket.day_name,
            sessions=[placed_session(item) for item in bucket.placements],
            total_hours=bucket.total_hours,
        )
        for bucket in schedule
    }


def week_schedule_from_result(schedule: dict[int, DayScheduleOut]) -> WeekSchedule:
    """Rebuild the working structure from a previously returned schedule."""
    week = WeekSchedule()
    for day in sorted(schedule):
        for item in schedule[day].sessions:
            record = SessionRecord(
                id=item.id,
                course_id=item.course_id,
                type=item.type,
                day_of_week=item.requested_day_of_week,
                start_time=item.requested_start_time,
                end_time=item.requested_end_time,
                location=item.location,
                instructor=item.instructor,
                course_name=item.course_name,
                course_code=item.course_code,
                course_color=item.course_color,
            )
            week.place(
                Placement(
                    session=record,
                    day_of_week=item.day_of_week,
                    start_time=item.start_time,
                    end_time=item.end_time,
                    is_alternative=item.is_alternative,
                    is_different_day=item.is_different_day,
                )
            )
    return week


def calculate_stats(schedule: WeekSchedule) -> TimetableStats:
    total_sessions = 0
    total_hours = 0.0
    by_type: Counter[str] = Counter()
    by_day: dict[str, int] = {}
    for bucket in schedule:
        total_sessions += len(bucket.placements)
        total_hours += bucket.total_hours
        by_day[bucket.day_name] = len(bucket.placements)
        by_type.update(item.session.type or "unknown" for item in bucket.placements)

    working_days = sum(1 for bucket in schedule if bucket.placements)
    average = total_hours / working_days if working_days else 0.0
    return TimetableStats(
        total_sessions=total_sessions,
        total_hours=round_half_up(total_hours, 1),
        average_hours_per_day=round_half_up(average, 1),
        working_days=working_days,
        sessions_by_type=dict(by_type),
        sessions_by_day=by_day,
    )


class TimetableGenerator:
    """Builds a weekly plan for one user from the records in ``store``.

    Generation has no side effects: nothing is cached or persisted here.
    """

    def __init__(self, store: TimetableStore) -> None:
        self.store = store

    def generate(self, user_id: str) -> GenerationResult:
        started = perf_counter()
        sessions = self.store.list_sessions(user_id)
        courses = self.store.list_courses(user_id)
        constraints = self.store.list_constraints(user_id)

        if not sessions:
            empty = WeekSchedule()
            logger.info("TIMETABLE GENERATION EMPTY | user_id=%s", user_id)
            return GenerationResult(
                schedule=schedule_out(empty),
                conflicts=[],
                suggestions=[EMPTY_INPUT_SUGGESTION],
                score=0,
                stats=calculate_stats(empty),
                generated_at=_utcnow(),
            )

        schedule = WeekSchedule()
        conflicts: list[Conflict] = []

        valid: list[SessionRecord] = []
        for session in sessions:
            if is_well_formed(session):
                valid.append(session)
            else:
                logger.warning(
                    "Skipping malformed session | user_id=%s | session_id=%s",
                    user_id,
                    session.id,
                )
                conflicts.append(invalid_session_conflict(session))

        engine = PlacementEngine(constraints)
        for session in prioritize_sessions(valid, courses):
            outcome = engine.find_placement(session, schedule)
            if isinstance(outcome, Conflict):
                conflicts.append(outcome)
            else:
                schedule.place(outcome)

        result = GenerationResult(
            schedule=schedule_out(schedule),
            conflicts=[conflict_out(item) for item in conflicts],
            suggestions=generate_suggestions(schedule, conflicts, constraints),
            score=calculate_score(schedule, conflicts, constraints),
            stats=calculate_stats(schedule),
            generated_at=_utcnow(),
        )
        logger.info(
            "TIMETABLE GENERATION COMPLETE | user_id=%s | sessions=%s | placed=%s | conflicts=%s | score=%s | wall_ms=%s",
            user_id,
            len(sessions),
            result.stats.total_sessions,
            len(result.conflicts),
            result.score,
            int((perf_counter() - started) * 1000),
        )
        return result

    def optimize(self, user_id: str, previous: GenerationResult) -> GenerationResult:
        """Re-sort each day of ``previous`` by start time and rescore it.

        No placement search is re-run. The score and suggestions are computed
        without the previous conflicts; the conflict list itself is kept.
        """
        constraints = self.store.list_constraints(user_id)
        schedule = week_schedule_from_result(previous.schedule)
        return previous.model_copy(
            update={
                "schedule": schedule_out(schedule),
                "score": calculate_score(schedule, [], constraints),
                "suggestions": generate_suggestions(schedule, [], constraints),
                "optimized_at": _utcnow(),
            },
            deep=True,
        )
