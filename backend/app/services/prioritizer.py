from __future__ import annotations

from collections.abc import Iterable

from app.services.schedule import CourseRecord, SessionRecord
from app.services.time_slots import duration

# Harder-to-move session types are placed first.
SESSION_TYPE_RIGIDITY = {
    "lab": 1,
    "tutorial": 2,
    "lecture": 3,
    "seminar": 4,
}
OTHER_TYPE_RIGIDITY = 5
UNKNOWN_COURSE_PRIORITY = 4


def type_rigidity(session_type: str | None) -> int:
    return SESSION_TYPE_RIGIDITY.get(session_type or "", OTHER_TYPE_RIGIDITY)


def prioritize_sessions(
    sessions: Iterable[SessionRecord],
    courses: Iterable[CourseRecord],
) -> list[SessionRecord]:
    """Placement order: course priority, then type rigidity, then longest first.

    ``sorted`` is stable, so ties keep the order the sessions were given in.
    """
    priority_by_course = {course.id: course.priority for course in courses}

    def sort_key(session: SessionRecord) -> tuple[int, int, int]:
        return (
            priority_by_course.get(session.course_id, UNKNOWN_COURSE_PRIORITY),
            type_rigidity(session.type),
            -duration(session.start_time, session.end_time),
        )

    return sorted(sessions, key=sort_key)
