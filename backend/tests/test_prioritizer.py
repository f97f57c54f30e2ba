from app.services.prioritizer import prioritize_sessions, type_rigidity
from app.services.schedule import CourseRecord, SessionRecord


def make_session(session_id, course_id, session_type="lecture", start="09:00", end="10:00", day=1):
    return SessionRecord(
        id=session_id,
        course_id=course_id,
        type=session_type,
        day_of_week=day,
        start_time=start,
        end_time=end,
    )


def test_course_priority_orders_first():
    courses = [CourseRecord(id="low", priority=3), CourseRecord(id="high", priority=1)]
    sessions = [make_session("a", "low", "lab"), make_session("b", "high", "seminar")]

    ordered = prioritize_sessions(sessions, courses)

    assert [item.id for item in ordered] == ["b", "a"]


def test_rigid_types_come_before_flexible_ones_within_a_priority():
    courses = [CourseRecord(id="c1", priority=2)]
    sessions = [
        make_session("seminar", "c1", "seminar"),
        make_session("lecture", "c1", "lecture"),
        make_session("lab", "c1", "lab"),
        make_session("tutorial", "c1", "tutorial"),
    ]

    ordered = prioritize_sessions(sessions, courses)

    assert [item.id for item in ordered] == ["lab", "tutorial", "lecture", "seminar"]


def test_longer_sessions_first_when_type_and_priority_tie():
    courses = [CourseRecord(id="c1", priority=1)]
    sessions = [
        make_session("short", "c1", start="09:00", end="10:00"),
        make_session("long", "c1", start="13:00", end="16:00"),
    ]

    ordered = prioritize_sessions(sessions, courses)

    assert [item.id for item in ordered] == ["long", "short"]


def test_full_ties_keep_input_order():
    courses = [CourseRecord(id="c1", priority=1)]
    sessions = [make_session(str(index), "c1") for index in range(5)]

    ordered = prioritize_sessions(sessions, courses)

    assert [item.id for item in ordered] == ["0", "1", "2", "3", "4"]


def test_unknown_course_sorts_after_known_priorities():
    courses = [CourseRecord(id="c1", priority=3)]
    sessions = [make_session("orphan", "missing", "lab"), make_session("known", "c1", "seminar")]

    ordered = prioritize_sessions(sessions, courses)

    assert [item.id for item in ordered] == ["known", "orphan"]


def test_unrecognised_type_is_least_rigid():
    assert type_rigidity("workshop") > type_rigidity("seminar")
    assert type_rigidity(None) == type_rigidity("workshop")
