import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import StorageError
from app.services.store import SqlAlchemyStore


@pytest.fixture()
def store(db):
    store = SqlAlchemyStore(db)
    store.ensure_user("u1", name="Tester")
    return store


def test_generator_reads_convert_rows_to_records(store):
    course = store.create_course("u1", {"name": "Compilers", "code": "CS440", "priority": 2})
    store.create_session(
        {"course_id": course.id, "type": "lab", "day_of_week": 4, "start_time": "13:00", "end_time": "15:00"}
    )
    store.create_constraint("u1", {"type": "unavailable", "day_of_week": 1})

    [course_record] = store.list_courses("u1")
    [session_record] = store.list_sessions("u1")
    [constraint_record] = store.list_constraints("u1")

    assert course_record.priority == 2
    assert session_record.type == "lab"
    assert session_record.course_name == "Compilers"
    assert session_record.course_code == "CS440"
    assert constraint_record.type == "unavailable"
    assert constraint_record.start_time is None


def test_sessions_are_scoped_to_their_owner(store):
    store.ensure_user("u2", name="Other")
    mine = store.create_course("u1", {"name": "Mine"})
    theirs = store.create_course("u2", {"name": "Theirs"})
    for course in (mine, theirs):
        store.create_session(
            {"course_id": course.id, "type": "lecture", "day_of_week": 1, "start_time": "09:00", "end_time": "10:00"}
        )

    assert [item.course_name for item in store.list_sessions("u1")] == ["Mine"]


def test_find_course_by_partial_name_or_code(store):
    store.create_course("u1", {"name": "Python Programming", "code": "CS101"})

    assert store.find_course_by_name("u1", "python").name == "Python Programming"
    assert store.find_course_by_name("u1", "cs101").name == "Python Programming"
    assert store.find_course_by_name("u1", "Biology") is None


def test_only_latest_saved_timetable_is_current(store):
    first = store.save_timetable("u1", "First", {"score": 50}, 50)
    second = store.save_timetable("u1", "Second", {"score": 70}, 70)
    store.db.refresh(first)

    assert first.is_current is False
    assert second.is_current is True
    assert store.get_current_timetable("u1").id == second.id
    assert len(store.list_timetable_history("u1")) == 2
    assert len(store.list_timetable_history("u1", limit=1)) == 1


def test_read_failures_raise_storage_error(store, monkeypatch):
    def broken(statement):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(store.db, "execute", broken)

    with pytest.raises(StorageError) as info:
        store.list_sessions("u1")
    assert info.value.status_code == 503
    assert info.value.details == {"user_id": "u1"}
