from __future__ import annotations

import logging
from typing import Any, Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import StorageError
from app.models.chat_message import ChatMessage
from app.models.class_session import ClassSession
from app.models.course import Course
from app.models.scheduling_constraint import SchedulingConstraint
from app.models.timetable import SavedTimetable
from app.models.user import User
from app.services.schedule import ConstraintRecord, CourseRecord, SessionRecord

logger = logging.getLogger(__name__)


class TimetableStore(Protocol):
    def list_sessions(self, user_id: str) -> list[SessionRecord]: ...

    def list_courses(self, user_id: str) -> list[CourseRecord]: ...

    def list_constraints(self, user_id: str) -> list[ConstraintRecord]: ...


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def course_record(course: Course) -> CourseRecord:
    return CourseRecord(
        id=course.id,
        priority=course.priority,
        name=course.name,
        code=course.code,
        color=course.color,
    )


def session_record(session: ClassSession) -> SessionRecord:
    return SessionRecord(
        id=session.id,
        course_id=session.course_id,
        type=_enum_value(session.type),
        day_of_week=session.day_of_week,
        start_time=session.start_time,
        end_time=session.end_time,
        location=session.location,
        instructor=session.instructor,
        course_name=session.course_name,
        course_code=session.course_code,
        course_color=session.course_color,
    )


def constraint_record(constraint: SchedulingConstraint) -> ConstraintRecord:
    return ConstraintRecord(
        id=constraint.id,
        type=_enum_value(constraint.type),
        day_of_week=constraint.day_of_week,
        start_time=constraint.start_time,
        end_time=constraint.end_time,
        description=constraint.description,
    )


class SqlAlchemyStore:
    """Record store for one request's database session.

    The ``list_*`` reads feed the generator and convert driver failures into
    ``StorageError``. Writes flush and commit immediately.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _read(self, what: str, user_id: str, statement):
        try:
            return list(self.db.execute(statement).scalars().all())
        except SQLAlchemyError as exc:
            logger.exception("STORE READ FAILED | what=%s | user_id=%s", what, user_id)
            raise StorageError(f"Failed to load {what}", details={"user_id": user_id}) from exc

    # Generator reads

    def list_courses(self, user_id: str) -> list[CourseRecord]:
        return [course_record(item) for item in self.course_rows(user_id)]

    def list_sessions(self, user_id: str) -> list[SessionRecord]:
        return [session_record(item) for item in self.session_rows(user_id)]

    def list_constraints(self, user_id: str) -> list[ConstraintRecord]:
        return [constraint_record(item) for item in self.constraint_rows(user_id)]

    # Users

    def get_user(self, user_id: str) -> User | None:
        return self.db.get(User, user_id)

    def ensure_user(self, user_id: str, *, name: str, email: str | None = None) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            user = User(id=user_id, name=name, email=email, preferences={})
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        return user

    # Courses

    def course_rows(self, user_id: str) -> list[Course]:
        statement = select(Course).where(Course.user_id == user_id).order_by(Course.created_at, Course.id)
        return self._read("courses", user_id, statement)

    def get_course(self, course_id: str) -> Course | None:
        return self.db.get(Course, course_id)

    def find_course_by_name(self, user_id: str, text: str) -> Course | None:
        needle = text.strip().lower()
        for course in self.course_rows(user_id):
            if needle in course.name.lower() or (course.code and course.code.lower() == needle):
                return course
        return None

    def create_course(self, user_id: str, data: dict) -> Course:
        course = Course(user_id=user_id, **data)
        self.db.add(course)
        self.db.commit()
        self.db.refresh(course)
        return course

    def update_course(self, course: Course, data: dict) -> Course:
        for key, value in data.items():
            setattr(course, key, value)
        self.db.commit()
        self.db.refresh(course)
        return course

    def delete_course(self, course: Course) -> None:
        self.db.delete(course)
        self.db.commit()

    # Sessions

    def session_rows(
        self,
        user_id: str,
        *,
        course_id: str | None = None,
        day_of_week: int | None = None,
    ) -> list[ClassSession]:
        statement = (
            select(ClassSession)
            .join(Course, ClassSession.course_id == Course.id)
            .options(selectinload(ClassSession.course))
            .where(Course.user_id == user_id, ClassSession.is_active.is_(True))
        )
        if course_id is not None:
            statement = statement.where(ClassSession.course_id == course_id)
        if day_of_week is not None:
            statement = statement.where(ClassSession.day_of_week == day_of_week)
        statement = statement.order_by(ClassSession.day_of_week, ClassSession.start_time, ClassSession.id)
        return self._read("sessions", user_id, statement)

    def get_session(self, session_id: str) -> ClassSession | None:
        return self.db.get(ClassSession, session_id)

    def create_session(self, data: dict) -> ClassSession:
        session = ClassSession(**data)
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        return session

    def update_session(self, session: ClassSession, data: dict) -> ClassSession:
        for key, value in data.items():
            setattr(session, key, value)
        self.db.commit()
        self.db.refresh(session)
        return session

    def delete_session(self, session: ClassSession) -> None:
        self.db.delete(session)
        self.db.commit()

    # Constraints

    def constraint_rows(self, user_id: str) -> list[SchedulingConstraint]:
        statement = (
            select(SchedulingConstraint)
            .where(SchedulingConstraint.user_id == user_id, SchedulingConstraint.is_active.is_(True))
            .order_by(SchedulingConstraint.created_at, SchedulingConstraint.id)
        )
        return self._read("constraints", user_id, statement)

    def get_constraint(self, constraint_id: str) -> SchedulingConstraint | None:
        return self.db.get(SchedulingConstraint, constraint_id)

    def create_constraint(self, user_id: str, data: dict) -> SchedulingConstraint:
        constraint = SchedulingConstraint(user_id=user_id, **data)
        self.db.add(constraint)
        self.db.commit()
        self.db.refresh(constraint)
        return constraint

    def delete_constraint(self, constraint: SchedulingConstraint) -> None:
        self.db.delete(constraint)
        self.db.commit()

    # Saved timetables

    def save_timetable(self, user_id: str, name: str, data: dict, score: float | None) -> SavedTimetable:
        self.db.execute(
            update(SavedTimetable)
            .where(SavedTimetable.user_id == user_id, SavedTimetable.is_current.is_(True))
            .values(is_current=False)
        )
        saved = SavedTimetable(user_id=user_id, name=name, data=data, is_current=True, score=score)
        self.db.add(saved)
        self.db.commit()
        self.db.refresh(saved)
        return saved

    def get_current_timetable(self, user_id: str) -> SavedTimetable | None:
        return (
            self.db.execute(
                select(SavedTimetable).where(
                    SavedTimetable.user_id == user_id,
                    SavedTimetable.is_current.is_(True),
                )
            )
            .scalars()
            .first()
        )

    def list_timetable_history(self, user_id: str, limit: int = 10) -> list[SavedTimetable]:
        statement = (
            select(SavedTimetable)
            .where(SavedTimetable.user_id == user_id)
            .order_by(SavedTimetable.created_at.desc(), SavedTimetable.id)
            .limit(limit)
        )
        return self._read("timetable history", user_id, statement)

    # Chat history

    def save_chat_message(
        self,
        user_id: str,
        *,
        message: str,
        response: str,
        intent: str | None,
        entities: dict | None,
    ) -> ChatMessage:
        row = ChatMessage(
            user_id=user_id,
            message=message,
            response=response,
            intent=intent,
            entities=entities or {},
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def list_chat_history(self, user_id: str, limit: int = 50) -> list[ChatMessage]:
        statement = (
            select(ChatMessage)
            .where(ChatMessage.user_id == user_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id)
            .limit(limit)
        )
        return self._read("chat history", user_id, statement)
