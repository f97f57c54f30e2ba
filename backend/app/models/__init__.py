from app.models.cache_entry import CacheEntry  # noqa: F401
from app.models.chat_message import ChatMessage  # noqa: F401
from app.models.class_session import ClassSession, SessionType  # noqa: F401
from app.models.course import Course, CoursePriority  # noqa: F401
from app.models.scheduling_constraint import ConstraintType, SchedulingConstraint  # noqa: F401
from app.models.timetable import SavedTimetable  # noqa: F401
from app.models.user import User  # noqa: F401
