from __future__ import annotations

import logging

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import AppError
from app.schemas.chat import ChatReply
from app.schemas.class_session import ClassSessionCreate
from app.schemas.constraint import ConstraintCreate
from app.schemas.course import CourseCreate
from app.services.cache import TimetableCache, timetable_cache_key
from app.services.chat_parser import ParsedMessage, analyze_message, day_name_to_number
from app.services.store import SqlAlchemyStore
from app.services.time_slots import DAY_NAMES, add_minutes
from app.services.timetable_generator import TimetableGenerator, round_half_up

logger = logging.getLogger(__name__)

COURSE_COLORS = ["#3B82F6", "#EF4444", "#10B981", "#F59E0B", "#8B5CF6", "#EC4899", "#06B6D4", "#84CC16"]
DEFAULT_SESSION_MINUTES = 60

HELP_TEXT = """Hanu-Planner Assistant Help

I can help you manage your academic timetable. Here's what I can do:

Course management:
- "Add Python Programming course"
- "Create a new course called Data Structures CS201, high priority"

Session scheduling:
- "Schedule Python Lab on Tuesday 2-4 PM"
- "Add Math lecture on Monday at 9 AM"

Timetable generation:
- "Generate my timetable"

Constraints:
- "I'm unavailable on Friday from 12:00 to 18:00"
- "No classes after 6 PM"

Information:
- "Show my schedule"
- "Show my schedule for Monday"

Just tell me what you'd like to do in plain language."""

UNKNOWN_TEXT = (
    "I'm not sure I understand. Could you rephrase that? You can ask me to add courses, "
    "schedule sessions, generate timetables, or type 'help' for more options."
)
ERROR_TEXT = "I'm sorry, I couldn't {action}: {reason}. Please try again."


class ChatService:
    def __init__(
        self,
        *,
        store: SqlAlchemyStore,
        cache: TimetableCache,
        generator: TimetableGenerator,
        cache_ttl_seconds: int | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.generator = generator
        self.cache_ttl_seconds = cache_ttl_seconds

    def process_message(self, user_id: str, message: str) -> ChatReply:
        parsed = analyze_message(message)
        reply = self._dispatch(parsed, user_id)
        self.store.save_chat_message(
            user_id,
            message=message,
            response=reply.text,
            intent=parsed.intent,
            entities=parsed.entities,
        )
        return reply

    def _dispatch(self, parsed: ParsedMessage, user_id: str) -> ChatReply:
        handlers = {
            "add_course": (self.handle_add_course, "add the course"),
            "schedule_session": (self.handle_schedule_session, "schedule the session"),
            "generate_timetable": (self.handle_generate_timetable, "generate your timetable"),
            "add_constraint": (self.handle_add_constraint, "add the constraint"),
            "show_schedule": (self.handle_show_schedule, "show your schedule"),
            "modify_session": (self.handle_modify_session, "update the session"),
        }
        if parsed.intent == "help":
            return ChatReply(text=HELP_TEXT, intent="help", actions=["help_displayed"])
        if parsed.intent not in handlers:
            return ChatReply(
                text=UNKNOWN_TEXT,
                intent="unknown",
                entities=parsed.entities,
                actions=["request_clarification"],
            )

        handler, action = handlers[parsed.intent]
        try:
            return handler(parsed.entities, user_id)
        except (AppError, SQLAlchemyError, ValidationError) as exc:
            self.store.db.rollback()
            logger.exception("CHAT HANDLER FAILED | user_id=%s | intent=%s", user_id, parsed.intent)
            reason = exc.message if isinstance(exc, AppError) else _short_reason(exc)
            return ChatReply(
                text=ERROR_TEXT.format(action=action, reason=reason),
                intent=parsed.intent,
                entities=parsed.entities,
                actions=["error"],
            )

    def _invalidate(self, user_id: str) -> None:
        self.cache.invalidate(timetable_cache_key(user_id))

    def handle_add_course(self, entities: dict, user_id: str) -> ChatReply:
        name = entities.get("course_name")
        if not name:
            return ChatReply(
                text="I'd be happy to help you add a course! What's the name of the course you want to add?",
                intent="add_course",
                entities=entities,
                actions=["request_course_name"],
            )

        existing = self.store.course_rows(user_id)
        payload = CourseCreate(
            name=name,
            code=entities.get("course_code", ""),
            priority=entities.get("priority", 1),
            credits=entities.get("credits", 3),
            color=COURSE_COLORS[len(existing) % len(COURSE_COLORS)],
        )
        course = self.store.create_course(user_id, payload.model_dump(exclude={"user_id"}))
        self._invalidate(user_id)
        return ChatReply(
            text=f'Great! I\'ve added "{course.name}" to your courses. Would you like to schedule some sessions for this course?',
            intent="add_course",
            entities={**entities, "course_id": course.id},
            actions=["course_created", "suggest_schedule_session"],
        )

    def handle_schedule_session(self, entities: dict, user_id: str) -> ChatReply:
        courses = self.store.course_rows(user_id)
        name = entities.get("course_name")
        if not name:
            if not courses:
                return ChatReply(
                    text="You don't have any courses yet. Would you like to add a course first?",
                    intent="schedule_session",
                    entities=entities,
                    actions=["suggest_add_course"],
                )
            listing = ", ".join(course.name for course in courses)
            return ChatReply(
                text=f"Which course would you like to schedule? Your courses: {listing}",
                intent="schedule_session",
                entities=entities,
                actions=["request_course_selection"],
            )

        course = self.store.find_course_by_name(user_id, name)
        if course is None:
            return ChatReply(
                text=f'I couldn\'t find a course named "{name}". Would you like to add it first?',
                intent="schedule_session",
                entities=entities,
                actions=["suggest_add_course"],
            )

        start_time = entities.get("start_time") or entities.get("time")
        end_time = entities.get("end_time")
        if start_time and not end_time and "time" in entities:
            end_time = add_minutes(start_time, DEFAULT_SESSION_MINUTES)
        day = day_name_to_number(entities["day"]) if entities.get("day") else None
        if day is None or not start_time or not end_time:
            return ChatReply(
                text=(
                    f"To schedule a session for {course.name}, I need the day and time. "
                    'For example: "Schedule Python Lab on Tuesday 2-4 PM"'
                ),
                intent="schedule_session",
                entities={**entities, "course_id": course.id},
                actions=["request_schedule_details"],
            )

        session_type = entities.get("session_type", "lecture")
        if session_type == "class":
            session_type = "lecture"
        payload = ClassSessionCreate(
            course_id=course.id,
            type=session_type,
            day_of_week=day,
            start_time=start_time,
            end_time=end_time,
            location=entities.get("location"),
        )
        session = self.store.create_session(payload.model_dump())
        self._invalidate(user_id)
        return ChatReply(
            text=(
                f"Perfect! I've scheduled a {payload.type.value} for {course.name} on {DAY_NAMES[day]} "
                f"from {start_time} to {end_time}. Would you like me to regenerate your timetable?"
            ),
            intent="schedule_session",
            entities={**entities, "session_id": session.id},
            actions=["session_created", "suggest_regenerate_timetable"],
        )

    def handle_generate_timetable(self, entities: dict, user_id: str) -> ChatReply:
        result = self.generator.generate(user_id)
        if result.stats.total_sessions == 0 and not result.conflicts:
            return ChatReply(
                text=(
                    "I couldn't generate a timetable because you don't have any sessions scheduled yet. "
                    "Would you like to add some courses and sessions first?"
                ),
                intent="generate_timetable",
                actions=["suggest_add_courses"],
            )

        data = result.model_dump(mode="json")
        self.store.save_timetable(user_id, "AI Generated", data, result.score)
        self.cache.set(timetable_cache_key(user_id), data, self.cache_ttl_seconds)

        stats = result.stats
        lines = [
            "I've generated your timetable! Here's what I found:",
            "",
            "Schedule summary:",
            f"- Total sessions: {stats.total_sessions}",
            f"- Total hours: {stats.total_hours}",
            f"- Working days: {stats.working_days}",
            f"- Score: {int(round_half_up(result.score))}/100",
        ]
        if result.conflicts:
            lines.append(f"Conflicts found: {len(result.conflicts)}")
        if result.suggestions:
            lines.append("Suggestions:")
            lines.extend(f"- {item}" for item in result.suggestions)
        return ChatReply(
            text="\n".join(lines),
            intent="generate_timetable",
            actions=["timetable_generated"],
            data=data,
        )

    def handle_add_constraint(self, entities: dict, user_id: str) -> ChatReply:
        day = day_name_to_number(entities["day"]) if entities.get("day") else None
        if day is None and not entities.get("start_time") and not entities.get("end_time"):
            # An unavailable window with no day and no times would block the whole week.
            return ChatReply(
                text=(
                    "When are you unavailable? Tell me a day, a time window, or both. "
                    'For example: "I\'m unavailable on Friday from 12:00 to 18:00" or "No classes after 6 PM"'
                ),
                intent="add_constraint",
                entities=entities,
                actions=["request_constraint_details"],
            )
        payload = ConstraintCreate(
            type="unavailable",
            day_of_week=day,
            start_time=entities.get("start_time"),
            end_time=entities.get("end_time"),
            description="User constraint",
        )
        constraint = self.store.create_constraint(user_id, payload.model_dump(exclude={"user_id"}))
        self._invalidate(user_id)

        text = "I've added your constraint! "
        window = _describe_window(payload.start_time, payload.end_time)
        if day is not None:
            text += f"You're marked as unavailable on {DAY_NAMES[day]}{window}."
        else:
            text += f"You're marked as unavailable every day{window}."
        text += " Would you like me to regenerate your timetable to account for this?"
        return ChatReply(
            text=text,
            intent="add_constraint",
            entities={**entities, "constraint_id": constraint.id},
            actions=["constraint_added", "suggest_regenerate_timetable"],
        )

    def handle_show_schedule(self, entities: dict, user_id: str) -> ChatReply:
        day_filter = day_name_to_number(entities["day"]) if entities.get("day") else None
        sessions = self.store.session_rows(user_id, day_of_week=day_filter)
        if not sessions:
            return ChatReply(
                text="You don't have any sessions scheduled yet. Would you like to add some?",
                intent="show_schedule",
                entities=entities,
                actions=["suggest_add_sessions"],
            )

        by_day: dict[str, list[dict]] = {}
        for session in sorted(sessions, key=lambda item: (item.day_of_week, item.start_time)):
            by_day.setdefault(DAY_NAMES[session.day_of_week], []).append(
                {
                    "id": session.id,
                    "course_name": session.course_name,
                    "type": session.type.value,
                    "start_time": session.start_time,
                    "end_time": session.end_time,
                    "location": session.location,
                }
            )

        lines = ["Your current schedule:", ""]
        for day_label, items in by_day.items():
            lines.append(f"{day_label}:")
            for item in items:
                line = f"- {item['start_time']}-{item['end_time']}: {item['course_name']} ({item['type']})"
                if item["location"]:
                    line += f" - {item['location']}"
                lines.append(line)
            lines.append("")
        return ChatReply(
            text="\n".join(lines).rstrip(),
            intent="show_schedule",
            entities=entities,
            actions=["schedule_displayed"],
            data=by_day,
        )

    def handle_modify_session(self, entities: dict, user_id: str) -> ChatReply:
        return ChatReply(
            text=(
                "To move a session, edit it from your sessions list or tell me the new slot as a new session, "
                'for example "Schedule Python Lab on Thursday 10-12". Then regenerate your timetable.'
            ),
            intent="modify_session",
            entities=entities,
            actions=["request_session_edit"],
        )


def _describe_window(start_time: str | None, end_time: str | None) -> str:
    if start_time and end_time:
        return f" from {start_time} to {end_time}"
    if start_time:
        return f" after {start_time}"
    if end_time:
        return f" before {end_time}"
    return ""


def _short_reason(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        errors = exc.errors()
        if errors:
            return str(errors[0].get("msg", "invalid input"))
    return "a storage error occurred"
