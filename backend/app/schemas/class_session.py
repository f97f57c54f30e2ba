from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.class_session import SessionType
from app.schemas.common import ensure_time_order, reject_null, validate_day_value, validate_time_value


class ClassSessionBase(BaseModel):
    course_id: str = Field(min_length=1, max_length=36)
    type: SessionType = SessionType.lecture
    day_of_week: int
    start_time: str
    end_time: str
    location: str | None = Field(default=None, max_length=200)
    instructor: str | None = Field(default=None, max_length=200)

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, value: int) -> int:
        return validate_day_value(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return validate_time_value(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "ClassSessionBase":
        ensure_time_order(self.start_time, self.end_time)
        return self


class ClassSessionCreate(ClassSessionBase):
    pass


class ClassSessionUpdate(BaseModel):
    type: SessionType | None = None
    day_of_week: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    location: str | None = Field(default=None, max_length=200)
    instructor: str | None = Field(default=None, max_length=200)
    is_active: bool | None = None

    @field_validator("type", "day_of_week", "start_time", "end_time", "is_active")
    @classmethod
    def reject_cleared_fields(cls, value):
        return reject_null(value)

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, value: int | None) -> int | None:
        return validate_day_value(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        return validate_time_value(value)


class ClassSessionOut(ClassSessionBase):
    id: str
    is_active: bool = True
    course_name: str | None = None
    course_code: str | None = None
    course_color: str | None = None

    model_config = {"from_attributes": True}
