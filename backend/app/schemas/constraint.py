from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.scheduling_constraint import ConstraintType
from app.schemas.common import ensure_time_order, validate_day_value, validate_time_value


class ConstraintBase(BaseModel):
    type: ConstraintType
    day_of_week: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    description: str | None = Field(default=None, max_length=500)

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, value: int | None) -> int | None:
        return validate_day_value(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        return validate_time_value(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "ConstraintBase":
        ensure_time_order(self.start_time, self.end_time)
        return self


class ConstraintCreate(ConstraintBase):
    user_id: str | None = Field(default=None, max_length=36)


class ConstraintOut(ConstraintBase):
    id: str
    user_id: str
    is_active: bool = True

    model_config = {"from_attributes": True}
