from pydantic import BaseModel, Field, field_validator

from app.schemas.common import reject_null

HEX_COLOR_LENGTH = 7


def _validate_color(value: str | None) -> str | None:
    if value is None:
        return value
    if len(value) != HEX_COLOR_LENGTH or not value.startswith("#"):
        raise ValueError("Color must be a hex value like #3B82F6")
    try:
        int(value[1:], 16)
    except ValueError as exc:
        raise ValueError("Color must be a hex value like #3B82F6") from exc
    return value.upper()


class CourseBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(default="", max_length=50)
    priority: int = Field(default=1, ge=1, le=3)
    credits: int = Field(default=3, ge=0, le=40)
    color: str = "#3B82F6"
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("color")
    @classmethod
    def validate_color(cls, value: str) -> str:
        return _validate_color(value)


class CourseCreate(CourseBase):
    user_id: str | None = Field(default=None, max_length=36)


class CourseUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    code: str | None = Field(default=None, max_length=50)
    priority: int | None = Field(default=None, ge=1, le=3)
    credits: int | None = Field(default=None, ge=0, le=40)
    color: str | None = None
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("name", "code", "priority", "credits", "color")
    @classmethod
    def reject_cleared_fields(cls, value):
        return reject_null(value)

    @field_validator("color")
    @classmethod
    def validate_color(cls, value: str | None) -> str | None:
        return _validate_color(value)


class CourseOut(CourseBase):
    id: str
    user_id: str

    model_config = {"from_attributes": True}
