from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=2000)
    user_id: str | None = Field(default=None, max_length=36)


class ChatReply(BaseModel):
    text: str
    intent: str
    entities: dict[str, Any] = Field(default_factory=dict)
    actions: list[str] = Field(default_factory=list)
    data: Any | None = None


class ChatMessageOut(BaseModel):
    id: str
    user_id: str
    message: str
    response: str
    intent: str | None = None
    entities: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
