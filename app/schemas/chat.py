"""Chat proxy schemas"""

from typing import Literal

from pydantic import Field

from app.schemas.base import BaseSchema


class ChatMessage(BaseSchema):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseSchema):
    messages: list[ChatMessage] = Field(default_factory=list)


class ChatResponse(BaseSchema):
    reply: str
    model: str | None = None
    usage: dict | None = None
