"""
Chat proxy service

Relays a conversation to the chat LLM. When the latest message asks
about schools, a few rows from the schools table are appended to the
system prompt as database context.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import StoreError, ValidationError
from app.llm.prompts import build_system_prompt, is_school_query
from app.llm.protocol import ChatClientProtocol
from app.repositories.school_repository import SchoolRepository
from app.schemas.chat import ChatMessage, ChatResponse
from app.services.base import BaseService
from app.vectorstore.schemas import SchoolRecord


class ChatService(BaseService):
    """Conversation relay with optional database context"""

    def __init__(
        self,
        *,
        session: AsyncSession,
        chat_client: ChatClientProtocol,
        context_limit: int | None = None,
    ):
        super().__init__()
        self.school_repo = SchoolRepository(session)
        self.chat_client = chat_client
        self.context_limit = context_limit or settings.chat_context_limit

    async def reply(self, messages: list[ChatMessage]) -> ChatResponse:
        if not messages:
            raise ValidationError("Invalid messages format")

        latest = messages[-1].content
        context: list[SchoolRecord] = []
        if is_school_query(latest):
            context = await self._school_context()

        conversation = [
            {"role": "system", "content": build_system_prompt(context)},
            *({"role": m.role, "content": m.content} for m in messages),
        ]
        self._log_start(
            "chat_reply",
            message_count=len(messages),
            context_rows=len(context),
        )

        response = await self.chat_client.complete(
            conversation,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )
        return ChatResponse(reply=response.content, model=response.model, usage=response.usage)

    async def _school_context(self) -> list[SchoolRecord]:
        try:
            schools = await self.school_repo.get_all(limit=self.context_limit)
        except SQLAlchemyError as exc:
            self._log_failure("chat_school_context", exc)
            raise StoreError(f"Failed to load school context: {exc}") from exc
        return [SchoolRecord.model_validate(school) for school in schools]
