"""Chat proxy router"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_session
from app.core.dependencies import get_chat_client
from app.llm.protocol import ChatClientProtocol
from app.schemas.chat import ChatRequest, ChatResponse
from app.services.chat_service import ChatService


router = APIRouter(tags=["chat"])


def get_chat_service(
    session: AsyncSession = Depends(get_session),
    chat_client: ChatClientProtocol = Depends(get_chat_client),
) -> ChatService:
    return ChatService(session=session, chat_client=chat_client)


@router.post(
    "/chat",
    response_model=ChatResponse,
    summary="Relay a conversation to the chat assistant",
)
async def chat(
    payload: ChatRequest,
    service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    return await service.reply(payload.messages)
