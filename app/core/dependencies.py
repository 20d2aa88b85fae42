"""
Common FastAPI dependencies
"""

from fastapi import Request

from app.core.db import async_session_maker
from app.llm.factory import get_chat_client_instance, get_embedding_service_instance
from app.llm.protocol import ChatClientProtocol, EmbeddingServiceProtocol
from app.vectorstore.memory import SemanticIndex
from app.vectorstore.protocol import RecordStoreProtocol
from app.vectorstore.sql_store import SQLRecordStore


def get_semantic_index(request: Request) -> SemanticIndex:
    """The index owned by this application instance."""

    return request.app.state.semantic_index


def get_embedding_service() -> EmbeddingServiceProtocol:
    return get_embedding_service_instance()


def get_chat_client() -> ChatClientProtocol:
    return get_chat_client_instance()


def get_record_store() -> RecordStoreProtocol:
    return SQLRecordStore(async_session_maker)


