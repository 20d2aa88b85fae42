"""
LLM and Embedding Client Abstraction
Interfaces for chat and embedding providers and prompt templates
"""

from app.llm.protocol import ChatClientProtocol, EmbeddingServiceProtocol, LLMResponse
from app.llm.factory import get_chat_client, get_embedding_service

__all__ = [
    "ChatClientProtocol",
    "EmbeddingServiceProtocol",
    "LLMResponse",
    "get_chat_client",
    "get_embedding_service",
]
