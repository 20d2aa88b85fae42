"""
LLM and Embedding Client Factory
Creates implementations based on configuration
"""

from app.llm.embedder import OpenAIEmbeddingClient
from app.llm.groq import GroqChatClient
from app.llm.mock import MockChatClient, MockEmbeddingService
from app.llm.protocol import ChatClientProtocol, EmbeddingServiceProtocol
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def get_chat_client() -> ChatClientProtocol:
    """
    Get chat client implementation based on configuration

    Raises:
        ValueError: If llm_provider is not supported
    """
    provider = settings.llm_provider

    logger.info("llm_factory", provider=provider, model=settings.llm_model)

    if provider == "mock":
        return MockChatClient(model=settings.llm_model)

    if provider == "groq":
        return GroqChatClient()

    raise ValueError(
        f"Unsupported llm_provider: {provider}. Supported providers: mock, groq"
    )


def get_embedding_service() -> EmbeddingServiceProtocol:
    """
    Get embedding service implementation based on configuration

    Raises:
        ValueError: If embedding_provider is not supported
    """
    provider = settings.embedding_provider

    logger.info("embedding_factory", provider=provider)

    if provider == "mock":
        return MockEmbeddingService(dimension=settings.mock_embedding_dimension)

    if provider == "openai":
        return OpenAIEmbeddingClient()

    if provider == "local":
        # Imported here so the sentence-transformers extra stays optional
        from app.llm.local_embedder import LocalEmbeddingService

        return LocalEmbeddingService()

    raise ValueError(
        f"Unsupported embedding_provider: {provider}. Supported providers: mock, openai, local"
    )


# Singleton instances for dependency injection
_chat_client: ChatClientProtocol | None = None
_embedding_service: EmbeddingServiceProtocol | None = None


def get_chat_client_instance() -> ChatClientProtocol:
    """Get singleton chat client instance"""
    global _chat_client
    if _chat_client is None:
        _chat_client = get_chat_client()
    return _chat_client


def get_embedding_service_instance() -> EmbeddingServiceProtocol:
    """Get singleton embedding service instance"""
    global _embedding_service
    if _embedding_service is None:
        _embedding_service = get_embedding_service()
    return _embedding_service


async def close_clients() -> None:
    """Close singleton clients (application shutdown)"""
    global _chat_client, _embedding_service

    if _chat_client is not None:
        await _chat_client.aclose()
        _chat_client = None
    if _embedding_service is not None:
        await _embedding_service.aclose()
        _embedding_service = None
