"""
LLM and Embedding Client Protocols (Interfaces)
Defines contracts for chat completion and embedding implementations
"""

from typing import NamedTuple, Protocol, Sequence


class LLMResponse(NamedTuple):
    """
    LLM response container

    Attributes:
        content: Generated text content
        usage: Token usage info (prompt_tokens, completion_tokens, total_tokens)
        model: Model name used
    """

    content: str
    usage: dict | None = None
    model: str | None = None


class ChatClientProtocol(Protocol):
    """
    Protocol for chat completion clients (OpenAI-compatible message lists)
    """

    model: str

    async def complete(
        self,
        messages: Sequence[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 512,
    ) -> LLMResponse:
        """
        Generate a reply for a conversation

        Args:
            messages: Conversation as [{"role": ..., "content": ...}], system first
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Returns:
            LLM response

        Raises:
            LLMError: If the upstream call fails
            LLMRateLimitError: If rate limit exceeded
        """
        ...

    async def aclose(self) -> None:
        """Release network resources"""
        ...


class EmbeddingServiceProtocol(Protocol):
    """
    Protocol for text embedding services

    All vectors produced by one service share the same dimensionality.
    """

    model_name: str

    async def embed(self, text: str) -> list[float]:
        """
        Embed a single text

        Args:
            text: Text to embed

        Returns:
            Embedding vector

        Raises:
            UpstreamUnavailableError: If the service cannot be reached at all
            EmbeddingRequestError: If this request failed
        """
        ...

    async def aclose(self) -> None:
        """Release network resources"""
        ...
