"""
Mock LLM and Embedding Clients
For development and testing without network calls
"""

import asyncio
import hashlib
import re
from typing import Sequence

import numpy as np

from app.core.logging import get_logger
from app.llm.protocol import LLMResponse

logger = get_logger(__name__)

_TOKEN_PATTERN = re.compile(r"\w+", re.UNICODE)


class MockChatClient:
    """
    Mock chat client that echoes a short summary of the conversation
    """

    def __init__(self, model: str = "mock-model"):
        self.model = model
        logger.info("mock_llm_initialized", model=model)

    async def complete(
        self,
        messages: Sequence[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 512,
    ) -> LLMResponse:
        await asyncio.sleep(0)

        last_user = next(
            (m["content"] for m in reversed(messages) if m.get("role") == "user"),
            "",
        )
        prompt_chars = sum(len(m.get("content", "")) for m in messages)
        logger.debug(
            "llm_complete_called",
            message_count=len(messages),
            temperature=temperature,
        )

        return LLMResponse(
            content=f"Mock reply to: {last_user}",
            usage={
                "prompt_tokens": prompt_chars // 4,
                "completion_tokens": 20,
                "total_tokens": prompt_chars // 4 + 20,
            },
            model=self.model,
        )

    async def aclose(self) -> None:
        return None


class MockEmbeddingService:
    """
    Deterministic hashed bag-of-words embeddings.

    Each lowercase word token adds +1/-1 to one of ``dimension`` buckets
    chosen by a stable hash, so texts sharing words have positive cosine
    similarity. No model or network involved.
    """

    def __init__(self, dimension: int = 64, model_name: str = "mock-hash-embedding"):
        if dimension < 1:
            raise ValueError("dimension must be >= 1")
        self.dimension = dimension
        self.model_name = model_name
        logger.info("mock_embedding_initialized", dimension=dimension)

    def _bucket(self, token: str) -> tuple[int, float]:
        digest = hashlib.blake2b(token.encode("utf-8"), digest_size=8).digest()
        value = int.from_bytes(digest, "little")
        sign = 1.0 if value & 1 else -1.0
        return (value >> 1) % self.dimension, sign

    async def embed(self, text: str) -> list[float]:
        await asyncio.sleep(0)

        vector = np.zeros(self.dimension, dtype=float)
        for token in _TOKEN_PATTERN.findall(text.lower()):
            index, sign = self._bucket(token)
            vector[index] += sign

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector.tolist()

    async def aclose(self) -> None:
        return None
