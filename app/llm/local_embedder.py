"""
Local sentence-transformers Embedding Service

Runs the model in-process. encode() is blocking, so every call goes
through the default threadpool executor behind a semaphore.
Requires the ``local`` extra (sentence-transformers).
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from sentence_transformers import SentenceTransformer

from app.core.config import settings
from app.core.exceptions import EmbeddingRequestError, UpstreamUnavailableError
from app.core.logging import get_logger
from app.llm.protocol import EmbeddingServiceProtocol

logger = get_logger(__name__)


class LocalEmbeddingService(EmbeddingServiceProtocol):
    """
    Async-safe embedding service backed by a local SentenceTransformer.

    - model loaded once, on warmup() or lazily on first embed()
    - encode() runs in the threadpool executor
    - a semaphore bounds concurrent encodes
    """

    def __init__(
        self,
        *,
        model_name: str | None = None,
        device: str | None = None,
        max_concurrency: int = 4,
    ) -> None:
        self.model_name = model_name or settings.local_embedding_model
        self.device = device or settings.embedding_device
        self.max_concurrency = max_concurrency
        self.model: Optional[SentenceTransformer] = None
        self._load_lock = asyncio.Lock()
        self._semaphore = asyncio.Semaphore(max_concurrency)

        logger.info(
            "local_embedding_service_created",
            model_name=self.model_name,
            device=self.device,
            max_concurrency=self.max_concurrency,
        )

    async def warmup(self) -> None:
        """
        Load the model so the first request does not pay for it.

        Raises:
            UpstreamUnavailableError: If the model cannot be loaded
        """
        if self.model is not None:
            return

        async with self._load_lock:
            if self.model is not None:
                return

            t0 = time.perf_counter()
            logger.info("local_embedding_model_loading", model_name=self.model_name)
            loop = asyncio.get_running_loop()
            try:
                self.model = await loop.run_in_executor(
                    None,
                    lambda: SentenceTransformer(self.model_name, device=self.device),
                )
            except Exception as e:
                logger.error(
                    "local_embedding_model_load_failed",
                    model_name=self.model_name,
                    error=str(e),
                )
                raise UpstreamUnavailableError(
                    f"Failed to load embedding model {self.model_name}: {e}"
                ) from e

            logger.info(
                "local_embedding_model_loaded",
                model_name=self.model_name,
                elapsed_seconds=f"{time.perf_counter() - t0:.2f}",
            )

    async def embed(self, text: str) -> list[float]:
        await self.warmup()

        loop = asyncio.get_running_loop()
        model = self.model  # Capture reference for closure

        async with self._semaphore:
            try:
                embedding_array = await loop.run_in_executor(
                    None,
                    lambda: model.encode(text),
                )
            except Exception as e:
                logger.error("local_embedding_failed", error=str(e), text_length=len(text))
                raise EmbeddingRequestError(f"Failed to embed text: {e}") from e

        return embedding_array.tolist()

    async def aclose(self) -> None:
        self.model = None
