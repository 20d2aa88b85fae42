"""
Embedding Service Clients

Remote embedding client for the OpenAI embeddings API plus the common
timeout/validation wrapper every embedding call goes through.

Error classes follow the indexer's needs:
- UpstreamUnavailableError: the service cannot be used at all (network
  unreachable, credentials rejected); aborts a rebuild
- EmbeddingRequestError / EmbeddingTimeoutError: this one request failed;
  a rebuild skips the record
"""

from __future__ import annotations

import asyncio
import math
import time

import httpx

from app.core.config import settings
from app.core.exceptions import (
    AppError,
    EmbeddingRequestError,
    EmbeddingTimeoutError,
    UpstreamUnavailableError,
)
from app.core.logging import get_logger, log_upstream_call
from app.llm.protocol import EmbeddingServiceProtocol

logger = get_logger(__name__)


async def embed_with_timeout(
    service: EmbeddingServiceProtocol,
    text: str,
    timeout: float | None = None,
) -> list[float]:
    """
    Embed ``text`` with an upper bound on the wait.

    Args:
        service: Embedding service to call
        text: Text to embed
        timeout: Seconds to wait (defaults to settings.embedding_timeout_seconds)

    Returns:
        Embedding vector as a list of finite floats

    Raises:
        EmbeddingTimeoutError: If the call does not finish in time
        EmbeddingRequestError: If the call fails or returns a malformed vector
        UpstreamUnavailableError: Propagated from the service
    """
    timeout = settings.embedding_timeout_seconds if timeout is None else timeout
    try:
        vector = await asyncio.wait_for(service.embed(text), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise EmbeddingTimeoutError(
            f"Embedding request timed out after {timeout:g}s"
        ) from exc
    except AppError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise EmbeddingRequestError(f"Embedding request failed: {exc}") from exc

    if not vector:
        raise EmbeddingRequestError("Embedding service returned an empty vector")

    values = [float(value) for value in vector]
    if not all(math.isfinite(value) for value in values):
        raise EmbeddingRequestError("Embedding service returned non-finite values")
    return values


class OpenAIEmbeddingClient(EmbeddingServiceProtocol):
    """OpenAI embeddings API client (``POST /embeddings``)."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.model_name = model or settings.embedding_model
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.timeout = timeout or settings.embedding_timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
        )
        logger.info(
            "openai_embedding_client_initialized",
            base_url=self.base_url,
            model=self.model_name,
        )

    async def embed(self, text: str) -> list[float]:
        if not self.api_key:
            raise UpstreamUnavailableError("OPENAI_API_KEY is not configured")

        payload = {"model": self.model_name, "input": text}
        headers = {"Authorization": f"Bearer {self.api_key}"}

        start = time.perf_counter()
        try:
            resp = await self._client.post("/embeddings", json=payload, headers=headers)
        except (httpx.ConnectError, httpx.ConnectTimeout) as exc:
            raise UpstreamUnavailableError(f"Embedding service unreachable: {exc}") from exc
        except httpx.TimeoutException as exc:
            raise EmbeddingTimeoutError(f"Embedding request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise EmbeddingRequestError(f"Embedding request failed: {exc}") from exc

        log_upstream_call(
            service="openai",
            operation="embed",
            model=self.model_name,
            latency_ms=(time.perf_counter() - start) * 1000,
            status_code=resp.status_code,
            error=None if resp.is_success else resp.reason_phrase,
        )

        if resp.status_code in (401, 403):
            raise UpstreamUnavailableError(
                f"Embedding service rejected credentials: {resp.status_code}"
            )
        if resp.status_code >= 400:
            raise EmbeddingRequestError(
                f"Embedding service error: {resp.status_code} {resp.text}"
            )

        try:
            data = resp.json()
            embedding = data["data"][0]["embedding"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise EmbeddingRequestError("Malformed embedding response") from exc

        logger.debug("text_embedded", text_length=len(text), embedding_dim=len(embedding))
        return embedding

    async def aclose(self) -> None:
        await self._client.aclose()
