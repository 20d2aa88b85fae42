"""
Groq Chat Client

Talks to Groq's OpenAI-compatible chat completions endpoint.
"""

from __future__ import annotations

import time
from typing import Sequence

import httpx

from app.core.config import settings
from app.core.exceptions import LLMError, LLMRateLimitError
from app.core.logging import get_logger, log_upstream_call
from app.llm.protocol import ChatClientProtocol, LLMResponse

logger = get_logger(__name__)


class GroqChatClient(ChatClientProtocol):
    """Groq-backed chat completion client."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.groq_api_key
        self.base_url = (base_url or settings.groq_base_url).rstrip("/")
        self.model = model or settings.llm_model
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.llm_timeout_seconds,
            transport=transport,
        )
        logger.info("groq_llm_initialized", base_url=self.base_url, model=self.model)

    async def complete(
        self,
        messages: Sequence[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 512,
    ) -> LLMResponse:
        if not self.api_key:
            raise LLMError("GROQ_API_KEY is not configured")

        payload = {
            "model": self.model,
            "messages": list(messages),
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        start = time.perf_counter()
        try:
            resp = await self._client.post("/chat/completions", json=payload, headers=headers)
        except httpx.HTTPError as exc:
            log_upstream_call(
                service="groq",
                operation="chat",
                model=self.model,
                latency_ms=(time.perf_counter() - start) * 1000,
                error=str(exc),
            )
            raise LLMError(f"Groq request failed: {exc}") from exc

        latency_ms = (time.perf_counter() - start) * 1000

        if resp.status_code >= 400:
            message = self._error_message(resp)
            log_upstream_call(
                service="groq",
                operation="chat",
                model=self.model,
                latency_ms=latency_ms,
                status_code=resp.status_code,
                error=message,
            )
            if resp.status_code == 429:
                raise LLMRateLimitError(message)
            raise LLMError(message)

        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise LLMError("Malformed response from Groq API") from exc

        usage = data.get("usage")
        log_upstream_call(
            service="groq",
            operation="chat",
            model=self.model,
            latency_ms=latency_ms,
            status_code=resp.status_code,
            tokens=usage,
        )
        return LLMResponse(content=content, usage=usage, model=data.get("model", self.model))

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        """Pull ``error.message`` out of an error body, falling back to a generic text."""

        try:
            error = resp.json().get("error")
        except ValueError:
            error = None
        if isinstance(error, dict):
            return error.get("message") or "Error from Groq API"
        return error or "Error from Groq API"

    async def aclose(self) -> None:
        await self._client.aclose()
