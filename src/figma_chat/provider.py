"""Chat model provider: send a conversation, get back a stream of chunks."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any, Protocol

from openai import AsyncOpenAI

from .config import Settings

logger = logging.getLogger(__name__)


class ChatModelProvider(Protocol):
    def stream_chat(
        self,
        messages: Sequence[dict[str, Any]],
        tools: Sequence[dict[str, Any]],
    ) -> AsyncIterator[Any]:
        """Yield the provider's native incremental chunks for one model turn."""
        ...


class OpenRouterProvider:
    """OpenAI-compatible chat completions endpoint (OpenRouter by default)."""

    def __init__(
        self,
        settings: Settings,
        client: AsyncOpenAI | None = None,
    ):
        self.model = settings.llm_model
        self.temperature = settings.llm_temperature
        headers = {"X-Title": settings.llm_app_title}
        if settings.llm_http_referer:
            headers["HTTP-Referer"] = settings.llm_http_referer
        self._client = client or AsyncOpenAI(
            api_key=settings.openai_api_key or None,
            base_url=settings.llm_base_url,
            default_headers=headers,
        )

    async def stream_chat(
        self,
        messages: Sequence[dict[str, Any]],
        tools: Sequence[dict[str, Any]],
    ) -> AsyncIterator[Any]:
        logger.info("[AGENT] Requesting %s with %d message(s)", self.model, len(messages))
        stream = await self._client.chat.completions.create(
            model=self.model,
            messages=list(messages),
            tools=list(tools),
            tool_choice="auto",
            temperature=self.temperature,
            stream=True,
        )
        async for chunk in stream:
            yield chunk


__all__ = ["ChatModelProvider", "OpenRouterProvider"]
