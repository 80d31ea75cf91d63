"""Streaming chat proxy over OpenAI-compatible providers (AI gateway / OpenAI / local)."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import openai
from openai import AsyncOpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import Settings
from engine.errors import ConfigurationError, InvalidInputError, UpstreamError
from schemas.request import ChatMessage

logger = logging.getLogger("biascope.llm")

_TRANSIENT_ERRORS = (openai.APIConnectionError, openai.RateLimitError)


def _build_client(settings: Settings) -> AsyncOpenAI:
    """Return an async client for the configured provider."""
    provider = settings.chat_provider.lower()

    if provider == "local":
        return AsyncOpenAI(
            base_url=settings.local_llm_base_url,
            api_key="not-needed",
            timeout=settings.chat_timeout,
        )
    if provider == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured on the server.")
        return AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.chat_timeout)

    # default: gateway
    if not settings.ai_gateway_api_key:
        raise ConfigurationError("AI_GATEWAY_API_KEY is not configured on the server.")
    return AsyncOpenAI(
        base_url=settings.ai_gateway_base_url,
        api_key=settings.ai_gateway_api_key,
        timeout=settings.chat_timeout,
    )


def to_openai_messages(messages: list[ChatMessage]) -> list[dict[str, str]]:
    """Flatten UI messages into ``{"role", "content"}`` dicts, skipping empty ones."""
    converted: list[dict[str, str]] = []
    for message in messages:
        text = message.text()
        if text:
            converted.append({"role": message.role, "content": text})
    return converted


class ChatService:
    """Opens streaming chat completions for one panel's conversation."""

    def __init__(self, client: AsyncOpenAI, *, provider: str, default_model: str, default_temperature: float) -> None:
        self._client = client
        self._provider = provider.lower()
        self.default_model = default_model
        self.default_temperature = default_temperature

    @classmethod
    def from_settings(cls, settings: Settings) -> ChatService:
        return cls(
            _build_client(settings),
            provider=settings.chat_provider,
            default_model=settings.default_chat_model,
            default_temperature=settings.default_chat_temperature,
        )

    def _resolve_model(self, model: str | None) -> str:
        name = model or self.default_model
        # Only the gateway understands "vendor/model" ids.
        if self._provider != "gateway" and "/" in name:
            return name.split("/", 1)[1]
        return name

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True,
    )
    async def _create_stream(self, **kwargs: Any) -> Any:
        return await self._client.chat.completions.create(**kwargs)

    async def open_stream(
        self,
        messages: list[ChatMessage],
        *,
        model: str | None = None,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        """Start a streamed completion and return an iterator over text deltas.

        The upstream request is made before returning so that connection
        failures surface as ``UpstreamError`` rather than a truncated stream.
        """
        payload = to_openai_messages(messages)
        if not payload:
            raise InvalidInputError("At least one non-empty message is required.")

        resolved = self._resolve_model(model)
        temp = temperature if temperature is not None else self.default_temperature

        try:
            stream = await self._create_stream(
                model=resolved,
                messages=payload,
                temperature=temp,
                stream=True,
            )
        except openai.APIError as exc:
            logger.exception("Chat completion failed to start (model=%s)", resolved)
            raise UpstreamError(f"Chat model {resolved} failed: {exc}") from exc

        logger.info("Streaming chat completion — model=%s messages=%d", resolved, len(payload))
        return self._iter_text(stream, resolved)

    @staticmethod
    async def _iter_text(stream: Any, model: str) -> AsyncIterator[str]:
        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        except openai.APIError as exc:
            logger.error("Chat stream from %s ended early: %s", model, exc)
