"""Tests for the streaming chat proxy (mocked OpenAI client)."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from config import Settings, get_settings
from engine.errors import ConfigurationError, InvalidInputError, UpstreamError
from main import app, get_chat_service
from schemas.request import ChatMessage
from services.llm_service import ChatService, _build_client, to_openai_messages


client = TestClient(app)

_REQUEST = httpx.Request("POST", "https://gateway.test/v1/chat/completions")


def _chunk(text: str | None):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


async def _stream(*pieces: str | None):
    for piece in pieces:
        yield _chunk(piece)


def _fake_openai(create: AsyncMock):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def _service(create: AsyncMock, provider: str = "gateway") -> ChatService:
    return ChatService(_fake_openai(create), provider=provider, default_model="openai/gpt-5", default_temperature=0.7)


def _user(text: str) -> ChatMessage:
    return ChatMessage(role="user", parts=[{"type": "text", "text": text}])


async def _collect(service: ChatService, messages, **kwargs) -> str:
    stream = await service.open_stream(messages, **kwargs)
    return "".join([piece async for piece in stream])


@pytest.fixture(autouse=True)
def _clear_overrides():
    yield
    app.dependency_overrides.clear()


class TestMessageConversion:
    def test_ui_parts_are_joined(self):
        message = ChatMessage(
            role="user",
            parts=[
                {"type": "text", "text": "Line one"},
                {"type": "reasoning", "text": "hidden"},
                {"type": "text", "text": "Line two"},
            ],
        )
        assert to_openai_messages([message]) == [{"role": "user", "content": "Line one\nLine two"}]

    def test_plain_content_and_empty_messages(self):
        messages = [
            ChatMessage(role="system", content="Be brief."),
            ChatMessage(role="assistant", content=""),
            _user("Hi there"),
        ]
        assert to_openai_messages(messages) == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hi there"},
        ]


class TestChatService:
    def test_streams_text_deltas(self):
        create = AsyncMock(return_value=_stream("Hel", None, "lo"))
        text = asyncio.run(_collect(_service(create), [_user("Hi")]))
        assert text == "Hello"

        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "openai/gpt-5"
        assert kwargs["temperature"] == 0.7
        assert kwargs["stream"] is True
        assert kwargs["messages"] == [{"role": "user", "content": "Hi"}]

    def test_explicit_model_and_temperature(self):
        create = AsyncMock(return_value=_stream("ok"))
        asyncio.run(_collect(_service(create), [_user("Hi")], model="anthropic/claude-3.5-sonnet", temperature=0.2))
        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "anthropic/claude-3.5-sonnet"
        assert kwargs["temperature"] == 0.2

    def test_openai_provider_strips_vendor_prefix(self):
        create = AsyncMock(return_value=_stream("ok"))
        asyncio.run(_collect(_service(create, provider="openai"), [_user("Hi")]))
        assert create.await_args.kwargs["model"] == "gpt-5"

    def test_empty_history_rejected(self):
        create = AsyncMock()
        with pytest.raises(InvalidInputError):
            asyncio.run(_collect(_service(create), []))
        create.assert_not_awaited()

    def test_transient_error_is_retried(self):
        create = AsyncMock(side_effect=[openai.APIConnectionError(request=_REQUEST), _stream("ok")])
        assert asyncio.run(_collect(_service(create), [_user("Hi")])) == "ok"
        assert create.await_count == 2

    def test_api_error_becomes_upstream_error(self):
        error = openai.BadRequestError(
            "unknown model",
            response=httpx.Response(400, request=_REQUEST),
            body=None,
        )
        create = AsyncMock(side_effect=error)
        with pytest.raises(UpstreamError, match="unknown model"):
            asyncio.run(_collect(_service(create), [_user("Hi")]))
        assert create.await_count == 1


class TestBuildClient:
    def test_gateway_requires_key(self):
        with pytest.raises(ConfigurationError, match="AI_GATEWAY_API_KEY"):
            _build_client(Settings(_env_file=None, chat_provider="gateway", ai_gateway_api_key=""))

    def test_openai_requires_key(self):
        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
            _build_client(Settings(_env_file=None, chat_provider="openai", openai_api_key=""))

    def test_local_needs_no_key(self):
        client = _build_client(Settings(_env_file=None, chat_provider="local"))
        assert str(client.base_url).startswith("http://localhost:11434/v1")


class TestChatEndpoint:
    def test_streams_plain_text(self):
        create = AsyncMock(return_value=_stream("Hello", ", ", "world"))
        app.dependency_overrides[get_chat_service] = lambda: _service(create)

        resp = client.post(
            "/api/chat?model=anthropic/claude-3.5-sonnet&temp=0.3",
            json={"messages": [{"role": "user", "parts": [{"type": "text", "text": "Hi"}]}]},
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert resp.text == "Hello, world"
        assert create.await_args.kwargs["model"] == "anthropic/claude-3.5-sonnet"
        assert create.await_args.kwargs["temperature"] == 0.3

    def test_missing_gateway_key_is_500(self):
        app.dependency_overrides[get_settings] = lambda: Settings(
            _env_file=None, chat_provider="gateway", ai_gateway_api_key=""
        )
        resp = client.post("/api/chat", json={"messages": [{"role": "user", "content": "Hi"}]})
        assert resp.status_code == 500
        assert "AI_GATEWAY_API_KEY" in resp.json()["error"]

    def test_empty_history_is_400(self):
        app.dependency_overrides[get_chat_service] = lambda: _service(AsyncMock())
        resp = client.post("/api/chat", json={"messages": []})
        assert resp.status_code == 400

    def test_upstream_failure_is_502(self):
        create = AsyncMock(side_effect=openai.APIConnectionError(request=_REQUEST))
        app.dependency_overrides[get_chat_service] = lambda: _service(create)
        resp = client.post("/api/chat", json={"messages": [{"role": "user", "content": "Hi"}]})
        assert resp.status_code == 502

    def test_temperature_out_of_range_is_422(self):
        app.dependency_overrides[get_chat_service] = lambda: _service(AsyncMock())
        resp = client.post("/api/chat?temp=5", json={"messages": [{"role": "user", "content": "Hi"}]})
        assert resp.status_code == 422
