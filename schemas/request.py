"""Request schemas for the BiasScope API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class BiasRequest(BaseModel):
    """Payload for ``POST /api/bias``.

    ``text`` is optional at the schema level so a missing or blank value is
    answered with a 400 by the pipeline instead of a 422.
    """

    text: str | None = Field(
        default=None,
        description="Prompt or response text to analyse sentence by sentence.",
    )


class MessagePart(BaseModel):
    type: str
    text: str | None = None


class ChatMessage(BaseModel):
    """One message of a chat history.

    Accepts both the UI shape (``parts``) and the plain shape (``content``).
    """

    role: Literal["system", "user", "assistant"]
    content: str | None = None
    parts: list[MessagePart] = Field(default_factory=list)

    def text(self) -> str:
        if self.parts:
            return "\n".join(p.text for p in self.parts if p.type == "text" and p.text)
        return self.content or ""


class ChatRequest(BaseModel):
    """Payload for ``POST /api/chat``."""

    messages: list[ChatMessage] = Field(default_factory=list)
