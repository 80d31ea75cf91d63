"""Shared fixtures: fake classifier and isolated settings."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from config import Settings
from engine.errors import UpstreamError
from schemas.response import ClassificationResult


class FakeClassifier:
    """Canned detector / type classifier keyed by sentence.

    Values may be a ``ClassificationResult``, ``None`` or an exception to raise.
    Sentences missing from ``types`` fail type classification.
    """

    def __init__(
        self,
        detections: dict[str, Any],
        types: dict[str, Any] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.detections = detections
        self.types = types or {}
        self.delays = delays or {}
        self.calls: list[tuple[str, str]] = []

    async def _answer(self, table: dict[str, Any], text: str) -> ClassificationResult | None:
        if text in self.delays:
            await asyncio.sleep(self.delays[text])
        if text not in table:
            raise UpstreamError(f"no canned answer for {text!r}")
        result = table[text]
        if isinstance(result, Exception):
            raise result
        return result

    async def detect_bias(self, text: str) -> ClassificationResult | None:
        self.calls.append(("detect", text))
        return await self._answer(self.detections, text)

    async def classify_bias_type(self, text: str) -> ClassificationResult | None:
        self.calls.append(("type", text))
        return await self._answer(self.types, text)


@pytest.fixture
def make_classifier():
    return FakeClassifier


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, huggingface_token="hf_test_token", max_concurrent_classifications=2)
