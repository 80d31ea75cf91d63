"""Thin client for the hosted bias classifiers (Hugging Face inference API)."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from config import Settings
from engine.errors import ConfigurationError, UpstreamError
from schemas.response import ClassificationResult

logger = logging.getLogger("biascope.inference")

_GENERIC_FAILURE = "Hugging Face inference request failed."


def _parse_json_safe(response: httpx.Response) -> Any:
    """Return the decoded JSON body, the raw text when it isn't JSON, or ``None``."""
    text = response.text
    if not text:
        return None
    try:
        return response.json()
    except ValueError:
        return text


def _error_message(data: Any) -> str:
    if isinstance(data, dict) and "error" in data:
        return str(data["error"])
    if isinstance(data, str) and data.strip():
        return data
    return _GENERIC_FAILURE


def _best_prediction(data: Any) -> ClassificationResult | None:
    """Normalise ``{...}``, ``[{...}]`` and ``[[{...}, ...]]`` to a single prediction."""
    prediction = data[0] if isinstance(data, list) and data else data

    # Text-classification pipelines may return every candidate label.
    if isinstance(prediction, list):
        candidates = [c for c in prediction if isinstance(c, dict) and isinstance(c.get("score"), (int, float))]
        if not candidates:
            return None
        prediction = max(candidates, key=lambda c: c["score"])

    if not isinstance(prediction, dict):
        return None
    if not isinstance(prediction.get("label"), str):
        return None
    score = prediction.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return None
    try:
        return ClassificationResult(label=prediction["label"], score=score)
    except ValidationError:
        logger.warning("Discarding out-of-range prediction: %s", prediction)
        return None


class InferenceClient:
    """Calls one of the two configured classifier models with a text payload.

    Owns its ``httpx.AsyncClient`` unless one is passed in.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str,
        detector_model: str,
        type_model: str,
        detector_url: str = "",
        type_url: str = "",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")
        self.detector_model = detector_model
        self.type_model = type_model
        self._endpoints = {
            detector_model: detector_url or f"{self._base_url}/{detector_model}",
            type_model: type_url or f"{self._base_url}/{type_model}",
        }
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, *, http_client: httpx.AsyncClient | None = None) -> InferenceClient:
        return cls(
            settings.huggingface_token,
            base_url=settings.huggingface_inference_base_url,
            detector_model=settings.bias_detector_model,
            type_model=settings.bias_type_model,
            detector_url=settings.bias_detector_url,
            type_url=settings.bias_type_url,
            timeout=settings.inference_timeout,
            http_client=http_client,
        )

    async def __aenter__(self) -> InferenceClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    def endpoint_for(self, model: str) -> str:
        return self._endpoints.get(model, f"{self._base_url}/{model}")

    async def classify(self, model: str, text: str) -> ClassificationResult | None:
        """Run *model* on *text* and return its best prediction.

        Returns ``None`` when the response body holds no usable prediction.

        Raises
        ------
        ConfigurationError
            No inference token is configured (nothing is sent).
        UpstreamError
            Transport error, timeout, or a failing HTTP status.
        """
        if not self._token:
            raise ConfigurationError("Missing HUGGINGFACE_TOKEN environment variable.")

        url = self.endpoint_for(model)
        try:
            response = await self._http.post(
                url,
                json={"inputs": text},
                headers={"Authorization": f"Bearer {self._token}"},
            )
        except httpx.TimeoutException as exc:
            raise UpstreamError(f"Inference request to {model} timed out.") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Inference request to {model} failed: {exc}") from exc

        data = _parse_json_safe(response)
        if response.is_error:
            logger.debug("Model %s answered %d: %s", model, response.status_code, str(data)[:500])
            raise UpstreamError(_error_message(data))

        return _best_prediction(data)

    async def detect_bias(self, text: str) -> ClassificationResult | None:
        return await self.classify(self.detector_model, text)

    async def classify_bias_type(self, text: str) -> ClassificationResult | None:
        return await self.classify(self.type_model, text)
