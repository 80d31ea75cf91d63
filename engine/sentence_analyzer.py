"""Step 2 — Per-sentence bias classification."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from engine.errors import ConfigurationError, UpstreamError
from engine.labels import friendly_label, is_biased
from schemas.response import BiasDetection, BiasType, ClassificationResult, SentenceRecord

logger = logging.getLogger("biascope.engine.sentence_analyzer")


class BiasClassifier(Protocol):
    async def detect_bias(self, text: str) -> ClassificationResult | None: ...

    async def classify_bias_type(self, text: str) -> ClassificationResult | None: ...


@dataclass(frozen=True)
class SentenceAnalysis:
    """Mandatory detection plus a best-effort bias type."""

    sentence: str
    detection: ClassificationResult
    bias_type: ClassificationResult | None = None

    @property
    def biased(self) -> bool:
        return is_biased(self.detection.label, self.detection.score)

    def to_record(self) -> SentenceRecord:
        return SentenceRecord(
            sentence=self.sentence,
            bias_detection=BiasDetection(
                label=self.detection.label,
                friendly_label=friendly_label(self.detection.label),
                score=self.detection.score,
            ),
            bias_type=(
                BiasType(label=friendly_label(self.bias_type.label), score=self.bias_type.score)
                if self.bias_type is not None
                else None
            ),
        )


async def _classify_type(classifier: BiasClassifier, sentence: str) -> ClassificationResult | None:
    try:
        return await classifier.classify_bias_type(sentence)
    except Exception as exc:
        logger.warning("Bias type classification failed for %r: %s", sentence[:80], exc)
        return None


async def analyze_sentence(classifier: BiasClassifier, sentence: str) -> SentenceAnalysis:
    """Classify one sentence.

    Detection failures propagate; type classification only runs for biased
    sentences and its failures are recorded as "no type".
    """
    detection = await classifier.detect_bias(sentence)
    if detection is None:
        raise UpstreamError("Did not receive a valid response from the bias detector model.")

    analysis = SentenceAnalysis(sentence=sentence, detection=detection)
    if not analysis.biased:
        return analysis

    bias_type = await _classify_type(classifier, sentence)
    return SentenceAnalysis(sentence=sentence, detection=detection, bias_type=bias_type)


async def analyze_sentences(
    classifier: BiasClassifier,
    sentences: list[str],
    *,
    concurrency: int = 4,
) -> list[SentenceRecord]:
    """Analyse *sentences* concurrently, preserving input order.

    Sentences whose analysis fails are logged and dropped. A missing
    credential is not a per-sentence failure and is re-raised.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _bounded(sentence: str) -> SentenceAnalysis:
        async with semaphore:
            return await analyze_sentence(classifier, sentence)

    results = await asyncio.gather(*(_bounded(s) for s in sentences), return_exceptions=True)

    records: list[SentenceRecord] = []
    for sentence, result in zip(sentences, results):
        if isinstance(result, ConfigurationError):
            raise result
        if isinstance(result, Exception):
            logger.error("Sentence analysis failed for %r: %s", sentence[:80], result)
            continue
        if isinstance(result, BaseException):
            raise result
        records.append(result.to_record())

    if len(records) < len(sentences):
        logger.warning("%d of %d sentence(s) dropped after failed analysis", len(sentences) - len(records), len(sentences))
    return records
