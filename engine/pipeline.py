"""Pipeline orchestrator — segment, classify and aggregate one text."""

from __future__ import annotations

import logging
import time

from config import Settings
from engine.aggregator import compute_statistics
from engine.errors import AnalysisFailedError, ConfigurationError, InvalidInputError
from engine.segmenter import split_sentences
from engine.sentence_analyzer import BiasClassifier, analyze_sentences
from schemas.response import BiasAnalysisResponse

logger = logging.getLogger("biascope.pipeline")


async def run_bias_analysis(
    text: str | None,
    classifier: BiasClassifier,
    settings: Settings,
) -> BiasAnalysisResponse:
    """Execute the bias-analysis pipeline for a single request.

    Parameters
    ----------
    text : str | None
        Prompt or response text, as received.
    classifier : BiasClassifier
        Detection / type classifier (``InferenceClient`` in production).
    settings : Settings
        Process configuration; the inference token is checked before any
        outbound call.

    Raises
    ------
    InvalidInputError
        Blank text, or nothing could be segmented.
    ConfigurationError
        No inference token configured.
    AnalysisFailedError
        Every sentence failed analysis.
    """
    if not text or not text.strip():
        raise InvalidInputError("Text is required for bias analysis.")
    if not settings.huggingface_token:
        raise ConfigurationError("HUGGINGFACE_TOKEN is not configured on the server.")

    t0 = time.perf_counter()

    sentences = split_sentences(text)
    if not sentences:
        raise InvalidInputError("No sentences could be extracted from the text.")
    logger.info("Segmented text into %d sentence(s)", len(sentences))

    records = await analyze_sentences(
        classifier,
        sentences,
        concurrency=settings.max_concurrent_classifications,
    )
    if not records:
        raise AnalysisFailedError("Bias analysis failed for every sentence.")

    statistics = compute_statistics(records)

    elapsed = time.perf_counter() - t0
    logger.info(
        "Bias analysis complete in %.2fs — %d/%d analysed, %.1f%% biased",
        elapsed,
        statistics.total_sentences,
        len(sentences),
        statistics.bias_percentage,
    )

    return BiasAnalysisResponse(text=text, sentences=records, statistics=statistics)
