"""Step 3 — Report statistics.

Deterministic reduction of per-sentence records; no network calls.
"""

from __future__ import annotations

from collections import Counter

from engine.labels import BIAS_THRESHOLD
from schemas.response import AggregateStats, SentenceRecord


def _is_biased(record: SentenceRecord) -> bool:
    detection = record.bias_detection
    return detection.friendly_label.lower() == "biased" and detection.score > BIAS_THRESHOLD


def compute_statistics(records: list[SentenceRecord]) -> AggregateStats:
    """Summarise successfully analysed sentences.

    totalSentences     → records given (failed sentences are already gone)
    biasedSentences    → friendly label "Biased" with score > 0.5
    biasPercentage     → 1 decimal place
    avgBiasScore       → mean detection score, 3 decimal places
    avgBiasedScore     → mean over the biased subset, 3 decimal places

    With no records every figure is 0.
    """
    total = len(records)
    biased = [r for r in records if _is_biased(r)]

    type_counts: Counter[str] = Counter(r.bias_type.label for r in records if r.bias_type is not None)

    if total == 0:
        return AggregateStats(
            total_sentences=0,
            biased_sentences=0,
            unbiased_sentences=0,
            bias_percentage=0.0,
            avg_bias_score=0.0,
            avg_biased_score=0.0,
            bias_type_counts={},
        )

    avg_score = sum(r.bias_detection.score for r in records) / total
    avg_biased = sum(r.bias_detection.score for r in biased) / len(biased) if biased else 0.0

    return AggregateStats(
        total_sentences=total,
        biased_sentences=len(biased),
        unbiased_sentences=total - len(biased),
        bias_percentage=round(100 * len(biased) / total, 1),
        avg_bias_score=round(avg_score, 3),
        avg_biased_score=round(avg_biased, 3),
        bias_type_counts=dict(type_counts),
    )
