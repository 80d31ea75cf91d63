"""Classifier label normalisation."""

from __future__ import annotations

import re

BIAS_THRESHOLD = 0.5

_BIASED_LABELS = {"label_1", "biased", "bias"}
_UNBIASED_LABELS = {"label_0", "neutral", "unbiased"}
_WORD_BOUNDARY = re.compile(r"[_\s]+")


def friendly_label(label: str | None) -> str:
    """Map a raw classifier label to a human-readable category.

    ``label_1`` / ``biased`` / ``bias``     → "Biased"
    ``label_0`` / ``neutral`` / ``unbiased`` → "Unbiased"
    anything else                            → Title Cased words
    """
    if not label:
        return "Unknown"
    normalized = label.lower()
    if normalized in _BIASED_LABELS:
        return "Biased"
    if normalized in _UNBIASED_LABELS:
        return "Unbiased"
    words = [w for w in _WORD_BOUNDARY.split(label) if w]
    return " ".join(w[0].upper() + w[1:] for w in words) or "Unknown"


def is_biased(label: str | None, score: float) -> bool:
    """True when *label* means "biased" and *score* clears the threshold."""
    return friendly_label(label).lower() == "biased" and score > BIAS_THRESHOLD
