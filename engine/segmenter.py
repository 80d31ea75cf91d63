"""Step 1 — Sentence Segmentation.

Regex heuristic: no abbreviation or decimal handling. Anything smarter should
replace ``split_sentences`` wholesale rather than patch it.
"""

from __future__ import annotations

import re

MIN_SENTENCE_LENGTH = 3

_WHITESPACE = re.compile(r"\s+")
_TERMINAL = re.compile(r"([.!?]+)")
_PUNCTUATION_ONLY = re.compile(r"[.!?]+")
_FALLBACK_BOUNDARY = re.compile(r"[.!?]+\s+")


def _keep(fragments: list[str]) -> list[str]:
    stripped = (f.strip() for f in fragments)
    return [s for s in stripped if len(s) >= MIN_SENTENCE_LENGTH and not _PUNCTUATION_ONLY.fullmatch(s)]


def split_sentences(text: str | None) -> list[str]:
    """Split *text* into sentences, terminal punctuation attached.

    Never raises; an empty list means the text could not be segmented.
    """
    if not text:
        return []

    normalized = _WHITESPACE.sub(" ", text).strip()
    if not normalized:
        return []

    pieces: list[str] = []
    for fragment in _TERMINAL.split(normalized):
        if not fragment:
            continue
        if pieces and _PUNCTUATION_ONLY.fullmatch(fragment):
            pieces[-1] += fragment
        else:
            pieces.append(fragment)

    sentences = _keep(pieces)
    if not sentences:
        sentences = _keep(_FALLBACK_BOUNDARY.split(normalized))
    return sentences
