"""Response schemas for the BiasScope API."""

from __future__ import annotations

from pydantic import BaseModel, Field


# ── Classifier output ──────────────────────────────────────────────────

class ClassificationResult(BaseModel):
    """Best prediction returned by a hosted classifier."""

    label: str
    score: float = Field(ge=0.0, le=1.0)


# ── Per-sentence records ───────────────────────────────────────────────

class BiasDetection(BaseModel):
    label: str
    friendly_label: str = Field(alias="friendlyLabel")
    score: float = Field(ge=0.0, le=1.0)

    model_config = {"populate_by_name": True}


class BiasType(BaseModel):
    label: str = Field(description="Friendly bias category, e.g. 'Framing'.")
    score: float = Field(ge=0.0, le=1.0)


class SentenceRecord(BaseModel):
    sentence: str
    bias_detection: BiasDetection = Field(alias="biasDetection")
    bias_type: BiasType | None = Field(default=None, alias="biasType")

    model_config = {"populate_by_name": True, "frozen": True}


# ── Aggregate ──────────────────────────────────────────────────────────

class AggregateStats(BaseModel):
    total_sentences: int = Field(alias="totalSentences", ge=0)
    biased_sentences: int = Field(alias="biasedSentences", ge=0)
    unbiased_sentences: int = Field(alias="unbiasedSentences", ge=0)
    bias_percentage: float = Field(alias="biasPercentage", ge=0.0, le=100.0)
    avg_bias_score: float = Field(alias="avgBiasScore")
    avg_biased_score: float = Field(alias="avgBiasedScore")
    bias_type_counts: dict[str, int] = Field(default_factory=dict, alias="biasTypeCounts")

    model_config = {"populate_by_name": True, "frozen": True}


# ── Top-level responses ────────────────────────────────────────────────

class BiasAnalysisResponse(BaseModel):
    """Full report for one ``POST /api/bias`` call."""

    text: str
    sentences: list[SentenceRecord] = Field(default_factory=list)
    statistics: AggregateStats

    model_config = {"frozen": True}


class ModelsResponse(BaseModel):
    default_model: str = Field(alias="defaultModel")
    models: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    error: str
