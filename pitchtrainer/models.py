"""
Pydantic models for PitchTrainer.

These models define the schemas for:
- The weighted pitch rubric
- Normalized evaluation results and improvement proposals
- Transcription results
- Anonymous statistics records and aggregates

Results are frozen once built; the raw language-model output never reaches
these models without going through the normalizer first.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

PitchDuration = Literal[45, 60]
SUPPORTED_DURATIONS: tuple[int, ...] = (45, 60)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ==============================================================================
# Rubric Models
# ==============================================================================


class RubricCriterion(BaseModel):
    """A single scored sub-criterion within a rubric category."""

    model_config = ConfigDict(frozen=True, strict=True)

    key: str = Field(
        ...,
        min_length=1,
        pattern=r"^[a-z][a-z0-9_]*$",
        description="Machine name used as JSON key (e.g. 'specific_referral_ask')",
    )

    description: str = Field(
        ...,
        min_length=1,
        description="What the evaluator should look for",
    )


class RubricCategory(BaseModel):
    """
    A weighted rubric category.

    The category score is the mean of its sub-criterion scores; the weight is
    the category's share of the overall score.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    key: str = Field(..., min_length=1, pattern=r"^[a-z][a-z0-9_]*$")

    title: str = Field(..., min_length=1, description="Human readable category name")

    weight: Decimal = Field(..., gt=0, le=1, description="Share of the overall score")

    criteria: tuple[RubricCriterion, ...] = Field(..., min_length=1)

    @field_validator("weight", mode="before")
    @classmethod
    def convert_to_decimal(cls, v: Any) -> Decimal:
        """Convert numeric values to Decimal for precision."""
        if isinstance(v, Decimal):
            return v
        return Decimal(str(v))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def criterion_keys(self) -> tuple[str, ...]:
        return tuple(c.key for c in self.criteria)

    def zero_template(self) -> dict[str, float]:
        """Return every sub-criterion of this category scored 0."""
        return {key: 0.0 for key in self.criterion_keys}


class Rubric(BaseModel):
    """
    A complete weighted rubric.

    The rubric is validated to ensure:
    - Category weights sum to exactly 1
    - No duplicate category keys
    - No duplicate sub-criterion keys within a category
    """

    model_config = ConfigDict(frozen=True, strict=True)

    title: str = Field(..., min_length=1)

    categories: tuple[RubricCategory, ...] = Field(..., min_length=1)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_weight(self) -> Decimal:
        return sum((c.weight for c in self.categories), Decimal(0))

    @model_validator(mode="after")
    def validate_weights_and_keys(self) -> "Rubric":
        """Ensure weights sum to 1 and keys are unique."""
        if self.total_weight != Decimal(1):
            raise ValueError(f"Category weights must sum to 1, got {self.total_weight}")

        keys = [c.key for c in self.categories]
        if len(keys) != len(set(keys)):
            duplicates = {k for k in keys if keys.count(k) > 1}
            raise ValueError(f"Duplicate category keys found: {duplicates}")

        for category in self.categories:
            names = list(category.criterion_keys)
            if len(names) != len(set(names)):
                duplicates = {n for n in names if names.count(n) > 1}
                raise ValueError(
                    f"Duplicate criterion keys in '{category.key}': {duplicates}"
                )
        return self

    def category(self, key: str) -> RubricCategory:
        for category in self.categories:
            if category.key == key:
                return category
        raise KeyError(key)


# ==============================================================================
# Evaluation Result Models
# ==============================================================================


class ProposalPriority(str, Enum):
    """Priority of an improvement proposal."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Proposal(BaseModel):
    """A structured improvement suggestion."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., min_length=1, description="Proposal category, e.g. 'CTA_CLARITY'")

    title: str = Field(..., min_length=1)

    description: str = Field(..., min_length=1)

    priority: ProposalPriority = Field(default=ProposalPriority.MEDIUM)


class NormalizedEvaluation(BaseModel):
    """
    A complete, validated evaluation.

    Every rubric category is present with all of its sub-criteria; the
    overall score is the weighted sum of the category means.
    """

    model_config = ConfigDict(frozen=True)

    kpis: dict[str, dict[str, float]] = Field(
        ...,
        description="Category -> sub-criterion -> score",
    )

    category_scores: dict[str, int] = Field(
        default_factory=dict,
        description="Category -> mean score rounded to a whole number",
    )

    overall_score: float = Field(..., description="Weighted score rounded to one decimal")

    proposals: tuple[Proposal, ...] = Field(default=(), max_length=3)

    word_count: int = Field(default=0)

    summary: str = Field(default="Bewertung abgeschlossen")


class EvaluationOutcome(NormalizedEvaluation):
    """A normalized evaluation together with how it was produced."""

    processing_time_ms: int = Field(..., ge=0)

    model_used: str = Field(...)

    def to_evaluation(self) -> NormalizedEvaluation:
        """Drop the provenance fields."""
        return NormalizedEvaluation(
            kpis=self.kpis,
            category_scores=self.category_scores,
            overall_score=self.overall_score,
            proposals=self.proposals,
            word_count=self.word_count,
            summary=self.summary,
        )


# ==============================================================================
# Transcription Models
# ==============================================================================


class TranscriptionResult(BaseModel):
    """Result of transcribing an audio recording."""

    model_config = ConfigDict(frozen=True, strict=True)

    transcript: str = Field(...)

    language: str = Field(default="de")

    confidence: float = Field(..., ge=0.0, le=1.0)

    processing_time_ms: int = Field(..., ge=0)

    model_used: str = Field(...)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_empty(self) -> bool:
        """Check if the transcript is empty or whitespace-only."""
        return len(self.transcript.strip()) == 0


# ==============================================================================
# Statistics Models
# ==============================================================================


class EvaluationRecord(BaseModel):
    """
    Anonymous statistics row stored for each evaluation.

    Deliberately carries no transcript and nothing that identifies the speaker.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    duration: PitchDuration

    kpi_scores: dict[str, dict[str, float]]

    proposals: tuple[Proposal, ...] = ()

    word_count: int = Field(default=0, ge=0)

    overall_score: float

    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_evaluation(
        cls,
        evaluation: NormalizedEvaluation,
        duration: int,
        word_count: int,
        timestamp: datetime | None = None,
    ) -> "EvaluationRecord":
        return cls(
            duration=duration,  # type: ignore[arg-type]
            kpi_scores=evaluation.kpis,
            proposals=evaluation.proposals,
            word_count=word_count,
            overall_score=evaluation.overall_score,
            timestamp=timestamp or _utcnow(),
        )


class DurationAverage(BaseModel):
    model_config = ConfigDict(frozen=True)

    duration: int
    count: int
    avg_overall: float | None
    avg_words: float | None


class RecentEvaluation(BaseModel):
    model_config = ConfigDict(frozen=True)

    duration: int
    overall_score: float | None
    word_count: int | None
    timestamp: str


class ProposalTypeCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    total_count: int


class Statistics(BaseModel):
    """Aggregate view over all stored evaluations."""

    model_config = ConfigDict(frozen=True)

    total_evaluations: int = 0

    averages_by_duration: tuple[DurationAverage, ...] = ()

    recent_evaluations: tuple[RecentEvaluation, ...] = ()

    proposal_stats: tuple[ProposalTypeCount, ...] = ()

    last_updated: datetime = Field(default_factory=_utcnow)
