"""
Evaluation normalizer.

Turns the language model's raw, untrusted evaluation object into a complete
NormalizedEvaluation. Missing or malformed parts are defaulted toward low
scores instead of rejected; only a non-object top-level value is an error.

Two looseness rules apply:
- Extra sub-criteria returned by the model are carried through and take part
  in their category's mean.
- Sub-scores outside 0-100 are not clamped before averaging.
"""

import math
from collections.abc import Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from pydantic import BaseModel

from pitchtrainer.models import (
    NormalizedEvaluation,
    Proposal,
    ProposalPriority,
    Rubric,
)
from pitchtrainer.rubric import PITCH_RUBRIC

MAX_PROPOSALS = 3
DEFAULT_PROPOSAL_TYPE = "GENERAL_IMPROVEMENT"
DEFAULT_PROPOSAL_TITLE = "Verbesserung"
DEFAULT_PROPOSAL_DESCRIPTION = "Siehe Bewertungsdetails"
DEFAULT_SUMMARY = "Bewertung abgeschlossen"

_PRIORITIES = frozenset(p.value for p in ProposalPriority)


class InvalidInputError(Exception):
    """Raised when the raw evaluation is not an object at all."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"Invalid input: expected an evaluation object, got {type(value).__name__}"
        )


def round_half_up(value: float | Decimal, places: int = 1) -> Decimal:
    """Round half away from zero to the given number of decimal places."""
    number = Decimal(str(value))
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, number.adjusted() + places + 2)
        return number.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _as_number(value: Any) -> float | None:
    """Return value as a finite float, or None if it isn't numeric."""
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        # ints beyond the float range overflow instead of becoming inf
        return None
    return number if math.isfinite(number) else None


def _text_or(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def merge_kpis(raw_kpis: Any, rubric: Rubric = PITCH_RUBRIC) -> dict[str, dict[str, float]]:
    """
    Merge the caller's KPI scores over a zero-valued rubric template.

    Rubric sub-criteria come first in rubric order, followed by any extra
    sub-criteria in the order the caller supplied them. Unknown categories
    are dropped.
    """
    supplied = raw_kpis if isinstance(raw_kpis, Mapping) else {}
    merged: dict[str, dict[str, float]] = {}

    for category in rubric.categories:
        scores = category.zero_template()
        partial = supplied.get(category.key)
        if isinstance(partial, Mapping):
            for key, value in partial.items():
                number = _as_number(value)
                scores[str(key)] = number if number is not None else 0.0
        merged[category.key] = scores

    return merged


def category_mean(scores: Mapping[str, float]) -> Decimal:
    """Arithmetic mean of every sub-criterion value, extras included."""
    if not scores:
        return Decimal(0)
    total = sum((Decimal(str(v)) for v in scores.values()), Decimal(0))
    return total / len(scores)


def compute_overall_score(
    kpis: Mapping[str, Mapping[str, float]], rubric: Rubric = PITCH_RUBRIC
) -> float:
    """Weighted sum of the category means, rounded to one decimal."""
    overall = sum(
        (category_mean(kpis.get(c.key, {})) * c.weight for c in rubric.categories),
        Decimal(0),
    )
    return float(round_half_up(overall, 1))


def category_scores(kpis: Mapping[str, Mapping[str, float]]) -> dict[str, int]:
    """Each category's mean rounded to a whole number."""
    return {key: int(round_half_up(category_mean(scores), 0)) for key, scores in kpis.items()}


def normalize_proposal(raw: Any) -> Proposal:
    """Build a valid proposal, defaulting every missing or malformed field."""
    data = raw if isinstance(raw, Mapping) else {}
    priority = data.get("priority")
    return Proposal(
        type=_text_or(data.get("type"), DEFAULT_PROPOSAL_TYPE),
        title=_text_or(data.get("title"), DEFAULT_PROPOSAL_TITLE),
        description=_text_or(data.get("description"), DEFAULT_PROPOSAL_DESCRIPTION),
        priority=(
            ProposalPriority(priority)
            if isinstance(priority, str) and priority in _PRIORITIES
            else ProposalPriority.MEDIUM
        ),
    )


def normalize_proposals(raw_proposals: Any) -> tuple[Proposal, ...]:
    if isinstance(raw_proposals, (str, bytes)) or not isinstance(raw_proposals, Sequence):
        return ()
    return tuple(normalize_proposal(p) for p in raw_proposals[:MAX_PROPOSALS])


def _word_count(value: Any) -> int:
    number = _as_number(value)
    return int(number) if number is not None else 0


def normalize(raw: Any, rubric: Rubric = PITCH_RUBRIC) -> NormalizedEvaluation:
    """
    Normalize a raw evaluation against the rubric.

    Args:
        raw: The model's evaluation object (a mapping, or an already
            normalized evaluation).
        rubric: Rubric to normalize against.

    Returns:
        A NormalizedEvaluation with every rubric category and sub-criterion.

    Raises:
        InvalidInputError: If raw is not an object (None, a primitive or a list).
    """
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(mode="json")
    if not isinstance(raw, Mapping):
        raise InvalidInputError(raw)

    kpis = merge_kpis(raw.get("kpis"), rubric)

    return NormalizedEvaluation(
        kpis=kpis,
        category_scores=category_scores(kpis),
        overall_score=compute_overall_score(kpis, rubric),
        proposals=normalize_proposals(raw.get("proposals")),
        word_count=_word_count(raw.get("word_count")),
        summary=_text_or(raw.get("summary"), DEFAULT_SUMMARY),
    )
