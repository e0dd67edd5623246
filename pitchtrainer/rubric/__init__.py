"""
Rubric Module.

Provides the fixed pitch rubric and its validation.
"""

from pitchtrainer.rubric.definition import (
    OPTIMAL_WORD_RANGES,
    PITCH_RUBRIC,
    PROPOSAL_TYPES,
)
from pitchtrainer.rubric.validator import RubricValidationError, RubricValidator

__all__ = [
    "OPTIMAL_WORD_RANGES",
    "PITCH_RUBRIC",
    "PROPOSAL_TYPES",
    "RubricValidationError",
    "RubricValidator",
]
