"""
Evaluation Module.

Turns a pitch transcript into a normalized, weighted rubric evaluation.
"""

from pitchtrainer.evaluation.engine import PitchEvaluator
from pitchtrainer.evaluation.llm_client import LLMClient
from pitchtrainer.evaluation.normalizer import InvalidInputError, normalize
from pitchtrainer.evaluation.parser import ResponseParseError, ResponseParser
from pitchtrainer.evaluation.prompt_builder import PromptBuilder

__all__ = [
    "InvalidInputError",
    "LLMClient",
    "PitchEvaluator",
    "PromptBuilder",
    "ResponseParseError",
    "ResponseParser",
    "normalize",
]
