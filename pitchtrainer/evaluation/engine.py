"""
Pitch evaluator - the evaluation orchestrator.

Builds the prompt, asks the model, decodes its reply and normalizes it. A
single attempt per call; retry decisions belong to the caller.
"""

import logging
import time

from pitchtrainer.config import Settings
from pitchtrainer.evaluation.llm_client import LLMClient
from pitchtrainer.evaluation.normalizer import InvalidInputError, normalize
from pitchtrainer.evaluation.parser import ResponseParser
from pitchtrainer.evaluation.prompt_builder import PromptBuilder
from pitchtrainer.models import SUPPORTED_DURATIONS, EvaluationOutcome
from pitchtrainer.upstream import UpstreamError

logger = logging.getLogger(__name__)


class PitchEvaluator:
    """Evaluates pitch transcripts against the pitch rubric."""

    def __init__(self, settings: Settings, llm_client: LLMClient | None = None):
        """
        Initialize the evaluator.

        Args:
            settings: Configuration settings.
            llm_client: Chat client; built from settings if not provided.

        Raises:
            MissingConfigError: If no client is given and no API key is set.
        """
        self._settings = settings
        self._llm_client = llm_client or LLMClient(settings)
        self._prompt_builder = PromptBuilder()
        self._response_parser = ResponseParser()

    @property
    def model(self) -> str:
        return self._settings.mistral_evaluation_model

    def evaluate(self, transcript: str, duration: int) -> EvaluationOutcome:
        """
        Evaluate a pitch transcript.

        Args:
            transcript: What the speaker said.
            duration: Pitch length in seconds (45 or 60).

        Returns:
            The normalized evaluation with timing and model information.

        Raises:
            ValueError: If the transcript is empty or the duration unsupported.
            UpstreamError: If the model call fails or its reply is not JSON.
            InvalidInputError: If the reply is JSON but not an object.
        """
        if not transcript or not transcript.strip():
            raise ValueError("Transcript is empty")
        if duration not in SUPPORTED_DURATIONS:
            raise ValueError(f"Duration must be one of {SUPPORTED_DURATIONS}, got {duration}")

        start = time.perf_counter()
        logger.info(
            "Evaluating %ds pitch with %s (%d characters)", duration, self.model, len(transcript)
        )

        try:
            raw_response = self._llm_client.complete_json(
                system_prompt=PromptBuilder.get_system_prompt(),
                user_prompt=self._prompt_builder.build_evaluation_prompt(transcript, duration),
            )
            raw = self._response_parser.parse(raw_response)
            evaluation = normalize(raw)
        except (UpstreamError, InvalidInputError) as e:
            logger.error("Evaluation failed after %dms: %s", _elapsed_ms(start), e)
            raise

        elapsed = _elapsed_ms(start)
        logger.info(
            "Evaluation completed in %dms, overall score %.1f", elapsed, evaluation.overall_score
        )

        return EvaluationOutcome(
            **evaluation.model_dump(exclude={"proposals"}),
            proposals=evaluation.proposals,
            processing_time_ms=elapsed,
            model_used=self.model,
        )

    def test_connection(self) -> dict:
        return self._llm_client.test_connection()


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
