"""
Prompt builder for pitch evaluation.

Renders the rubric into German scoring instructions and pins the exact JSON
answer format the normalizer expects.
"""

import json

from pitchtrainer.models import SUPPORTED_DURATIONS, Rubric
from pitchtrainer.rubric import OPTIMAL_WORD_RANGES, PITCH_RUBRIC, PROPOSAL_TYPES


class PromptBuilder:
    """Builds evaluation prompts from the weighted rubric."""

    SYSTEM_PROMPT = (
        "Du bist ein Experte für BNI-Präsentationen und bewertest Pitches objektiv "
        "nach den vorgegebenen KPI-Kategorien."
    )

    def __init__(self, rubric: Rubric = PITCH_RUBRIC):
        self._rubric = rubric

    def build_evaluation_prompt(self, transcript: str, duration: int) -> str:
        """
        Build the user prompt for evaluating a transcript.

        Args:
            transcript: The pitch transcript.
            duration: Pitch length in seconds (45 or 60).

        Returns:
            The formatted user prompt.

        Raises:
            ValueError: If the duration is not supported.
        """
        if duration not in SUPPORTED_DURATIONS:
            raise ValueError(f"Duration must be one of {SUPPORTED_DURATIONS}, got {duration}")

        low, high = OPTIMAL_WORD_RANGES[duration]

        return f"""
Bewerte diesen {duration}-Sekunden BNI-Pitch nach den folgenden KPI-Kategorien.
Gib deine Antwort als JSON-Objekt zurück.

PITCH TRANSCRIPT:
"{transcript}"

BEWERTUNGSKRITERIEN:
Bewerte jeden Aspekt von 0-100 Punkten.
Optimale Wortanzahl für {duration}s: {low}-{high} Wörter.

{self._format_rubric()}

ANTWORT-FORMAT:
{self._format_answer_template()}

Bewerte streng aber fair. Fehlende Elemente = niedrige Scores. Maximal 3 Verbesserungsvorschläge."""

    def _format_rubric(self) -> str:
        lines: list[str] = []

        for i, category in enumerate(self._rubric.categories, start=1):
            percent = int(category.weight * 100)
            lines.append(f"{i}. {category.key.upper()} - {category.title} ({percent}% Gewichtung):")
            for criterion in category.criteria:
                lines.append(f"   - {criterion.key}: {criterion.description}")
            lines.append("")

        return "\n".join(lines).rstrip()

    def _format_answer_template(self) -> str:
        template = {
            "kpis": {
                category.key: {key: "SCORE" for key in category.criterion_keys}
                for category in self._rubric.categories
            },
            "proposals": [
                {
                    "type": "|".join(PROPOSAL_TYPES),
                    "title": "Kurzer Titel",
                    "description": "Konkrete Verbesserungsempfehlung",
                    "priority": "HIGH|MEDIUM|LOW",
                }
            ],
            "overall_score": "CALCULATED_WEIGHTED_AVERAGE",
            "word_count": "ACTUAL_WORD_COUNT",
            "summary": "2-3 Sätze Gesamteinschätzung",
        }
        return json.dumps(template, indent=2, ensure_ascii=False)

    @staticmethod
    def get_system_prompt() -> str:
        """Get the system prompt for pitch evaluation."""
        return PromptBuilder.SYSTEM_PROMPT
