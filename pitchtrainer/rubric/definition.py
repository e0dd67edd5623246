"""
The fixed pitch rubric.

Four weighted categories, each scored 0-100 per sub-criterion. The order of
categories and sub-criteria is the order used in prompts and results.
"""

from pitchtrainer.models import Rubric, RubricCategory, RubricCriterion

CALL_TO_ACTION = "call_to_action"
STRUCTURE_TIME = "structure_time"
CONTENT_CLARITY = "content_clarity"
MEMORABILITY = "memorability"

PITCH_RUBRIC = Rubric(
    title="BNI Pitch Rubric",
    categories=(
        RubricCategory(
            key=CALL_TO_ACTION,
            title="Call-to-Action Quality",
            weight="0.40",
            criteria=(
                RubricCriterion(
                    key="specific_referral_ask",
                    description="Konkrete Empfehlungsanfrage vorhanden",
                ),
                RubricCriterion(
                    key="contact_method_clarity",
                    description="Kontaktmethode klar kommuniziert",
                ),
                RubricCriterion(
                    key="target_client_definition",
                    description="Zielklient definiert",
                ),
                RubricCriterion(
                    key="actionable_request",
                    description="Handlungsaufforderung ist umsetzbar",
                ),
            ),
        ),
        RubricCategory(
            key=STRUCTURE_TIME,
            title="Structure & Time",
            weight="0.25",
            criteria=(
                RubricCriterion(
                    key="introduction_completeness",
                    description="Vollständige Vorstellung (Name, Unternehmen)",
                ),
                RubricCriterion(
                    key="word_count_optimization",
                    description="Wortanzahl für die Redezeit optimal",
                ),
                RubricCriterion(
                    key="clear_flow_organization",
                    description="Klarer Aufbau und Struktur",
                ),
                RubricCriterion(
                    key="time_management",
                    description="Zeitmanagement passend zur Redezeit",
                ),
            ),
        ),
        RubricCategory(
            key=CONTENT_CLARITY,
            title="Content Clarity",
            weight="0.20",
            criteria=(
                RubricCriterion(
                    key="jargon_free_language",
                    description="Verständliche Sprache ohne Fachjargon",
                ),
                RubricCriterion(
                    key="single_focus_maintenance",
                    description="Fokus auf eine Dienstleistung/Produkt",
                ),
                RubricCriterion(
                    key="benefit_articulation",
                    description="Nutzen klar artikuliert",
                ),
                RubricCriterion(
                    key="credibility_markers",
                    description="Glaubwürdigkeitsmarker vorhanden",
                ),
            ),
        ),
        RubricCategory(
            key=MEMORABILITY,
            title="Memorability",
            weight="0.15",
            criteria=(
                RubricCriterion(
                    key="hook_tagline_presence",
                    description="Einprägsamer Hook oder Slogan",
                ),
                RubricCriterion(
                    key="unique_element",
                    description="Einzigartiges Element oder USP",
                ),
                RubricCriterion(
                    key="concrete_examples",
                    description="Konkrete Beispiele oder Geschichten",
                ),
            ),
        ),
    ),
)

# Improvement proposal types the evaluator may suggest.
PROPOSAL_TYPES: tuple[str, ...] = (
    "CTA_SPECIFICITY",
    "CTA_CLARITY",
    "STRUCTURE_BASICS",
    "SIMPLIFY_MESSAGE",
    "ADD_MEMORY_HOOK",
    "TIME_OPTIMIZATION",
)

# Optimal spoken word range per pitch duration in seconds.
OPTIMAL_WORD_RANGES: dict[int, tuple[int, int]] = {
    45: (90, 120),
    60: (120, 150),
}
