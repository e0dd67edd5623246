"""
Pytest configuration and fixtures.

Provides common test fixtures for all test modules.
"""

import json
import tempfile
from pathlib import Path
from typing import Any, Generator
from unittest.mock import MagicMock

import pytest

from pitchtrainer.config import Settings
from pitchtrainer.models import (
    EvaluationOutcome,
    Proposal,
    ProposalPriority,
)
from pitchtrainer.storage import StatisticsStore


# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ==============================================================================
# Raw Evaluation Fixtures
# ==============================================================================


@pytest.fixture
def sample_raw_evaluation() -> dict[str, Any]:
    """A complete raw evaluation as the model would return it (overall 81.8)."""
    return {
        "kpis": {
            "call_to_action": {
                "specific_referral_ask": 85,
                "contact_method_clarity": 90,
                "target_client_definition": 80,
                "actionable_request": 88,
            },
            "structure_time": {
                "introduction_completeness": 75,
                "word_count_optimization": 85,
                "clear_flow_organization": 80,
                "time_management": 90,
            },
            "content_clarity": {
                "jargon_free_language": 95,
                "single_focus_maintenance": 88,
                "benefit_articulation": 82,
                "credibility_markers": 78,
            },
            "memorability": {
                "hook_tagline_presence": 60,
                "unique_element": 70,
                "concrete_examples": 65,
            },
        },
        "proposals": [
            {
                "type": "ADD_MEMORY_HOOK",
                "title": "Slogan ergänzen",
                "description": "Beende den Pitch mit einem einprägsamen Satz.",
                "priority": "HIGH",
            },
            {
                "type": "CTA_SPECIFICITY",
                "title": "Empfehlung konkretisieren",
                "description": "Nenne eine konkrete Person oder Firma.",
                "priority": "MEDIUM",
            },
        ],
        "overall_score": 99,
        "word_count": 132,
        "summary": "Starker Pitch mit klarer Handlungsaufforderung.",
    }


@pytest.fixture
def sample_llm_response(sample_raw_evaluation: dict[str, Any]) -> str:
    """Sample evaluation reply in JSON format."""
    return json.dumps(sample_raw_evaluation, ensure_ascii=False)


@pytest.fixture
def sample_transcript() -> str:
    """Sample German pitch transcript."""
    return (
        "Hallo, ich bin Anna Schmidt von Schmidt Steuerberatung. "
        "Ich helfe kleinen Handwerksbetrieben, ihre Buchhaltung in einer Stunde pro Woche "
        "zu erledigen. Eine gute Empfehlung für mich ist ein Schreinermeister, der gerade "
        "seinen ersten Mitarbeiter eingestellt hat. Wenn ihr so jemanden kennt, stellt mich "
        "bitte per E-Mail vor. Schmidt Steuerberatung: Zahlen, die für Sie arbeiten."
    )


@pytest.fixture
def sample_outcome() -> EvaluationOutcome:
    """A normalized evaluation with provenance, as returned by the evaluator."""
    return EvaluationOutcome(
        kpis={
            "call_to_action": {
                "specific_referral_ask": 80.0,
                "contact_method_clarity": 80.0,
                "target_client_definition": 80.0,
                "actionable_request": 80.0,
            },
            "structure_time": {
                "introduction_completeness": 70.0,
                "word_count_optimization": 70.0,
                "clear_flow_organization": 70.0,
                "time_management": 70.0,
            },
            "content_clarity": {
                "jargon_free_language": 60.0,
                "single_focus_maintenance": 60.0,
                "benefit_articulation": 60.0,
                "credibility_markers": 60.0,
            },
            "memorability": {
                "hook_tagline_presence": 50.0,
                "unique_element": 50.0,
                "concrete_examples": 50.0,
            },
        },
        category_scores={
            "call_to_action": 80,
            "structure_time": 70,
            "content_clarity": 60,
            "memorability": 50,
        },
        overall_score=69.0,
        proposals=(
            Proposal(
                type="CTA_CLARITY",
                title="Kontakt nennen",
                description="Sag, wie man dich erreicht.",
                priority=ProposalPriority.HIGH,
            ),
            Proposal(
                type="CTA_CLARITY",
                title="Zielkunde",
                description="Beschreibe den idealen Kontakt.",
                priority=ProposalPriority.LOW,
            ),
            Proposal(
                type="TIME_OPTIMIZATION",
                title="Kürzen",
                description="Bleib unter 60 Sekunden.",
            ),
        ),
        word_count=110,
        summary="Solider Pitch.",
        processing_time_ms=1200,
        model_used="test-model",
    )


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Create test settings with mocked values."""
    return Settings(
        mistral_api_key="test-api-key-for-testing",
        mistral_base_url="https://test.api.local/v1/",
        mistral_evaluation_model="test-model",
        mistral_transcription_model="voxtral-test",
        llm_temperature=0.0,
        database_path=str(temp_dir / "data" / "stats.db"),
        max_file_size_mb=1.0,
    )


@pytest.fixture
def settings_without_key(temp_dir: Path) -> Settings:
    """Settings with no API key configured."""
    return Settings(mistral_api_key=None, database_path=str(temp_dir / "stats.db"))


# ==============================================================================
# Storage Fixtures
# ==============================================================================


@pytest.fixture
def store(temp_dir: Path) -> Generator[StatisticsStore, None, None]:
    """An initialized statistics store in a temporary directory."""
    statistics_store = StatisticsStore(temp_dir / "stats.db")
    statistics_store.initialize()
    yield statistics_store
    statistics_store.close()


# ==============================================================================
# Mock Fixtures
# ==============================================================================


@pytest.fixture
def mock_llm_client(sample_llm_response: str) -> MagicMock:
    """Mock chat client returning the sample reply."""
    mock_client = MagicMock()
    mock_client.complete_json.return_value = sample_llm_response
    mock_client.test_connection.return_value = {"connected": True, "model": "test-model"}
    return mock_client
