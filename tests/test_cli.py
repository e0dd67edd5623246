"""
Tests for the command line interface.
"""

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

from typer.testing import CliRunner

from pitchtrainer.config import Settings
from pitchtrainer.main import app
from pitchtrainer.models import EvaluationOutcome

runner = CliRunner()


class TestNormalizeCommand:
    """Tests for `pitchtrainer normalize`."""

    def test_normalize_file(self, temp_dir: Path, sample_raw_evaluation: dict[str, Any]) -> None:
        """Test a raw evaluation file is normalized offline."""
        raw_file = temp_dir / "raw.json"
        raw_file.write_text(json.dumps(sample_raw_evaluation), encoding="utf-8")

        result = runner.invoke(app, ["normalize", str(raw_file)])

        assert result.exit_code == 0
        assert "81.8" in result.output

    def test_non_object_input(self, temp_dir: Path) -> None:
        """Test a JSON array is rejected."""
        raw_file = temp_dir / "raw.json"
        raw_file.write_text("[1, 2, 3]", encoding="utf-8")

        result = runner.invoke(app, ["normalize", str(raw_file)])

        assert result.exit_code == 1
        assert "Invalid input" in result.output

    def test_invalid_json(self, temp_dir: Path) -> None:
        """Test a file that is not JSON."""
        raw_file = temp_dir / "raw.json"
        raw_file.write_text("kein json", encoding="utf-8")

        result = runner.invoke(app, ["normalize", str(raw_file)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_missing_file(self, temp_dir: Path) -> None:
        """Test a missing file."""
        result = runner.invoke(app, ["normalize", str(temp_dir / "missing.json")])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestEvaluateCommand:
    """Tests for `pitchtrainer evaluate`."""

    def test_evaluate_json(
        self,
        temp_dir: Path,
        test_settings: Settings,
        sample_outcome: EvaluationOutcome,
    ) -> None:
        """Test evaluating a transcript file."""
        transcript_file = temp_dir / "pitch.txt"
        transcript_file.write_text("Hallo, ich bin Anna.", encoding="utf-8")

        with patch("pitchtrainer.main.get_settings", return_value=test_settings), patch(
            "pitchtrainer.main.PitchEvaluator"
        ) as mock_evaluator:
            mock_evaluator.return_value.evaluate.return_value = sample_outcome
            result = runner.invoke(app, ["evaluate", str(transcript_file), "-d", "45", "--json"])

        assert result.exit_code == 0
        assert "69.0" in result.output
        mock_evaluator.return_value.evaluate.assert_called_once_with("Hallo, ich bin Anna.", 45)

    def test_unsupported_duration(self, temp_dir: Path) -> None:
        """Test durations other than 45 and 60 are rejected."""
        transcript_file = temp_dir / "pitch.txt"
        transcript_file.write_text("Hallo", encoding="utf-8")

        result = runner.invoke(app, ["evaluate", str(transcript_file), "--duration", "30"])

        assert result.exit_code == 1
        assert "Duration must be one of" in result.output

    def test_missing_api_key(self, temp_dir: Path, settings_without_key: Settings) -> None:
        """Test a clear error without credentials."""
        transcript_file = temp_dir / "pitch.txt"
        transcript_file.write_text("Hallo", encoding="utf-8")

        with patch("pitchtrainer.main.get_settings", return_value=settings_without_key):
            result = runner.invoke(app, ["evaluate", str(transcript_file)])

        assert result.exit_code == 1
        assert "Configuration Error" in result.output


class TestOtherCommands:
    """Tests for rubric and stats commands."""

    def test_rubric(self) -> None:
        """Test the rubric is shown and validates."""
        result = runner.invoke(app, ["rubric"])

        assert result.exit_code == 0
        assert "Rubric is valid" in result.output

    def test_stats_empty(self, test_settings: Settings) -> None:
        """Test statistics of an empty database."""
        with patch("pitchtrainer.main.get_settings", return_value=test_settings):
            result = runner.invoke(app, ["stats"])

        assert result.exit_code == 0
        assert "0 evaluations" in result.output
