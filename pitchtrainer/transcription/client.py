"""
Speech-to-text client.

Uploads a recorded pitch to the Mistral transcription endpoint and returns
the transcript with a heuristic confidence estimate.
"""

import logging
import re
import time
from typing import Any

from pitchtrainer.config import Settings
from pitchtrainer.models import TranscriptionResult
from pitchtrainer.upstream import UpstreamClient

logger = logging.getLogger(__name__)

# Mime type -> file extension used for the upload name.
AUDIO_EXTENSIONS: dict[str, str] = {
    "audio/webm": "webm",
    "audio/wav": "wav",
    "audio/mp3": "mp3",
    "audio/mpeg": "mp3",
    "audio/m4a": "m4a",
    "audio/mp4": "m4a",
}

DEFAULT_LANGUAGE = "de"

_COMMON_GERMAN_WORDS = re.compile(r"\b(ich|bin|das|ist|und|mit|der|die|für)\b", re.IGNORECASE)


def base_mime_type(mime_type: str) -> str:
    """Strip codec parameters, e.g. 'audio/webm;codecs=opus' -> 'audio/webm'."""
    return mime_type.split(";", 1)[0].strip().lower()


def file_extension(mime_type: str) -> str:
    return AUDIO_EXTENSIONS.get(base_mime_type(mime_type), "webm")


def estimate_confidence(transcript: str) -> float:
    """
    Estimate transcript quality from surface features.

    The transcription endpoint reports no confidence, so this scores what a
    plausible German speech transcript looks like.
    """
    if not transcript or len(transcript) < 10:
        return 0.3

    confidence = 0.7

    if len(transcript.split()) > 20:
        confidence += 0.1
    if re.search(r"[.!?]", transcript):
        confidence += 0.05
    if re.search(r"[A-Z]", transcript):
        confidence += 0.05
    if _COMMON_GERMAN_WORDS.search(transcript):
        confidence += 0.1

    return round(min(confidence, 1.0), 2)


class TranscriptionClient(UpstreamClient):
    """Client for the Mistral audio transcription endpoint."""

    purpose = "transcription"

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.model = settings.mistral_transcription_model

    def transcribe(self, audio: bytes, mime_type: str) -> TranscriptionResult:
        """
        Transcribe an audio recording.

        Args:
            audio: Raw audio bytes.
            mime_type: Mime type of the recording.

        Returns:
            TranscriptionResult with transcript, language and confidence.

        Raises:
            UpstreamError: If the transcription call fails.
        """
        start = time.perf_counter()
        filename = f"audio.{file_extension(mime_type)}"
        logger.info("Transcribing with %s: %d bytes, %s", self.model, len(audio), mime_type)

        response = self._call_with_retry(
            "Transcription",
            lambda: self._client.audio.transcriptions.create(
                model=self.model,
                file=(filename, audio, base_mime_type(mime_type)),
                language=DEFAULT_LANGUAGE,
                response_format="json",
            ),
        )

        text = getattr(response, "text", None)
        transcript = text.strip() if isinstance(text, str) else ""
        language = getattr(response, "language", None)
        if not isinstance(language, str) or not language:
            language = DEFAULT_LANGUAGE
        elapsed = int((time.perf_counter() - start) * 1000)

        logger.info("Transcription completed in %dms, %d characters", elapsed, len(transcript))

        return TranscriptionResult(
            transcript=transcript,
            language=language,
            confidence=estimate_confidence(transcript),
            processing_time_ms=elapsed,
            model_used=self.model,
        )

    def test_connection(self) -> dict[str, Any]:
        """
        List the available transcription models.

        Returns:
            Connection report; never raises.
        """
        try:
            models = self._client.models.list()
        except Exception as e:
            logger.error("Transcription API connection test failed: %s", e)
            return {"connected": False, "selected_model": self.model, "error": str(e)}

        available = [m.id for m in models if "voxtral" in m.id]
        return {
            "connected": True,
            "available_models": available,
            "selected_model": self.model,
        }
