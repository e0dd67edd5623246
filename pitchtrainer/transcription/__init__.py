"""
Transcription Module.

Speech-to-text for recorded pitches.
"""

from pitchtrainer.transcription.client import (
    AUDIO_EXTENSIONS,
    TranscriptionClient,
    base_mime_type,
    estimate_confidence,
)

__all__ = [
    "AUDIO_EXTENSIONS",
    "TranscriptionClient",
    "base_mime_type",
    "estimate_confidence",
]
