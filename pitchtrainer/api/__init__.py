"""
HTTP API Module.

FastAPI application exposing transcription, evaluation and statistics.
"""

from pitchtrainer.api.app import create_app

__all__ = ["create_app"]
