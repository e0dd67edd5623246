"""Request and response bodies of the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, Field

from pitchtrainer.models import NormalizedEvaluation, PitchDuration


class EvaluateRequest(BaseModel):
    transcript: str = Field(..., min_length=1)
    duration: PitchDuration


class EvaluateResponse(NormalizedEvaluation):
    evaluation_time_ms: int
    model_used: str


class TranscribeResponse(BaseModel):
    transcript: str
    language: str
    duration_ms: int
    confidence: float


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    services: dict[str, str] = {}
    error: str | None = None


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None
