"""
HTTP API for PitchTrainer.

Exposes transcription, evaluation, statistics and health endpoints. Build the
application with `create_app`; collaborators can be injected for tests.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import FastAPI, File, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from pitchtrainer.api.schemas import (
    EvaluateRequest,
    ErrorResponse,
    EvaluateResponse,
    HealthResponse,
    TranscribeResponse,
)
from pitchtrainer.api.security import add_security_headers
from pitchtrainer.config import Settings, get_settings
from pitchtrainer.evaluation import InvalidInputError, PitchEvaluator
from pitchtrainer.models import EvaluationRecord, Statistics
from pitchtrainer.storage import StatisticsStore, StorageError
from pitchtrainer.transcription import AUDIO_EXTENSIONS, TranscriptionClient, base_mime_type
from pitchtrainer.upstream import UpstreamError

logger = logging.getLogger(__name__)

ALLOWED_AUDIO_TYPES = frozenset(AUDIO_EXTENSIONS)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


class APIError(Exception):
    """An error rendered as `{error, message}` with the given status code."""

    def __init__(self, status_code: int, error: str, message: str | None = None):
        self.status_code = status_code
        self.error = error
        self.message = message
        super().__init__(message or error)


def count_words(transcript: str) -> int:
    return len(transcript.split())


def create_app(
    settings: Settings | None = None,
    *,
    evaluator: PitchEvaluator | None = None,
    transcriber: TranscriptionClient | None = None,
    store: StatisticsStore | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration settings. Uses global settings if not provided.
        evaluator: Pitch evaluator; built from settings if not provided.
        transcriber: Transcription client; built from settings if not provided.
        store: Statistics store; built from settings if not provided.

    Raises:
        MissingConfigError: If an upstream client must be built and no API key is set.
    """
    settings = settings or get_settings()
    evaluator = evaluator or PitchEvaluator(settings)
    transcriber = transcriber or TranscriptionClient(settings)
    store = store or StatisticsStore(settings.database_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        store.initialize()
        logger.info("Services initialized")
        yield
        store.close()

    app = FastAPI(title="PitchTrainer API", lifespan=lifespan)
    app.state.settings = settings

    # One counter per client shared by all rate-limited endpoints
    limiter = Limiter(key_func=get_remote_address)
    app.state.limiter = limiter
    api_rate_limit = limiter.shared_limit(settings.rate_limit, scope="api")

    app.middleware("http")(add_security_headers)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    @app.exception_handler(APIError)
    async def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
        body = ErrorResponse(error=exc.error, message=exc.message)
        return JSONResponse(
            status_code=exc.status_code, content=body.model_dump(exclude_none=True)
        )

    @app.exception_handler(RateLimitExceeded)
    async def handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        logger.warning("Rate limit exceeded for %s", get_remote_address(request))
        body = ErrorResponse(error=RATE_LIMIT_MESSAGE)
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=body.model_dump(exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}"
            for err in exc.errors()
        )
        body = ErrorResponse(error="Invalid request", message=details)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())

    @app.post("/transcribe", response_model=TranscribeResponse)
    @api_rate_limit
    def transcribe(
        request: Request, audio: UploadFile | None = File(default=None)
    ) -> TranscribeResponse:
        if audio is None:
            raise APIError(status.HTTP_400_BAD_REQUEST, "No audio file provided")

        mime_type = base_mime_type(audio.content_type or "")
        if mime_type not in ALLOWED_AUDIO_TYPES:
            raise APIError(
                status.HTTP_400_BAD_REQUEST,
                "Invalid file type",
                f"Only audio files allowed, got '{audio.content_type}'",
            )

        payload = audio.file.read(settings.max_file_size_bytes + 1)
        if len(payload) > settings.max_file_size_bytes:
            raise APIError(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "File too large")

        logger.info("Transcribing audio upload: %s, %d bytes", mime_type, len(payload))
        try:
            result = transcriber.transcribe(payload, mime_type)
        except UpstreamError as e:
            logger.error("Transcription error: %s", e)
            raise APIError(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Transcription failed", str(e)
            ) from e
        except Exception as e:
            logger.exception("Unexpected transcription error")
            raise APIError(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Transcription failed", str(e)
            ) from e

        return TranscribeResponse(
            transcript=result.transcript,
            language=result.language,
            duration_ms=result.processing_time_ms,
            confidence=result.confidence,
        )

    @app.post("/evaluate", response_model=EvaluateResponse)
    @api_rate_limit
    def evaluate(request: Request, body: EvaluateRequest) -> EvaluateResponse:
        if not body.transcript.strip():
            raise APIError(status.HTTP_400_BAD_REQUEST, "Missing transcript or duration")

        try:
            outcome = evaluator.evaluate(body.transcript, body.duration)
        except (UpstreamError, InvalidInputError) as e:
            logger.error("Evaluation error: %s", e)
            raise APIError(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Evaluation failed", str(e)
            ) from e
        except Exception as e:
            logger.exception("Unexpected evaluation error")
            raise APIError(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Evaluation failed", str(e)
            ) from e

        record = EvaluationRecord.from_evaluation(
            outcome, duration=body.duration, word_count=count_words(body.transcript)
        )
        try:
            store.store_evaluation(record)
        except StorageError as e:
            logger.error("Failed to store evaluation statistics: %s", e)
            raise APIError(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Evaluation failed", str(e)
            ) from e

        return EvaluateResponse(
            **outcome.to_evaluation().model_dump(),
            evaluation_time_ms=outcome.processing_time_ms,
            model_used=outcome.model_used,
        )

    @app.get("/statistics", response_model=Statistics)
    @api_rate_limit
    def statistics(request: Request) -> Statistics:
        try:
            return store.get_statistics()
        except StorageError as e:
            logger.error("Statistics error: %s", e)
            raise APIError(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch statistics", str(e)
            ) from e

    @app.get("/health", response_model=HealthResponse)
    def health() -> JSONResponse | HealthResponse:
        now = datetime.now(timezone.utc)
        if not store.ping():
            unhealthy = HealthResponse(
                status="unhealthy", timestamp=now, error="Database unavailable"
            )
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content=unhealthy.model_dump(mode="json"),
            )

        return HealthResponse(
            status="healthy",
            timestamp=now,
            services={
                "database": "connected",
                "transcription": "ready",
                "evaluation": "ready",
            },
        )

    return app
