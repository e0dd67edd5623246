"""
Configuration management for PitchTrainer.

Uses Pydantic Settings for type-safe configuration loading from environment variables.
Settings are resolved once at the entry points and passed explicitly into every
component that needs them.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MissingConfigError(Exception):
    """Raised when a required external credential or setting is absent."""

    def __init__(self, setting_name: str, purpose: str = ""):
        self.setting_name = setting_name
        message = f"{setting_name.upper()} is required"
        if purpose:
            message += f" for {purpose}"
        super().__init__(message)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The Mistral API key is optional here so that offline commands (normalize,
    stats) work without it; the upstream clients refuse to start without it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Mistral API Configuration
    # ==========================================================================
    mistral_api_key: str | None = Field(
        default=None,
        description="API key for the Mistral (OpenAI-compatible) endpoint",
    )

    mistral_base_url: str = Field(
        default="https://api.mistral.ai/v1",
        description="Base URL for the Mistral API",
    )

    mistral_evaluation_model: str = Field(
        default="mistral-small-latest",
        description="Chat model used to evaluate pitches",
    )

    mistral_transcription_model: str = Field(
        default="voxtral-mini-latest",
        description="Speech-to-text model used to transcribe recordings",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout for a single upstream request in seconds",
    )

    upstream_max_retries: int = Field(
        default=0,
        ge=0,
        le=5,
        description="Retries for rate-limited or failed upstream calls (0 = fail fast)",
    )

    # ==========================================================================
    # Evaluation Configuration
    # ==========================================================================
    llm_temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Temperature for the evaluation model",
    )

    llm_max_tokens: int = Field(
        default=2000,
        ge=100,
        le=8192,
        description="Maximum tokens in the evaluation reply",
    )

    # ==========================================================================
    # Storage and Upload Configuration
    # ==========================================================================
    database_path: str = Field(
        default="./data/pitchtrainer.db",
        description="SQLite database file for anonymous statistics (':memory:' allowed)",
    )

    max_file_size_mb: float = Field(
        default=10.0,
        ge=0.1,
        le=100.0,
        description="Maximum accepted audio upload size in megabytes",
    )

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="127.0.0.1", description="Bind address for the HTTP server")

    port: int = Field(default=3000, ge=1, le=65535, description="Port for the HTTP server")

    allowed_origins: tuple[str, ...] = Field(
        default=("http://localhost:5173", "http://localhost:3000"),
        description="Origins allowed by CORS",
    )

    rate_limit_window_seconds: int = Field(
        default=15 * 60,
        ge=1,
        description="Window of the per-client API rate limit in seconds",
    )

    rate_limit_max_requests: int = Field(
        default=100,
        ge=1,
        description="Requests per client and window across the API endpoints",
    )

    log_level: str = Field(default="INFO", description="Root log level")

    @field_validator("mistral_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensure base URL doesn't have trailing slash."""
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)

    @property
    def rate_limit(self) -> str:
        """Rate limit in the `limits` notation, e.g. '100 per 900 seconds'."""
        return f"{self.rate_limit_max_requests} per {self.rate_limit_window_seconds} seconds"

    def require_api_key(self, purpose: str) -> str:
        """
        Return the Mistral API key or raise if it is not configured.

        Raises:
            MissingConfigError: If no API key is set.
        """
        if not self.mistral_api_key:
            raise MissingConfigError("mistral_api_key", purpose)
        return self.mistral_api_key


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.
    """
    return Settings()
