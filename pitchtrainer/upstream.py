"""
Shared plumbing for the Mistral API clients.

Wraps the OpenAI SDK pointed at Mistral's OpenAI-compatible endpoint. Provides
the common error type and an opt-in exponential backoff retry. By default
failures surface immediately; the caller decides whether to retry.
"""

import logging
import time
from typing import Callable, TypeVar

from openai import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    OpenAI,
    RateLimitError,
)

from pitchtrainer.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UpstreamError(Exception):
    """Raised when an external provider call fails."""

    def __init__(self, message: str, cause: Exception | None = None, retryable: bool = False):
        self.cause = cause
        self.retryable = retryable
        super().__init__(message)


class UpstreamClient:
    """
    Base class for clients of the Mistral API.

    Subclasses name the operation they perform and call `_call_with_retry`
    with a zero-argument callable that performs the SDK request.
    """

    purpose = "the Mistral API"

    def __init__(self, settings: Settings):
        """
        Initialize the client.

        Args:
            settings: Configuration settings.

        Raises:
            MissingConfigError: If no Mistral API key is configured.
        """
        self._settings = settings
        self._client = OpenAI(
            api_key=settings.require_api_key(self.purpose),
            base_url=settings.mistral_base_url,
            timeout=settings.request_timeout,
            max_retries=0,
        )

        # Retry configuration
        self._max_retries = settings.upstream_max_retries
        self._base_delay = 1.0  # seconds
        self._max_delay = 30.0  # seconds

    def _call_with_retry(self, operation: str, request: Callable[[], T]) -> T:
        """
        Run an SDK request with exponential backoff retry.

        Args:
            operation: Human readable name used in errors and logs.
            request: Performs the SDK call.

        Returns:
            Whatever the request returns.

        Raises:
            UpstreamError: If the call fails and no retries remain.
        """
        for attempt in range(self._max_retries + 1):
            retries_left = attempt < self._max_retries
            try:
                return request()

            except APITimeoutError as e:
                if retries_left:
                    self._backoff(operation, attempt, e)
                    continue
                raise UpstreamError(
                    f"{operation} timed out - please try again", cause=e, retryable=True
                ) from e

            except RateLimitError as e:
                if retries_left:
                    self._backoff(operation, attempt, e)
                    continue
                raise UpstreamError(
                    f"{operation} failed: rate limit exceeded", cause=e, retryable=True
                ) from e

            except APIConnectionError as e:
                if retries_left:
                    self._backoff(operation, attempt, e)
                    continue
                raise UpstreamError(
                    f"{operation} failed: network error: {e}", cause=e, retryable=True
                ) from e

            except APIStatusError as e:
                # Don't retry on client errors (4xx except 429)
                if 400 <= e.status_code < 500:
                    raise UpstreamError(
                        f"{operation} failed: Mistral API error {e.status_code}: {e.message}",
                        cause=e,
                        retryable=False,
                    ) from e
                if retries_left:
                    self._backoff(operation, attempt, e)
                    continue
                raise UpstreamError(
                    f"{operation} failed: Mistral API error {e.status_code}: {e.message}",
                    cause=e,
                    retryable=True,
                ) from e

            except APIError as e:
                raise UpstreamError(f"{operation} failed: {e}", cause=e, retryable=False) from e

        raise UpstreamError(f"{operation} failed after {self._max_retries} retries")

    def _backoff(self, operation: str, attempt: int, error: Exception) -> None:
        delay = self._calculate_delay(attempt)
        logger.warning(
            "%s attempt %d failed (%s), retrying in %.1fs",
            operation,
            attempt + 1,
            type(error).__name__,
            delay,
        )
        time.sleep(delay)

    def _calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay for exponential backoff.

        Args:
            attempt: Current attempt number (0-indexed).

        Returns:
            Delay in seconds.
        """
        delay = self._base_delay * (2**attempt)
        return min(delay, self._max_delay)
