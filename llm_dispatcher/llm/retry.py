"""
Retry of transient vendor failures inside one adapter call.

Rate-limit responses that carry a Retry-After header are retried no
sooner than the vendor asks; everything else backs off exponentially.
Non-transient errors propagate on the first attempt so the dispatcher
can fall back to another model.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from anthropic import (
    APIConnectionError as AnthropicConnectionError,
    APITimeoutError as AnthropicTimeoutError,
    InternalServerError as AnthropicInternalServerError,
    RateLimitError as AnthropicRateLimitError,
)
from openai import (
    APIConnectionError as OpenAIConnectionError,
    APITimeoutError as OpenAITimeoutError,
    InternalServerError as OpenAIInternalServerError,
    RateLimitError as OpenAIRateLimitError,
)

from llm_dispatcher.config import DispatcherConfig
from llm_dispatcher.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# OpenAI errors also cover DeepSeek, which is served through the OpenAI SDK
TRANSIENT_VENDOR_ERRORS: Tuple[Type[BaseException], ...] = (
    OpenAIRateLimitError,
    OpenAITimeoutError,
    OpenAIConnectionError,
    OpenAIInternalServerError,
    AnthropicRateLimitError,
    AnthropicTimeoutError,
    AnthropicConnectionError,
    AnthropicInternalServerError,
)


@dataclass
class RetryConfig:
    """Attempts and backoff for one provider call."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    backoff_factor: float = 2.0
    transient_errors: Tuple[Type[BaseException], ...] = field(
        default=TRANSIENT_VENDOR_ERRORS
    )

    @classmethod
    def from_settings(cls, settings: DispatcherConfig) -> "RetryConfig":
        """Build retry policy from dispatcher configuration."""
        return cls(
            max_attempts=settings.provider_retry_attempts,
            max_delay=settings.provider_retry_max_delay_seconds,
        )


def retry_after_seconds(error: BaseException) -> Optional[float]:
    """
    Read the vendor's Retry-After hint from an API error.

    Returns:
        Seconds to wait, or None when the error carries no usable hint
    """
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None)
    if not headers:
        return None

    value = headers.get("retry-after")
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


class RetryHandler:
    """
    Retries transient vendor failures for a provider adapter.

    Model-level fallback belongs to the dispatcher, so this handler only
    ever repeats the same call against the same model.
    """

    def __init__(self, config: RetryConfig | None = None):
        """
        Initialize retry handler.

        Args:
            config: Retry policy (uses defaults if None)
        """
        self._config = config or RetryConfig()

    @property
    def config(self) -> RetryConfig:
        """Get the retry policy."""
        return self._config

    async def execute(self, func: Callable[[], Awaitable[T]]) -> T:
        """
        Run a vendor call, repeating it on transient failures.

        Args:
            func: Zero-argument coroutine factory for the call

        Returns:
            Result of the first successful attempt

        Raises:
            Exception: The last transient error once attempts run out, or
                any other error immediately
        """
        for attempt in range(1, self._config.max_attempts):
            try:
                return await func()
            except self._config.transient_errors as e:
                delay = self.next_delay(attempt, e)
                logger.warning(
                    "Transient provider failure",
                    attempt=attempt,
                    retry_in=round(delay, 2),
                    error_type=type(e).__name__,
                )
                await asyncio.sleep(delay)

        try:
            return await func()
        except self._config.transient_errors as e:
            logger.error(
                "Provider call failed after retries",
                attempts=self._config.max_attempts,
                error_type=type(e).__name__,
            )
            raise

    def next_delay(self, attempt: int, error: Optional[BaseException] = None) -> float:
        """
        Delay before the attempt after `attempt` (1-indexed).

        A vendor Retry-After hint raises the delay, never lowers it; the
        result is capped at max_delay either way.
        """
        delay = self._config.initial_delay * self._config.backoff_factor ** (attempt - 1)
        hint = retry_after_seconds(error) if error is not None else None
        if hint is not None:
            delay = max(delay, hint)
        return min(delay, self._config.max_delay)
