"""
Rate limiting for LLM providers.

Sandi Metz Principles:
- Single Responsibility: Manage rate limits
- Small methods: Each method < 10 lines
- Dependency Injection: Budget injected
"""

import asyncio
import math
from collections import deque
from time import time
from typing import Deque, Dict, Optional, Tuple

from llm_dispatcher.exceptions import ConfigurationError
from llm_dispatcher.models.provider import RateLimitBudget
from llm_dispatcher.utils.logger import get_logger

logger = get_logger(__name__)


class ProviderRateLimiter:
    """
    Sliding-window rate limiter for one provider.

    Delays callers until the window has room; never rejects.
    """

    def __init__(self, provider_id: str, budget: RateLimitBudget):
        """
        Initialize rate limiter.

        Args:
            provider_id: Provider the budget applies to
            budget: Request and token budget

        Raises:
            ConfigurationError: If the budget is unbounded or non-positive
        """
        _validate_budget(provider_id, budget)
        self._provider_id = provider_id
        self._budget = budget
        self._requests: Deque[float] = deque()
        self._tokens: Deque[Tuple[float, int]] = deque()
        self._token_total = 0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """
        Acquire permission to make request.

        Blocks until rate limit allows request, then reserves the slot.
        """
        async with self._lock:
            await self._wait_if_needed()
            self._record_request()

    async def _wait_if_needed(self) -> None:
        """Wait while the request or token budget is exhausted."""
        self._cleanup_old_entries()

        while self._is_exhausted():
            wait_time = self._calculate_wait_time()
            logger.debug(
                f"Rate limit reached, waiting {wait_time:.2f}s",
                provider=self._provider_id,
            )
            await asyncio.sleep(wait_time)
            self._cleanup_old_entries()

    def has_capacity(self) -> bool:
        """Check whether `acquire` would return without waiting."""
        if self._lock.locked():
            return False
        self._cleanup_old_entries()
        return not self._is_exhausted()

    def _is_exhausted(self) -> bool:
        return (
            len(self._requests) >= self._budget.requests_per_minute
            or self._token_total >= self._budget.tokens_per_minute
        )

    def _cleanup_old_entries(self) -> None:
        """Remove entries older than the window."""
        cutoff = time() - self._budget.window_seconds
        while self._requests and self._requests[0] <= cutoff:
            self._requests.popleft()
        while self._tokens and self._tokens[0][0] <= cutoff:
            _, used = self._tokens.popleft()
            self._token_total -= used

    def _calculate_wait_time(self) -> float:
        """
        Calculate time to wait before next request.

        Returns:
            Wait time in seconds
        """
        oldest = self._oldest_entry()
        if oldest is None:
            return 0.0
        elapsed = time() - oldest
        return max(0.0, self._budget.window_seconds - elapsed) + 0.001

    def _oldest_entry(self) -> Optional[float]:
        candidates = []
        if len(self._requests) >= self._budget.requests_per_minute:
            candidates.append(self._requests[0])
        if self._token_total >= self._budget.tokens_per_minute and self._tokens:
            candidates.append(self._tokens[0][0])
        return min(candidates) if candidates else None

    def _record_request(self) -> None:
        """Record current request timestamp."""
        self._requests.append(time())

    def record(self, tokens_used: int) -> None:
        """
        Record tokens consumed by a completed call.

        Args:
            tokens_used: Total tokens used
        """
        if tokens_used <= 0:
            return
        self._tokens.append((time(), tokens_used))
        self._token_total += tokens_used

    def get_remaining_requests(self) -> int:
        """
        Get remaining requests in current window.

        Returns:
            Number of remaining requests
        """
        self._cleanup_old_entries()
        return max(0, self._budget.requests_per_minute - len(self._requests))

    def get_remaining_tokens(self) -> int:
        """Get remaining tokens in current window."""
        self._cleanup_old_entries()
        return max(0, self._budget.tokens_per_minute - self._token_total)

    def get_reset_time(self) -> float:
        """
        Get when the oldest request leaves the window.

        Returns:
            Epoch seconds; now if the window is empty
        """
        self._cleanup_old_entries()
        if not self._requests:
            return time()
        return self._requests[0] + self._budget.window_seconds

    @property
    def budget(self) -> RateLimitBudget:
        """Get the configured budget."""
        return self._budget


class RateLimiterRegistry:
    """
    Rate limiters keyed by provider.

    Each provider has its own lock so providers never block each other.
    """

    def __init__(self):
        """Initialize empty limiter registry."""
        self._limiters: Dict[str, ProviderRateLimiter] = {}

    def configure(self, provider_id: str, budget: RateLimitBudget) -> None:
        """
        Create or replace the limiter for a provider.

        An unchanged budget keeps the existing window.

        Args:
            provider_id: Provider identifier
            budget: Request and token budget

        Raises:
            ConfigurationError: If the budget is invalid
        """
        existing = self._limiters.get(provider_id)
        if existing and existing.budget == budget:
            return

        self._limiters[provider_id] = ProviderRateLimiter(provider_id, budget)
        logger.info(
            "Configured rate limit",
            provider=provider_id,
            requests_per_minute=budget.requests_per_minute,
            tokens_per_minute=budget.tokens_per_minute,
        )

    def remove(self, provider_id: str) -> None:
        """Drop the limiter for a provider."""
        self._limiters.pop(provider_id, None)

    def get(self, provider_id: str) -> ProviderRateLimiter:
        """
        Get limiter for a provider.

        Raises:
            ConfigurationError: If provider has no limiter
        """
        limiter = self._limiters.get(provider_id)
        if not limiter:
            raise ConfigurationError(f"No rate limit configured for '{provider_id}'")
        return limiter

    async def acquire(self, provider_id: str) -> None:
        """Acquire a request slot for a provider."""
        await self.get(provider_id).acquire()

    def has_capacity(self, provider_id: str) -> bool:
        """Check whether a provider can take a request right now."""
        return self.get(provider_id).has_capacity()

    def record(self, provider_id: str, tokens_used: int) -> None:
        """Record token usage for a provider; ignored once it is removed."""
        limiter = self._limiters.get(provider_id)
        if limiter:
            limiter.record(tokens_used)


def _validate_budget(provider_id: str, budget: RateLimitBudget) -> None:
    if budget.requests_per_minute < 1 or budget.tokens_per_minute < 1:
        raise ConfigurationError(f"Rate limit budget for '{provider_id}' must be positive")
    if not math.isfinite(budget.window_seconds) or budget.window_seconds <= 0:
        raise ConfigurationError(f"Rate limit window for '{provider_id}' must be finite")
