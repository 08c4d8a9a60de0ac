"""
Mock provider adapters for testing.

Sandi Metz Principles:
- Single Responsibility: Provide test doubles
- Small classes: Each mock < 100 lines
- Clear naming: Self-documenting code
"""

import asyncio
import time
from typing import Iterable, List, Optional, Tuple

from llm_dispatcher.exceptions import ProviderError
from llm_dispatcher.llm.provider import BaseProviderAdapter
from llm_dispatcher.models.model import ModelInfo
from llm_dispatcher.models.request import DispatchRequest
from llm_dispatcher.models.response import AdapterResult


class MockProviderAdapter(BaseProviderAdapter):
    """
    Mock provider adapter for testing.

    Returns configurable results without making real API calls and
    records every invocation.
    """

    def __init__(
        self,
        name: str = "mock-provider",
        response_content: str = "mock response",
        prompt_tokens: int = 10,
        completion_tokens: int = 5,
        delay: float = 0.0,
        should_fail: bool = False,
        failing_models: Optional[Iterable[str]] = None,
        failure_message: str = "Mock provider error",
        healthy: bool = True,
    ):
        """
        Initialize mock adapter.

        Args:
            name: Provider name
            response_content: Content to return
            prompt_tokens: Mock prompt token count
            completion_tokens: Mock completion token count
            delay: Seconds to sleep before answering
            should_fail: Whether every call raises ProviderError
            failing_models: Model IDs whose calls raise ProviderError
            failure_message: Error message when failing
            healthy: Health check result
        """
        self._name = name
        self._response_content = response_content
        self._prompt_tokens = prompt_tokens
        self._completion_tokens = completion_tokens
        self._delay = delay
        self._should_fail = should_fail
        self._failing_models = set(failing_models or [])
        self._failure_message = failure_message
        self._healthy = healthy
        self.calls: List[Tuple[str, str]] = []
        self.call_times: List[float] = []
        self.completed = 0

    async def invoke(self, model: ModelInfo, request: DispatchRequest) -> AdapterResult:
        """
        Return mock result.

        Raises:
            ProviderError: If configured to fail for this model
        """
        self.calls.append((model.id, request.prompt))
        self.call_times.append(time.monotonic())

        if self._delay:
            await asyncio.sleep(self._delay)

        if self._should_fail or model.id in self._failing_models:
            raise ProviderError(self._failure_message)

        self.completed += 1
        return AdapterResult(
            content=self._response_content,
            prompt_tokens=self._prompt_tokens,
            completion_tokens=self._completion_tokens,
            total_tokens=self._prompt_tokens + self._completion_tokens,
            model=model.id,
        )

    async def health_check(self) -> bool:
        """Return configured health."""
        return self._healthy

    def get_name(self) -> str:
        """Get provider name."""
        return self._name

    @property
    def call_count(self) -> int:
        """Get number of invocations."""
        return len(self.calls)

    @property
    def prompts(self) -> List[str]:
        """Get prompts in invocation order."""
        return [prompt for _, prompt in self.calls]


class RaisingAdapter(BaseProviderAdapter):
    """Adapter that raises a non-provider exception."""

    def __init__(self, error: Exception):
        self._error = error
        self.call_count = 0

    async def invoke(self, model: ModelInfo, request: DispatchRequest) -> AdapterResult:
        self.call_count += 1
        raise self._error

    async def health_check(self) -> bool:
        raise self._error

    def get_name(self) -> str:
        return "raising"
