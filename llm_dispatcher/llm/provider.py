"""
Provider adapter base class and interface.

Sandi Metz Principles:
- Single Responsibility: Adapter abstraction
- Interface Segregation: Minimal adapter interface
- Dependency Inversion: Dispatcher depends on abstraction, not vendors
"""

from abc import ABC, abstractmethod

from llm_dispatcher.models.model import ModelInfo
from llm_dispatcher.models.request import DispatchRequest
from llm_dispatcher.models.response import AdapterResult

# Used when a vendor response carries no usage block.
FALLBACK_COMPLETION_TOKENS = 100


class BaseProviderAdapter(ABC):
    """
    Abstract base class for provider adapters.

    Translates a canonical request into one vendor's API call.
    """

    @abstractmethod
    async def invoke(self, model: ModelInfo, request: DispatchRequest) -> AdapterResult:
        """
        Execute request against a model.

        Args:
            model: Target model
            request: Dispatch request

        Returns:
            Canonical adapter result

        Raises:
            ProviderError: If the call fails
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """
        Get provider name.

        Returns:
            Provider name (e.g., "openai", "anthropic")
        """
        pass

    async def health_check(self) -> bool:
        """
        Check whether the provider is usable.

        Returns:
            True if healthy
        """
        return True

    @staticmethod
    def estimate_prompt_tokens(prompt: str) -> int:
        """Estimate prompt tokens from character count."""
        return len(prompt) // 4

    def _build_error_message(self, error: Exception, context: str) -> str:
        """
        Build error message with context.

        Args:
            error: The exception that occurred
            context: Context description

        Returns:
            Formatted error message
        """
        return f"{context}: {type(error).__name__} - {str(error)}"
