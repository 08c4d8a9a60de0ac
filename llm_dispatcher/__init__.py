"""
Multi-provider LLM request dispatcher.

Routes generation requests across registered providers with caching,
per-provider rate limits, model selection strategies and fallback.
"""

from llm_dispatcher.config import DispatcherConfig
from llm_dispatcher.dispatcher import Dispatcher, RequestState
from llm_dispatcher.exceptions import (
    ConfigurationError,
    DispatcherError,
    NoAvailableModelError,
    ProviderError,
    RequestTimeoutError,
)
from llm_dispatcher.llm.factory import AdapterFactory, create_dispatcher

__version__ = "0.1.0"

__all__ = [
    # Dispatcher
    "Dispatcher",
    "RequestState",
    "DispatcherConfig",
    # Factory
    "AdapterFactory",
    "create_dispatcher",
    # Errors
    "DispatcherError",
    "NoAvailableModelError",
    "ProviderError",
    "RequestTimeoutError",
    "ConfigurationError",
]
