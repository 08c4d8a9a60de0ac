"""
Provider adapter factory.

Sandi Metz Principles:
- Single Responsibility: Create adapters and wire default providers
- Open/Closed: Easy to add new providers
- Dependency Inversion: Returns interface, not concrete class
"""

from typing import Callable, Dict, List, NamedTuple, Optional

from llm_dispatcher.config import DispatcherConfig
from llm_dispatcher.config import config as default_config
from llm_dispatcher.dispatcher.dispatcher import Dispatcher
from llm_dispatcher.exceptions import ConfigurationError
from llm_dispatcher.llm.anthropic_provider import AnthropicAdapter
from llm_dispatcher.llm.deepseek_provider import DEEPSEEK_BASE_URL, DeepSeekAdapter
from llm_dispatcher.llm.openai_provider import OpenAIAdapter
from llm_dispatcher.llm.provider import BaseProviderAdapter
from llm_dispatcher.llm.retry import RetryConfig, RetryHandler
from llm_dispatcher.models.model import ModelSpec
from llm_dispatcher.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


class ProviderDefaults(NamedTuple):
    """Display name, endpoint and model catalog of a known provider."""

    name: str
    base_url: str
    models: List[ModelSpec]


DEFAULT_PROVIDERS: Dict[str, ProviderDefaults] = {
    "deepseek": ProviderDefaults(
        name="DeepSeek",
        base_url=DEEPSEEK_BASE_URL,
        models=[
            ModelSpec(
                id="deepseek-coder",
                name="DeepSeek Coder",
                type="chat",
                max_tokens=8192,
                context_window=16384,
                cost_per_1k_tokens=0.0014,
                latency_ms=800,
                capabilities=["text-generation", "code-generation", "code-analysis"],
            ),
            ModelSpec(
                id="deepseek-chat",
                name="DeepSeek Chat",
                type="chat",
                max_tokens=8192,
                context_window=64000,
                cost_per_1k_tokens=0.0014,
                latency_ms=900,
                capabilities=["text-generation", "summarization", "translation"],
            ),
        ],
    ),
    "openai": ProviderDefaults(
        name="OpenAI",
        base_url="https://api.openai.com/v1",
        models=[
            ModelSpec(
                id="gpt-4o",
                name="GPT-4o",
                type="chat",
                max_tokens=4096,
                context_window=128000,
                cost_per_1k_tokens=0.03,
                latency_ms=1500,
                capabilities=[
                    "text-generation",
                    "code-generation",
                    "summarization",
                    "translation",
                    "reasoning",
                ],
            ),
            ModelSpec(
                id="gpt-4o-mini",
                name="GPT-4o mini",
                type="chat",
                max_tokens=4096,
                context_window=128000,
                cost_per_1k_tokens=0.0006,
                latency_ms=700,
                capabilities=["text-generation", "summarization", "translation"],
            ),
        ],
    ),
    "anthropic": ProviderDefaults(
        name="Anthropic",
        base_url="https://api.anthropic.com",
        models=[
            ModelSpec(
                id="claude-3-5-sonnet-20241022",
                name="Claude 3.5 Sonnet",
                type="chat",
                max_tokens=8192,
                context_window=200000,
                cost_per_1k_tokens=0.015,
                latency_ms=1400,
                capabilities=[
                    "text-generation",
                    "code-generation",
                    "summarization",
                    "long-context",
                    "analysis",
                ],
            ),
            ModelSpec(
                id="claude-3-haiku-20240307",
                name="Claude 3 Haiku",
                type="chat",
                max_tokens=4096,
                context_window=200000,
                cost_per_1k_tokens=0.00125,
                latency_ms=600,
                capabilities=["text-generation", "summarization"],
            ),
        ],
    ),
}


class AdapterFactory:
    """
    Factory for creating provider adapters.

    Credentials default to the configured API keys.
    """

    @staticmethod
    def create(
        provider_id: str,
        api_key: Optional[str] = None,
        settings: Optional[DispatcherConfig] = None,
    ) -> BaseProviderAdapter:
        """
        Create adapter instance.

        Args:
            provider_id: "deepseek", "openai" or "anthropic"
            api_key: Credential (uses configured key if None)
            settings: Configuration to read keys from (uses global config if None)

        Returns:
            Provider adapter

        Raises:
            ConfigurationError: If provider is unknown or key is missing
        """
        creator = AdapterFactory._get_creator(provider_id)
        key = api_key or AdapterFactory.configured_key(provider_id, settings)
        if not key:
            raise ConfigurationError(f"{provider_id} API key not configured")

        settings = settings or default_config
        retry_handler = RetryHandler(RetryConfig.from_settings(settings))
        adapter = creator(key, retry_handler=retry_handler)
        logger.info("Created provider adapter", provider=provider_id)
        return adapter

    @staticmethod
    def configured_key(
        provider_id: str, settings: Optional[DispatcherConfig] = None
    ) -> str:
        """Get the configured credential for a provider, or empty string."""
        settings = settings or default_config
        keys = {
            "deepseek": settings.deepseek_api_key,
            "openai": settings.openai_api_key,
            "anthropic": settings.anthropic_api_key,
        }
        return keys.get(provider_id.lower(), "")

    @staticmethod
    def _get_creator(provider_id: str) -> Callable[..., BaseProviderAdapter]:
        """
        Get adapter creator function.

        Raises:
            ConfigurationError: If provider is unknown
        """
        creators = {
            "deepseek": DeepSeekAdapter,
            "openai": OpenAIAdapter,
            "anthropic": AnthropicAdapter,
        }

        creator = creators.get(provider_id.lower())
        if not creator:
            valid_providers = ", ".join(creators.keys())
            raise ConfigurationError(
                f"Invalid provider: {provider_id}. Valid providers: {valid_providers}"
            )
        return creator


def create_dispatcher(settings: Optional[DispatcherConfig] = None) -> Dispatcher:
    """
    Create a dispatcher with every provider that has a configured key.

    Args:
        settings: Configuration (uses global config if None)

    Returns:
        Dispatcher with default providers registered (not started)
    """
    settings = settings or default_config
    setup_logging(settings.log_level, json_output=settings.log_json)
    dispatcher = Dispatcher(config=settings)

    for provider_id, defaults in DEFAULT_PROVIDERS.items():
        key = AdapterFactory.configured_key(provider_id, settings)
        if not key:
            logger.debug("Skipping provider without API key", provider=provider_id)
            continue

        dispatcher.register_provider(
            provider_id,
            defaults.name,
            defaults.base_url,
            key,
            defaults.models,
            adapter=AdapterFactory.create(provider_id, key, settings),
        )

    if not dispatcher.list_providers():
        logger.warning("No provider API keys configured")
    return dispatcher
