"""Test adapter factory."""

import pytest

from llm_dispatcher.config import DispatcherConfig
from llm_dispatcher.exceptions import ConfigurationError
from llm_dispatcher.llm.anthropic_provider import AnthropicAdapter
from llm_dispatcher.llm.deepseek_provider import DeepSeekAdapter
from llm_dispatcher.llm.factory import DEFAULT_PROVIDERS, AdapterFactory, create_dispatcher
from llm_dispatcher.llm.openai_provider import OpenAIAdapter


class TestAdapterFactory:
    """Test adapter factory."""

    def test_should_create_openai_adapter(self, test_config):
        """Test creating OpenAI adapter from config."""
        adapter = AdapterFactory.create("openai", settings=test_config)
        assert isinstance(adapter, OpenAIAdapter)

    def test_should_create_anthropic_adapter(self, test_config):
        """Test creating Anthropic adapter from config."""
        adapter = AdapterFactory.create("anthropic", settings=test_config)
        assert isinstance(adapter, AnthropicAdapter)

    def test_should_create_deepseek_with_explicit_key(self, test_config):
        """Test explicit key overrides missing config."""
        adapter = AdapterFactory.create("deepseek", api_key="ds-key", settings=test_config)
        assert isinstance(adapter, DeepSeekAdapter)

    def test_should_ignore_provider_case(self, test_config):
        """Test case-insensitive provider names."""
        assert isinstance(AdapterFactory.create("OpenAI", settings=test_config), OpenAIAdapter)

    def test_should_reject_missing_key(self, test_config):
        """Test missing credential."""
        with pytest.raises(ConfigurationError):
            AdapterFactory.create("deepseek", settings=test_config)

    def test_should_apply_configured_retry_policy(self):
        """Test adapters retry with the configured attempts and cap."""
        settings = DispatcherConfig(
            _env_file=None,
            openai_api_key="key",
            provider_retry_attempts=5,
            provider_retry_max_delay_seconds=4.0,
        )

        adapter = AdapterFactory.create("openai", settings=settings)

        assert adapter._retry_handler.config.max_attempts == 5
        assert adapter._retry_handler.config.max_delay == 4.0

    def test_should_reject_unknown_provider(self, test_config):
        """Test invalid provider name."""
        with pytest.raises(ConfigurationError) as exc_info:
            AdapterFactory.create("mistral", api_key="key", settings=test_config)
        assert "Valid providers" in str(exc_info.value)


class TestCreateDispatcher:
    """Test default dispatcher wiring."""

    def test_should_register_configured_providers(self, test_config):
        """Test only providers with keys are registered."""
        dispatcher = create_dispatcher(test_config)

        provider_ids = {p.id for p in dispatcher.list_providers()}
        assert provider_ids == {"openai", "anthropic"}
        assert dispatcher.get_model("gpt-4o-mini") is not None
        assert dispatcher.get_model("deepseek-chat") is None

    def test_should_register_default_catalog(self):
        """Test every catalog model is registered."""
        settings = DispatcherConfig(
            _env_file=None,
            openai_api_key="k1",
            anthropic_api_key="k2",
            deepseek_api_key="k3",
        )
        dispatcher = create_dispatcher(settings)

        expected = sum(len(p.models) for p in DEFAULT_PROVIDERS.values())
        assert dispatcher.get_status().model_count == expected

    def test_should_create_empty_dispatcher_without_keys(self):
        """Test no keys means no providers."""
        settings = DispatcherConfig(
            _env_file=None, openai_api_key="", anthropic_api_key="", deepseek_api_key=""
        )
        assert create_dispatcher(settings).list_providers() == []
