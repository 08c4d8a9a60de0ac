"""
Pytest configuration and fixtures.

Provides common fixtures for testing.
"""

import pytest

from llm_dispatcher.config import DispatcherConfig
from llm_dispatcher.models.model import ModelInfo
from llm_dispatcher.models.request import DispatchRequest


@pytest.fixture
def test_config() -> DispatcherConfig:
    """
    Create test configuration.

    Returns:
        Test configuration instance
    """
    return DispatcherConfig(
        openai_api_key="test-key",
        anthropic_api_key="test-key",
        deepseek_api_key="",
        load_balancing_strategy="intelligent",
        default_request_timeout_seconds=5.0,
        health_check_interval_seconds=60.0,
        enable_cache=True,
    )


@pytest.fixture
def sample_model() -> ModelInfo:
    """
    Create sample model.

    Returns:
        Registered-style model
    """
    return ModelInfo(
        id="test-model",
        provider_id="test-provider",
        name="Test Model",
        type="chat",
        cost_per_1k_tokens=0.002,
        latency_ms=500,
        capabilities=["text-generation", "code-generation"],
    )


@pytest.fixture
def sample_request() -> DispatchRequest:
    """
    Create sample dispatch request.

    Returns:
        Request targeting the sample model
    """
    return DispatchRequest(
        model_id="test-model",
        provider_id="test-provider",
        prompt="What is Python?",
    )
