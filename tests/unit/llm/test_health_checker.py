"""Test provider health checks."""

import asyncio

import pytest

from llm_dispatcher.llm.health_checker import ProviderHealthChecker
from llm_dispatcher.llm.registry import ModelRegistry
from tests.mocks.llm_mocks import MockProviderAdapter, RaisingAdapter


@pytest.fixture
def registry() -> ModelRegistry:
    """Create registry with three providers."""
    registry = ModelRegistry()
    for provider_id in ("up", "slow", "down"):
        registry.register_provider(
            provider_id, provider_id, "", "key", [{"id": f"{provider_id}-model"}]
        )
    return registry


@pytest.fixture
def adapters():
    """Create adapters with different health."""
    return {
        "up": MockProviderAdapter(healthy=True),
        "slow": MockProviderAdapter(healthy=False),
        "down": RaisingAdapter(ConnectionError("unreachable")),
    }


class TestProviderHealthChecker:
    """Test health checker."""

    @pytest.mark.asyncio
    async def test_should_classify_providers(self, registry, adapters):
        """Test healthy, degraded and unavailable outcomes."""
        checker = ProviderHealthChecker(registry, adapters)

        results = await checker.check_all()

        assert results == {"up": "healthy", "slow": "degraded", "down": "unavailable"}
        assert registry.get_provider("slow").health_status == "degraded"

    @pytest.mark.asyncio
    async def test_should_mark_models_of_failed_provider_unavailable(
        self, registry, adapters
    ):
        """Test unavailable provider hides its models."""
        await ProviderHealthChecker(registry, adapters).check_all()

        available = {m.id for m in registry.list_available_models()}
        assert available == {"up-model", "slow-model"}

    @pytest.mark.asyncio
    async def test_should_treat_missing_adapter_as_unavailable(self, registry):
        """Test provider without adapter."""
        results = await ProviderHealthChecker(registry, {}).check_all()
        assert set(results.values()) == {"unavailable"}

    @pytest.mark.asyncio
    async def test_should_recover_provider(self, registry, adapters):
        """Test recovery restores availability."""
        checker = ProviderHealthChecker(registry, adapters)
        await checker.check_all()

        adapters["down"] = MockProviderAdapter(healthy=True)
        await checker.check_all()

        assert registry.get_model("down-model").is_available is True

    @pytest.mark.asyncio
    async def test_should_run_periodically(self, registry, adapters):
        """Test background loop updates status."""
        checker = ProviderHealthChecker(registry, adapters, interval_seconds=0.01)

        checker.start()
        assert checker.is_running is True
        await asyncio.sleep(0.05)
        await checker.stop()

        assert checker.is_running is False
        assert registry.get_provider("down").health_status == "unavailable"
