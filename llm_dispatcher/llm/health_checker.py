"""
Periodic provider health checks.

Sandi Metz Principles:
- Single Responsibility: Maintain provider health status
- Small methods: Each method < 10 lines
- Dependency Injection: Registry and adapters injected
"""

import asyncio
from typing import Dict, Mapping, Optional

from llm_dispatcher.llm.provider import BaseProviderAdapter
from llm_dispatcher.llm.registry import ModelRegistry
from llm_dispatcher.models.provider import HealthStatus
from llm_dispatcher.utils.logger import get_logger

logger = get_logger(__name__)


class ProviderHealthChecker:
    """
    Check every registered provider on a fixed interval.

    The only writer of provider health status.
    """

    def __init__(
        self,
        registry: ModelRegistry,
        adapters: Mapping[str, BaseProviderAdapter],
        interval_seconds: float = 30.0,
    ):
        """
        Initialize health checker.

        Args:
            registry: Registry holding provider status
            adapters: Adapters keyed by provider ID (read live)
            interval_seconds: Seconds between check rounds
        """
        self._registry = registry
        self._adapters = adapters
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    async def check_all(self) -> Dict[str, HealthStatus]:
        """
        Run one round of health checks.

        Returns:
            Resulting status per provider
        """
        results: Dict[str, HealthStatus] = {}
        for provider in self._registry.list_providers():
            status = await self._check(provider.id)
            self._registry.set_health(provider.id, status)
            results[provider.id] = status
        return results

    async def _check(self, provider_id: str) -> HealthStatus:
        """Check a single provider."""
        adapter = self._adapters.get(provider_id)
        if adapter is None:
            return "unavailable"

        try:
            healthy = await adapter.health_check()
        except Exception as e:
            logger.warning("Health check failed", provider=provider_id, error=str(e))
            return "unavailable"

        if not healthy:
            logger.warning("Provider degraded", provider=provider_id)
            return "degraded"
        return "healthy"

    def start(self) -> None:
        """Start periodic checks on the running loop."""
        if self._task and not self._task.done():
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop periodic checks."""
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    @property
    def is_running(self) -> bool:
        """Check if periodic checks are scheduled."""
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.check_all()
            except Exception as e:
                logger.error("Health check round failed", error=str(e))
