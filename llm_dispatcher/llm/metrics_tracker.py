"""
Per-model performance metrics.

Sandi Metz Principles:
- Single Responsibility: Track running statistics per model
- Small methods: Each method < 10 lines
- Clear naming: Self-documenting code
"""

from datetime import datetime, timezone
from typing import Dict, Optional

from llm_dispatcher.llm.registry import ModelRegistry
from llm_dispatcher.models.metrics import ModelMetrics
from llm_dispatcher.utils.logger import get_logger

logger = get_logger(__name__)


class MetricsTracker:
    """
    Track running statistics for every registered model.

    Averages are updated incrementally, so memory stays O(1) per model
    regardless of call volume. Updates never await, so each is atomic
    on the event loop.
    """

    def __init__(self, registry: Optional[ModelRegistry] = None):
        """
        Initialize tracker.

        Args:
            registry: Registry whose models receive usage updates
        """
        self._registry = registry
        self._metrics: Dict[str, ModelMetrics] = {}

    def initialize(self, model_id: str) -> None:
        """Create a zeroed record if the model has none."""
        self._metrics.setdefault(model_id, ModelMetrics())

    def remove(self, model_id: str) -> None:
        """Drop the record for a model."""
        self._metrics.pop(model_id, None)

    def record(
        self,
        model_id: str,
        tokens: int,
        cost: float,
        latency_ms: float,
        success: bool,
    ) -> ModelMetrics:
        """
        Record a completed provider call.

        Args:
            model_id: Model that served the call
            tokens: Total tokens used
            cost: Cost in USD
            latency_ms: Measured latency
            success: Whether the call succeeded

        Returns:
            Updated metrics record
        """
        metrics = self._metrics.setdefault(model_id, ModelMetrics())
        metrics.total_requests += 1
        n = metrics.total_requests

        metrics.total_tokens += tokens
        metrics.total_cost += cost
        metrics.average_latency = (metrics.average_latency * (n - 1) + latency_ms) / n
        outcome = 100.0 if success else 0.0
        metrics.success_rate = (metrics.success_rate * (n - 1) + outcome) / n

        self._update_caching_efficiency(metrics)
        self._update_model(model_id, metrics)
        self._update_popularity()

        logger.debug(
            "Recorded model metrics",
            model=model_id,
            success=success,
            latency_ms=latency_ms,
        )
        return metrics

    def record_cache_hit(self, model_id: str) -> None:
        """
        Record a request served from cache.

        Args:
            model_id: Model whose cached response was served
        """
        metrics = self._metrics.setdefault(model_id, ModelMetrics())
        metrics.cache_hits += 1
        self._update_caching_efficiency(metrics)
        self._update_popularity()

    @staticmethod
    def _update_caching_efficiency(metrics: ModelMetrics) -> None:
        served = metrics.cache_hits + metrics.total_requests
        metrics.caching_efficiency = (metrics.cache_hits / served) * 100 if served else 0.0

    def _update_model(self, model_id: str, metrics: ModelMetrics) -> None:
        """Push usage counters onto the registry model."""
        if not self._registry:
            return
        model = self._registry.get_model(model_id)
        if not model:
            return
        model.usage_count += 1
        model.last_used = datetime.now(timezone.utc)
        model.error_rate = (100.0 - metrics.success_rate) / 100.0

    def _update_popularity(self) -> None:
        """Recompute each model's share of all served requests."""
        served = {
            model_id: m.total_requests + m.cache_hits
            for model_id, m in self._metrics.items()
        }
        total = sum(served.values())
        for model_id, metrics in self._metrics.items():
            metrics.popularity_score = (served[model_id] / total) * 100 if total else 0.0

    def get(self, model_id: str) -> ModelMetrics:
        """
        Get metrics for a model.

        Returns:
            Copy of the record; zeroed defaults (success rate 100) if unknown
        """
        metrics = self._metrics.get(model_id)
        return metrics.model_copy() if metrics else ModelMetrics()

    def get_all(self) -> Dict[str, ModelMetrics]:
        """Get copies of every record keyed by model ID."""
        return {model_id: m.model_copy() for model_id, m in self._metrics.items()}

    @property
    def total_requests(self) -> int:
        """Get total provider calls across models."""
        return sum(m.total_requests for m in self._metrics.values())

    @property
    def total_cost(self) -> float:
        """Get total cost across models."""
        return sum(m.total_cost for m in self._metrics.values())
