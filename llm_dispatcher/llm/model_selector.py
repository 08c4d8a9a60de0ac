"""
Model selection strategies.

Sandi Metz Principles:
- Single Responsibility: Choose the model that serves a request
- Small methods: Each method < 10 lines
- Clear naming: Self-documenting code
"""

from typing import Dict, List, Optional

from pydantic import ValidationError

from llm_dispatcher.exceptions import ConfigurationError
from llm_dispatcher.llm.capabilities import (
    CapabilityClassifier,
    KeywordCapabilityClassifier,
)
from llm_dispatcher.llm.metrics_tracker import MetricsTracker
from llm_dispatcher.models.metrics import LoadBalancingWeights
from llm_dispatcher.models.model import ModelInfo
from llm_dispatcher.utils.logger import get_logger

logger = get_logger(__name__)


class ModelSelectionStrategy:
    """Strategy for selecting a model."""

    name = "base"

    def select(self, models: List[ModelInfo], prompt: str) -> ModelInfo:
        """
        Select model based on strategy.

        Args:
            models: Non-empty list of candidate models
            prompt: Prompt text

        Returns:
            Selected model
        """
        raise NotImplementedError


class RoundRobinStrategy(ModelSelectionStrategy):
    """Select the least used model."""

    name = "round-robin"

    def select(self, models: List[ModelInfo], prompt: str) -> ModelInfo:
        """Select model with the smallest usage count."""
        return min(models, key=lambda m: (m.usage_count, m.id))


class LeastLatencyStrategy(ModelSelectionStrategy):
    """Select the fastest model."""

    name = "least-latency"

    def select(self, models: List[ModelInfo], prompt: str) -> ModelInfo:
        """Select model with the lowest expected latency."""
        return min(models, key=lambda m: (m.latency_ms, m.id))


class LeastCostStrategy(ModelSelectionStrategy):
    """Select the cheapest model."""

    name = "least-cost"

    def select(self, models: List[ModelInfo], prompt: str) -> ModelInfo:
        """Select model with the lowest cost per 1k tokens."""
        return min(models, key=lambda m: (m.cost_per_1k_tokens, m.id))


class MostCapableStrategy(ModelSelectionStrategy):
    """Select the broadest model that covers the prompt's needs."""

    name = "most-capable"

    def __init__(self, classifier: CapabilityClassifier):
        """
        Initialize strategy.

        Args:
            classifier: Prompt capability classifier
        """
        self._classifier = classifier

    def select(self, models: List[ModelInfo], prompt: str) -> ModelInfo:
        """Select the capable model with the most capabilities."""
        required = set(self._classifier.required_capabilities(prompt))
        capable = [m for m in models if required <= m.capability_set]

        if not capable:
            logger.debug("No model covers required capabilities", required=sorted(required))
            return models[0]

        return min(capable, key=lambda m: (-len(m.capability_set), m.id))


class IntelligentStrategy(ModelSelectionStrategy):
    """
    Weighted scoring across latency, cost, capability and availability.

    score = w_latency / latency_sec + w_cost / cost_per_1k
            + w_capability * matched / required
            + w_availability * success_rate / 100
    """

    name = "intelligent"

    def __init__(
        self,
        classifier: CapabilityClassifier,
        metrics: MetricsTracker,
        weights: LoadBalancingWeights,
    ):
        """
        Initialize strategy.

        Args:
            classifier: Prompt capability classifier
            metrics: Metrics tracker supplying success rates
            weights: Scoring weights
        """
        self._classifier = classifier
        self._metrics = metrics
        self._weights = weights

    def select(self, models: List[ModelInfo], prompt: str) -> ModelInfo:
        """Select the highest scoring model."""
        required = self._classifier.required_capabilities(prompt)
        return min(models, key=lambda m: (-self.score(m, required), m.id))

    def score(self, model: ModelInfo, required: List[str]) -> float:
        """
        Score a model.

        Args:
            model: Candidate model
            required: Required capability tags

        Returns:
            Weighted score (higher is better)
        """
        latency_score = 1 / (model.latency_ms / 1000)
        cost_score = 1 / model.cost_per_1k_tokens
        matched = sum(1 for cap in required if cap in model.capability_set)
        capability_score = matched / len(required) if required else 1.0
        availability_score = (
            self._metrics.get(model.id).success_rate / 100 if model.is_available else 0.0
        )

        return (
            latency_score * self._weights.latency
            + cost_score * self._weights.cost
            + capability_score * self._weights.capability
            + availability_score * self._weights.availability
        )


STRATEGY_NAMES = (
    RoundRobinStrategy.name,
    LeastLatencyStrategy.name,
    LeastCostStrategy.name,
    MostCapableStrategy.name,
    IntelligentStrategy.name,
)


def build_weights(weights: Optional[Dict[str, float]] = None) -> LoadBalancingWeights:
    """
    Validate intelligent-selection weights.

    Args:
        weights: Weight mapping (uses defaults if None)

    Returns:
        Validated weights

    Raises:
        ConfigurationError: If weights are negative or do not sum to 1
    """
    try:
        return LoadBalancingWeights(**(weights or {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid load balancing weights: {e}") from e


def create_strategy(
    name: str,
    metrics: MetricsTracker,
    weights: Optional[Dict[str, float]] = None,
    classifier: Optional[CapabilityClassifier] = None,
) -> ModelSelectionStrategy:
    """
    Create a strategy by name.

    Raises:
        ConfigurationError: If the name is unknown or weights are invalid
    """
    classifier = classifier or KeywordCapabilityClassifier()
    if name == RoundRobinStrategy.name:
        return RoundRobinStrategy()
    if name == LeastLatencyStrategy.name:
        return LeastLatencyStrategy()
    if name == LeastCostStrategy.name:
        return LeastCostStrategy()
    if name == MostCapableStrategy.name:
        return MostCapableStrategy(classifier)
    if name == IntelligentStrategy.name:
        return IntelligentStrategy(classifier, metrics, build_weights(weights))

    valid = ", ".join(STRATEGY_NAMES)
    raise ConfigurationError(f"Invalid strategy: {name}. Valid strategies: {valid}")


class ModelSelector:
    """
    Selector for choosing models.

    Uses a configurable strategy; the default is intelligent scoring.
    """

    def __init__(
        self,
        metrics: MetricsTracker,
        strategy: str = IntelligentStrategy.name,
        weights: Optional[Dict[str, float]] = None,
        classifier: Optional[CapabilityClassifier] = None,
    ):
        """
        Initialize selector.

        Args:
            metrics: Metrics tracker used by intelligent scoring
            strategy: Strategy name
            weights: Intelligent-selection weights
            classifier: Prompt capability classifier
        """
        self._metrics = metrics
        self._classifier = classifier or KeywordCapabilityClassifier()
        self._strategy = create_strategy(strategy, metrics, weights, self._classifier)

    @property
    def strategy_name(self) -> str:
        """Get active strategy name."""
        return self._strategy.name

    def select_model(self, models: List[ModelInfo], prompt: str) -> Optional[str]:
        """
        Select a model ID.

        Args:
            models: Candidate models
            prompt: Prompt text

        Returns:
            Selected model ID, or None if there are no candidates
        """
        if not models:
            return None

        model = self._strategy.select(models, prompt)
        logger.info("Selected model", model=model.id, strategy=self._strategy.name)
        return model.id

    def set_strategy(
        self, strategy: str, weights: Optional[Dict[str, float]] = None
    ) -> None:
        """
        Update selection strategy.

        Args:
            strategy: Strategy name
            weights: Intelligent-selection weights

        Raises:
            ConfigurationError: If the name is unknown or weights are invalid
        """
        self._strategy = create_strategy(strategy, self._metrics, weights, self._classifier)
        logger.info("Updated model selection strategy", strategy=strategy)
