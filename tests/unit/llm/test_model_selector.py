"""Test model selection strategies."""

import pytest

from llm_dispatcher.exceptions import ConfigurationError
from llm_dispatcher.llm.capabilities import KeywordCapabilityClassifier
from llm_dispatcher.llm.metrics_tracker import MetricsTracker
from llm_dispatcher.llm.model_selector import (
    IntelligentStrategy,
    LeastCostStrategy,
    LeastLatencyStrategy,
    ModelSelector,
    MostCapableStrategy,
    RoundRobinStrategy,
    create_strategy,
)
from llm_dispatcher.models.metrics import LoadBalancingWeights
from llm_dispatcher.models.model import ModelInfo


def make_model(model_id: str, **overrides) -> ModelInfo:
    """Build a model with defaults."""
    values = {"id": model_id, "provider_id": "p", "name": model_id}
    values.update(overrides)
    return ModelInfo(**values)


@pytest.fixture
def cheap_and_fast():
    """Models m1 (cheap, slow) and m2 (expensive, fast)."""
    return [
        make_model("m1", cost_per_1k_tokens=0.001, latency_ms=2000),
        make_model("m2", cost_per_1k_tokens=0.01, latency_ms=500),
    ]


class TestSimpleStrategies:
    """Test single-criterion strategies."""

    def test_least_cost_picks_cheapest(self, cheap_and_fast):
        """Test least-cost picks m1."""
        assert LeastCostStrategy().select(cheap_and_fast, "hi").id == "m1"

    def test_least_latency_picks_fastest(self, cheap_and_fast):
        """Test least-latency picks m2."""
        assert LeastLatencyStrategy().select(cheap_and_fast, "hi").id == "m2"

    def test_round_robin_picks_least_used(self):
        """Test usage-count balancing."""
        models = [make_model("a", usage_count=3), make_model("b", usage_count=1)]
        assert RoundRobinStrategy().select(models, "hi").id == "b"

    def test_ties_break_by_model_id(self):
        """Test deterministic tie-break."""
        models = [make_model("zeta"), make_model("alpha")]
        assert LeastCostStrategy().select(models, "hi").id == "alpha"
        assert RoundRobinStrategy().select(models, "hi").id == "alpha"


class TestMostCapableStrategy:
    """Test capability-driven selection."""

    @pytest.fixture
    def strategy(self) -> MostCapableStrategy:
        """Create strategy."""
        return MostCapableStrategy(KeywordCapabilityClassifier())

    def test_picks_broadest_capable_model(self, strategy):
        """Test superset filter then breadth."""
        models = [
            make_model("plain"),
            make_model("coder", capabilities=["text-generation", "code-generation"]),
            make_model(
                "wide",
                capabilities=["text-generation", "code-generation", "translation"],
            ),
        ]
        assert strategy.select(models, "write a function").id == "wide"

    def test_falls_back_to_first_candidate(self, strategy):
        """Test no capable model returns first candidate."""
        models = [make_model("first"), make_model("second")]
        assert strategy.select(models, "translate this code").id == "first"


class TestIntelligentStrategy:
    """Test weighted scoring."""

    def test_scores_documented_formula(self):
        """Test score arithmetic."""
        strategy = IntelligentStrategy(
            KeywordCapabilityClassifier(), MetricsTracker(), LoadBalancingWeights()
        )
        model = make_model("m", latency_ms=1000, cost_per_1k_tokens=0.5)

        score = strategy.score(model, ["text-generation", "translation"])

        assert score == pytest.approx(0.3 * 1 + 0.2 * 2 + 0.3 * 0.5 + 0.2 * 1)

    def test_penalizes_failing_models(self):
        """Test success rate feeds availability term."""
        metrics = MetricsTracker()
        metrics.record("bad", 0, 0.0, 100.0, False)
        weights = LoadBalancingWeights(latency=0.0, cost=0.0, capability=0.0, availability=1.0)
        strategy = IntelligentStrategy(KeywordCapabilityClassifier(), metrics, weights)

        selected = strategy.select([make_model("bad"), make_model("good")], "hi")

        assert selected.id == "good"

    def test_zero_availability_for_unavailable_model(self):
        """Test unavailable models lose the availability term."""
        strategy = IntelligentStrategy(
            KeywordCapabilityClassifier(),
            MetricsTracker(),
            LoadBalancingWeights(latency=0.0, cost=0.0, capability=0.0, availability=1.0),
        )
        assert strategy.score(make_model("m", is_available=False), ["text-generation"]) == 0.0


class TestModelSelector:
    """Test selector facade."""

    @pytest.fixture
    def selector(self) -> ModelSelector:
        """Create selector with intelligent default."""
        return ModelSelector(MetricsTracker())

    def test_default_strategy_is_intelligent(self, selector):
        """Test default strategy."""
        assert selector.strategy_name == "intelligent"

    def test_returns_none_without_candidates(self, selector):
        """Test empty candidate list."""
        assert selector.select_model([], "hi") is None

    def test_switches_strategy(self, selector, cheap_and_fast):
        """Test strategy switching changes selection."""
        selector.set_strategy("least-cost")
        assert selector.select_model(cheap_and_fast, "hi") == "m1"

        selector.set_strategy("least-latency")
        assert selector.select_model(cheap_and_fast, "hi") == "m2"

    def test_rejects_unknown_strategy(self, selector):
        """Test unknown name."""
        with pytest.raises(ConfigurationError):
            selector.set_strategy("random")
        assert selector.strategy_name == "intelligent"

    def test_rejects_invalid_weights(self, selector):
        """Test weights must sum to 1."""
        with pytest.raises(ConfigurationError):
            selector.set_strategy("intelligent", {"latency": 0.9, "cost": 0.9})

    def test_create_strategy_by_name(self):
        """Test strategy factory."""
        assert isinstance(create_strategy("round-robin", MetricsTracker()), RoundRobinStrategy)
        assert isinstance(create_strategy("most-capable", MetricsTracker()), MostCapableStrategy)
