"""
Models package for the dispatcher.

Exports all model classes for easy imports throughout the package.
"""

# Metrics models
from llm_dispatcher.models.metrics import (
    DispatcherStatus,
    LoadBalancingWeights,
    ModelMetrics,
)

# Model definitions
from llm_dispatcher.models.model import ModelInfo, ModelSpec, RequestType

# Provider models
from llm_dispatcher.models.provider import HealthStatus, ProviderInfo, RateLimitBudget

# Request models
from llm_dispatcher.models.request import (
    PRIORITY_RANK,
    DispatchRequest,
    GenerationOptions,
    Priority,
)

# Response models
from llm_dispatcher.models.response import AdapterResult, DispatchResponse, TokenUsage

__all__ = [
    # Metrics
    "DispatcherStatus",
    "LoadBalancingWeights",
    "ModelMetrics",
    # Model
    "ModelInfo",
    "ModelSpec",
    "RequestType",
    # Provider
    "HealthStatus",
    "ProviderInfo",
    "RateLimitBudget",
    # Request
    "PRIORITY_RANK",
    "DispatchRequest",
    "GenerationOptions",
    "Priority",
    # Response
    "AdapterResult",
    "DispatchResponse",
    "TokenUsage",
]
