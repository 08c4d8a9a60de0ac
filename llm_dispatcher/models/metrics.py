"""
Model metrics and dispatcher status models.

Sandi Metz Principles:
- Small classes with clear purpose
- Validation kept next to the data
- Clear naming conventions
"""

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ModelMetrics(BaseModel):
    """Running statistics for one model."""

    total_requests: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)
    total_cost: float = Field(default=0.0, ge=0)
    average_latency: float = Field(default=0.0, ge=0)
    success_rate: float = Field(default=100.0, ge=0.0, le=100.0)
    cache_hits: int = Field(default=0, ge=0)
    caching_efficiency: float = Field(default=0.0, ge=0.0, le=100.0)
    popularity_score: float = Field(default=0.0, ge=0.0, le=100.0)


class LoadBalancingWeights(BaseModel):
    """Weights for intelligent model selection."""

    model_config = ConfigDict(extra="forbid")

    latency: float = Field(default=0.3, ge=0.0)
    cost: float = Field(default=0.2, ge=0.0)
    capability: float = Field(default=0.3, ge=0.0)
    availability: float = Field(default=0.2, ge=0.0)

    @model_validator(mode="after")
    def validate_sum(self) -> "LoadBalancingWeights":
        """Validate weights sum to 1."""
        total = self.latency + self.cost + self.capability + self.availability
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"Load balancing weights must sum to 1, got {total:.4f}")
        return self


class DispatcherStatus(BaseModel):
    """Read-only dispatcher snapshot."""

    is_running: bool
    queue_length: int = Field(..., ge=0)
    active_requests: int = Field(..., ge=0)
    cache_size: int = Field(..., ge=0)
    provider_count: int = Field(..., ge=0)
    model_count: int = Field(..., ge=0)
    total_requests: int = Field(..., ge=0)
    total_cost: float = Field(..., ge=0)
