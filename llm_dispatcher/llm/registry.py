"""
Model and provider registry.

Sandi Metz Principles:
- Single Responsibility: Hold provider and model metadata
- Open/Closed: Easy to add/remove providers
- No I/O: Pure in-memory bookkeeping
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union

from pydantic import SecretStr

from llm_dispatcher.exceptions import ConfigurationError
from llm_dispatcher.models.model import ModelInfo, ModelSpec, RequestType
from llm_dispatcher.models.provider import HealthStatus, ProviderInfo, RateLimitBudget
from llm_dispatcher.utils.logger import get_logger

logger = get_logger(__name__)

ModelDefinition = Union[ModelSpec, dict]


class ModelRegistry:
    """
    Registry of providers and the models they own.

    Read-mostly after startup; mutated only by registration,
    removal and health updates.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._providers: Dict[str, ProviderInfo] = {}
        self._models: Dict[str, ModelInfo] = {}

    def register_provider(
        self,
        provider_id: str,
        name: str,
        base_url: str,
        credential: str,
        models: Iterable[ModelDefinition],
        rate_limits: Optional[RateLimitBudget] = None,
    ) -> ProviderInfo:
        """
        Register or replace a provider and its models.

        Re-registering keeps usage counters of models that remain
        and drops models no longer listed.

        Args:
            provider_id: Provider identifier
            name: Display name
            base_url: Base endpoint
            credential: API credential
            models: Model definitions
            rate_limits: Optional rate-limit budget

        Returns:
            Registered provider

        Raises:
            ConfigurationError: If credential is missing or a model is invalid
        """
        if not provider_id or not provider_id.strip():
            raise ConfigurationError("Provider ID cannot be empty")
        if not credential or not credential.strip():
            raise ConfigurationError(f"Missing credential for provider '{provider_id}'")

        built = self._build_models(provider_id, models)
        existing = self._providers.get(provider_id)
        if existing:
            self._drop_models(m for m in existing.model_ids if m not in built)

        for model_id, model in built.items():
            previous = self._models.get(model_id)
            if previous:
                model.usage_count = previous.usage_count
                model.last_used = previous.last_used
                model.error_rate = previous.error_rate
            self._models[model_id] = model

        provider = ProviderInfo(
            id=provider_id,
            name=name,
            base_url=base_url,
            credential=SecretStr(credential),
            model_ids=list(built),
            rate_limits=rate_limits or RateLimitBudget(),
        )
        self._providers[provider_id] = provider
        logger.info(
            "Registered provider", provider=provider_id, models=len(built)
        )
        return provider

    def _build_models(
        self, provider_id: str, models: Iterable[ModelDefinition]
    ) -> Dict[str, ModelInfo]:
        """Validate model definitions and resolve defaults."""
        built: Dict[str, ModelInfo] = {}
        for index, definition in enumerate(models):
            spec = self._to_spec(definition)
            if spec.id is not None and not spec.id.strip():
                raise ConfigurationError(
                    f"Model at index {index} of '{provider_id}' has an empty ID"
                )

            model = spec.build(provider_id, index)
            owner = self._models.get(model.id)
            if owner and owner.provider_id != provider_id:
                raise ConfigurationError(
                    f"Model '{model.id}' is already owned by '{owner.provider_id}'"
                )
            if model.id in built:
                raise ConfigurationError(f"Duplicate model ID '{model.id}'")

            built[model.id] = model
        return built

    @staticmethod
    def _to_spec(definition: ModelDefinition) -> ModelSpec:
        if isinstance(definition, ModelSpec):
            return definition
        return ModelSpec(**definition)

    def remove_provider(self, provider_id: str) -> None:
        """
        Remove provider and deregister its models.

        Args:
            provider_id: Provider to remove

        Raises:
            ConfigurationError: If provider not registered
        """
        provider = self._providers.pop(provider_id, None)
        if not provider:
            raise ConfigurationError(f"Provider '{provider_id}' not registered")

        self._drop_models(provider.model_ids)
        logger.info("Removed provider", provider=provider_id)

    def _drop_models(self, model_ids: Iterable[str]) -> None:
        for model_id in list(model_ids):
            self._models.pop(model_id, None)

    def get_model(self, model_id: str) -> Optional[ModelInfo]:
        """Get model by ID, or None if not registered."""
        return self._models.get(model_id)

    def get_provider(self, provider_id: str) -> Optional[ProviderInfo]:
        """Get provider by ID, or None if not registered."""
        return self._providers.get(provider_id)

    def list_models(self) -> List[ModelInfo]:
        """List all registered models in registration order."""
        return list(self._models.values())

    def list_available_models(
        self,
        request_type: Optional[RequestType] = None,
        provider_id: Optional[str] = None,
    ) -> List[ModelInfo]:
        """
        List available models.

        Args:
            request_type: Optional request type filter
            provider_id: Optional owning provider filter

        Returns:
            Available models in registration order
        """
        return [
            model
            for model in self._models.values()
            if model.is_available
            and (request_type is None or model.type == request_type)
            and (provider_id is None or model.provider_id == provider_id)
        ]

    def list_providers(self) -> List[ProviderInfo]:
        """List all registered providers."""
        return list(self._providers.values())

    def set_health(self, provider_id: str, status: HealthStatus) -> None:
        """
        Record provider health status.

        Models of an unavailable provider are marked unavailable.

        Args:
            provider_id: Provider identifier
            status: New health status
        """
        provider = self._providers.get(provider_id)
        if not provider:
            return

        provider.health_status = status
        provider.last_health_check = datetime.now(timezone.utc)
        for model_id in provider.model_ids:
            self._models[model_id].is_available = status != "unavailable"

    @property
    def provider_count(self) -> int:
        """Get number of registered providers."""
        return len(self._providers)

    @property
    def model_count(self) -> int:
        """Get number of registered models."""
        return len(self._models)
