"""
Multi-provider request dispatcher.

Sandi Metz Principles:
- Single Responsibility: Queue, schedule and execute generation requests
- Dependency Injection: Registry, cache, limiter, selector and metrics injected
- Small methods: Each execution step isolated
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

from llm_dispatcher.cache.response_cache import ResponseCache
from llm_dispatcher.config import DispatcherConfig
from llm_dispatcher.config import config as default_config
from llm_dispatcher.dispatcher.request_queue import PriorityRequestQueue
from llm_dispatcher.exceptions import (
    ConfigurationError,
    NoAvailableModelError,
    ProviderError,
    RequestTimeoutError,
)
from llm_dispatcher.llm.health_checker import ProviderHealthChecker
from llm_dispatcher.llm.metrics_tracker import MetricsTracker
from llm_dispatcher.llm.model_selector import ModelSelector
from llm_dispatcher.llm.provider import BaseProviderAdapter
from llm_dispatcher.llm.rate_limiter import RateLimiterRegistry
from llm_dispatcher.llm.registry import ModelDefinition, ModelRegistry
from llm_dispatcher.models.metrics import DispatcherStatus, ModelMetrics
from llm_dispatcher.models.model import ModelInfo, RequestType
from llm_dispatcher.models.provider import ProviderInfo, RateLimitBudget
from llm_dispatcher.models.request import (
    DispatchRequest,
    GenerationOptions,
    Priority,
    generate_id,
)
from llm_dispatcher.models.response import DispatchResponse
from llm_dispatcher.utils.hasher import generate_cache_key
from llm_dispatcher.utils.logger import (
    get_logger,
    log_cache_hit,
    log_cache_miss,
    log_error,
    log_llm_call,
    log_request_queued,
)

logger = get_logger(__name__)


class RequestState(str, Enum):
    """Lifecycle of a dispatched request."""

    QUEUED = "queued"
    IN_FLIGHT = "in_flight"
    FALLBACK = "fallback"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass
class _PendingRequest:
    request: DispatchRequest
    cache_key: str
    future: asyncio.Future
    state: RequestState = RequestState.QUEUED
    holds_slot: bool = False


class Dispatcher:
    """
    Dispatcher for generation requests across providers.

    Requests are served from cache when possible, otherwise queued by
    priority and executed by a single loop that keeps at most
    max_in_flight provider calls running. A request waiting on its
    provider's rate limit gives up its slot meanwhile. Each caller waits
    on its own future; late results for abandoned requests are discarded.
    """

    def __init__(
        self,
        config: Optional[DispatcherConfig] = None,
        registry: Optional[ModelRegistry] = None,
        cache: Optional[ResponseCache] = None,
        rate_limiters: Optional[RateLimiterRegistry] = None,
        metrics: Optional[MetricsTracker] = None,
        selector: Optional[ModelSelector] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            config: Dispatcher configuration (uses global config if None)
            registry: Model/provider registry
            cache: Response cache
            rate_limiters: Per-provider rate limiters
            metrics: Metrics tracker
            selector: Model selector

        Raises:
            ConfigurationError: If the configured strategy or weights are invalid
        """
        self._config = config or default_config
        self._registry = registry or ModelRegistry()
        self._cache = cache or ResponseCache(max_entries=self._config.cache_max_entries)
        self._rate_limiters = rate_limiters or RateLimiterRegistry()
        self._metrics = metrics or MetricsTracker(self._registry)
        self._selector = selector or ModelSelector(
            self._metrics,
            strategy=self._config.load_balancing_strategy,
            weights=self._config.load_balancing_weights,
        )
        self._adapters: Dict[str, BaseProviderAdapter] = {}
        self._health_checker = ProviderHealthChecker(
            self._registry,
            self._adapters,
            interval_seconds=self._config.health_check_interval_seconds,
        )

        self._queue = PriorityRequestQueue()
        self._pending: Dict[str, _PendingRequest] = {}
        self._active: Dict[str, asyncio.Task] = {}
        self._slots = asyncio.Semaphore(self._config.max_in_flight)
        self._loop_task: Optional[asyncio.Task] = None

    # Lifecycle

    async def start(self) -> None:
        """Start the execution loop and periodic health checks."""
        if self.is_running:
            return

        self._loop_task = asyncio.create_task(self._run_loop())
        self._health_checker.start()
        logger.info("Dispatcher started", max_in_flight=self._config.max_in_flight)

    async def stop(self) -> None:
        """
        Stop dequeuing requests.

        In-flight requests run to completion; queued ones stay queued
        until restart or their timeout.
        """
        if not self._loop_task:
            return

        self._loop_task.cancel()
        try:
            await self._loop_task
        except asyncio.CancelledError:
            pass
        self._loop_task = None
        await self._health_checker.stop()
        logger.info("Dispatcher stopped")

    async def __aenter__(self) -> "Dispatcher":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    @property
    def is_running(self) -> bool:
        """Check if the execution loop is running."""
        return self._loop_task is not None and not self._loop_task.done()

    # Provider registration

    def register_provider(
        self,
        provider_id: str,
        name: str,
        base_url: str,
        credential: str,
        models: Iterable[ModelDefinition],
        adapter: BaseProviderAdapter,
        rate_limits: Optional[RateLimitBudget] = None,
    ) -> ProviderInfo:
        """
        Register or replace a provider with its models and adapter.

        Args:
            provider_id: Provider identifier
            name: Display name
            base_url: Base endpoint
            credential: API credential (never logged)
            models: Model definitions
            adapter: Adapter executing calls for this provider
            rate_limits: Budget (uses configured defaults if None)

        Returns:
            Registered provider

        Raises:
            ConfigurationError: If credential, models, budget or adapter are invalid
        """
        if adapter is None:
            raise ConfigurationError(f"No adapter supplied for provider '{provider_id}'")

        budget = rate_limits or RateLimitBudget(
            requests_per_minute=self._config.default_requests_per_minute,
            tokens_per_minute=self._config.default_tokens_per_minute,
            window_seconds=self._config.rate_limit_window_seconds,
        )
        previous = self._registry.get_provider(provider_id)
        previous_models = set(previous.model_ids) if previous else set()

        provider = self._registry.register_provider(
            provider_id, name, base_url, credential, models, rate_limits=budget
        )
        self._rate_limiters.configure(provider_id, budget)
        self._adapters[provider_id] = adapter

        for model_id in previous_models - set(provider.model_ids):
            self._metrics.remove(model_id)
        for model_id in provider.model_ids:
            self._metrics.initialize(model_id)

        return provider

    def remove_provider(self, provider_id: str) -> None:
        """
        Deregister a provider and its models.

        Raises:
            ConfigurationError: If provider not registered
        """
        provider = self._registry.get_provider(provider_id)
        self._registry.remove_provider(provider_id)
        for model_id in provider.model_ids:
            self._metrics.remove(model_id)
        self._rate_limiters.remove(provider_id)
        self._adapters.pop(provider_id, None)

    # Requests

    async def make_request(
        self,
        prompt: str,
        model_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        request_type: Optional[RequestType] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        stream: bool = False,
        priority: Optional[Priority] = None,
        timeout: Optional[float] = None,
        allow_fallback: bool = True,
    ) -> DispatchResponse:
        """
        Dispatch a generation request.

        Args:
            prompt: Prompt text
            model_id: Pin a model instead of letting the selector choose
            provider_id: Restrict automatic selection to one provider
            request_type: Restrict automatic selection to one request type
            max_tokens: Max output tokens
            temperature: Sampling temperature
            top_p: Nucleus sampling
            stream: Streaming flag forwarded to the adapter
            priority: Queue priority (default from config)
            timeout: Timeout in seconds (default from config)
            allow_fallback: Retry once on another model if the provider fails

        Returns:
            Response, possibly served from cache

        Raises:
            ValueError: If the prompt is empty
            NoAvailableModelError: If no model can serve the request
            ProviderError: If the provider (and fallback) failed
            RequestTimeoutError: If the timeout elapsed first
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")

        options = self._build_options(max_tokens, temperature, top_p, stream)
        cache_key = generate_cache_key(
            prompt,
            {
                "model_id": model_id,
                "provider_id": provider_id,
                "request_type": request_type,
                **options.model_dump(),
            },
        )
        request_id = generate_id("req")

        cached = self._lookup_cache(cache_key, prompt, request_id)
        if cached:
            return cached

        model = self._resolve_model(prompt, model_id, provider_id, request_type)
        request = DispatchRequest(
            id=request_id,
            model_id=model.id,
            provider_id=model.provider_id,
            prompt=prompt,
            options=options,
            request_type=request_type,
            priority=priority or self._config.default_priority,
            timeout_seconds=(
                self._config.default_request_timeout_seconds
                if timeout is None
                else timeout
            ),
            allow_fallback=allow_fallback,
        )
        return await self._submit(request, cache_key)

    def _build_options(
        self,
        max_tokens: Optional[int],
        temperature: Optional[float],
        top_p: Optional[float],
        stream: bool,
    ) -> GenerationOptions:
        """Apply configured defaults to generation options."""
        return GenerationOptions(
            max_tokens=(
                self._config.default_max_tokens if max_tokens is None else max_tokens
            ),
            temperature=(
                self._config.default_temperature if temperature is None else temperature
            ),
            top_p=self._config.default_top_p if top_p is None else top_p,
            stream=stream,
        )

    def _lookup_cache(
        self, cache_key: str, prompt: str, request_id: str
    ) -> Optional[DispatchResponse]:
        """Serve a cache hit as a fresh response."""
        if not self._config.is_cache_enabled:
            return None

        cached = self._cache.get(cache_key)
        if cached is None:
            log_cache_miss(prompt)
            return None

        if self._registry.get_model(cached.model_id) is not None:
            self._metrics.record_cache_hit(cached.model_id)
        log_cache_hit(prompt, request_id, model=cached.model_id)
        return cached.as_cache_hit(request_id)

    def _resolve_model(
        self,
        prompt: str,
        model_id: Optional[str],
        provider_id: Optional[str],
        request_type: Optional[RequestType],
    ) -> ModelInfo:
        """
        Resolve the model that will serve a request.

        Raises:
            NoAvailableModelError: If the pinned model is unusable or no
                model matches the filters
        """
        if model_id:
            model = self._registry.get_model(model_id)
            if model is None or not model.is_available:
                raise NoAvailableModelError(f"Model '{model_id}' is not available")
            return model

        candidates = self._registry.list_available_models(request_type, provider_id)
        selected = self._selector.select_model(candidates, prompt)
        if selected is None:
            raise NoAvailableModelError(
                f"No available models (type={request_type}, provider={provider_id})"
            )
        return self._registry.get_model(selected)

    async def _submit(
        self, request: DispatchRequest, cache_key: str
    ) -> DispatchResponse:
        """Queue a request and wait for its outcome."""
        pending = _PendingRequest(
            request=request,
            cache_key=cache_key,
            future=asyncio.get_running_loop().create_future(),
        )
        self._pending[request.id] = pending
        self._queue.push(request)
        log_request_queued(request.id, request.model_id, request.priority)

        try:
            return await asyncio.wait_for(pending.future, timeout=request.timeout_seconds)
        except asyncio.TimeoutError:
            self._abandon(pending, RequestState.TIMED_OUT)
            raise RequestTimeoutError(
                f"Request {request.id} timed out after {request.timeout_seconds}s"
            ) from None
        except asyncio.CancelledError:
            self._abandon(pending, RequestState.CANCELLED)
            raise
        finally:
            self._pending.pop(request.id, None)

    def _abandon(self, pending: _PendingRequest, state: RequestState) -> None:
        """Drop a request the caller no longer waits for."""
        pending.state = state
        request_id = pending.request.id

        if self._queue.remove(request_id):
            logger.info("Removed request from queue", request_id=request_id, state=state.value)

        task = self._active.get(request_id)
        if task and not task.done():
            task.cancel()
            logger.info("Abandoned in-flight request", request_id=request_id, state=state.value)

    # Execution loop

    async def _run_loop(self) -> None:
        """Dequeue requests while execution slots are free."""
        while True:
            await self._slots.acquire()
            try:
                request = await self._queue.get()
            except BaseException:
                self._slots.release()
                raise

            pending = self._pending.get(request.id)
            if pending is None or pending.future.done():
                self._slots.release()
                continue

            pending.state = RequestState.IN_FLIGHT
            pending.holds_slot = True
            self._active[request.id] = asyncio.create_task(self._process(pending))

    async def _process(self, pending: _PendingRequest) -> None:
        """Execute one request; failures never escape the loop."""
        try:
            response = await self._execute_with_fallback(pending)
        except Exception as e:
            self._reject(pending, e)
        else:
            self._resolve(pending, response)
        finally:
            self._active.pop(pending.request.id, None)
            self._release_slot(pending)

    def _release_slot(self, pending: _PendingRequest) -> None:
        if pending.holds_slot:
            pending.holds_slot = False
            self._slots.release()

    async def _wait_for_budget(self, pending: _PendingRequest, provider_id: str) -> None:
        """Wait for provider budget without holding an execution slot."""
        if self._rate_limiters.has_capacity(provider_id):
            await self._rate_limiters.acquire(provider_id)
            return

        self._release_slot(pending)
        logger.debug(
            "Waiting for rate limit", request_id=pending.request.id, provider=provider_id
        )
        await self._rate_limiters.acquire(provider_id)
        await self._slots.acquire()
        pending.holds_slot = True

    async def _execute_with_fallback(self, pending: _PendingRequest) -> DispatchResponse:
        """
        Execute request, retrying once on another model.

        Raises:
            ProviderError: If the primary call fails and fallback is
                disabled, impossible, or fails too
        """
        request = pending.request
        try:
            return await self._execute(pending, request)
        except ProviderError as e:
            if not request.allow_fallback:
                raise

            fallback = self._select_fallback(request)
            if fallback is None:
                logger.warning("No fallback model available", request_id=request.id)
                raise

            pending.state = RequestState.FALLBACK
            logger.warning(
                "Provider failed, using fallback",
                request_id=request.id,
                primary=request.model_id,
                fallback=fallback.id,
                error=str(e),
            )
            return await self._execute(
                pending, request.retarget(fallback.id, fallback.provider_id)
            )

    def _select_fallback(self, request: DispatchRequest) -> Optional[ModelInfo]:
        """Pick a different available model for a failed request."""
        candidates = [
            m
            for m in self._registry.list_available_models(request.request_type)
            if m.id != request.model_id
        ]
        selected = self._selector.select_model(candidates, request.prompt)
        return self._registry.get_model(selected) if selected else None

    async def _execute(
        self, pending: _PendingRequest, request: DispatchRequest
    ) -> DispatchResponse:
        """
        Run one provider call under the provider's rate limit.

        Raises:
            ProviderError: If the adapter fails
        """
        model = self._registry.get_model(request.model_id)
        adapter = self._adapters.get(request.provider_id)
        if model is None or adapter is None:
            raise ProviderError(f"Model '{request.model_id}' is no longer registered")

        await self._wait_for_budget(pending, request.provider_id)

        started = time.perf_counter()
        try:
            result = await adapter.invoke(model, request)
        except ProviderError:
            self._record_failure(model, started)
            raise
        except Exception as e:
            self._record_failure(model, started)
            raise ProviderError(
                f"Adapter '{adapter.get_name()}' failed: {type(e).__name__} - {str(e)}"
            ) from e

        latency_ms = (time.perf_counter() - started) * 1000
        cost = model.calculate_cost(result.total_tokens)
        self._rate_limiters.record(request.provider_id, result.total_tokens)
        self._metrics.record(model.id, result.total_tokens, cost, latency_ms, True)
        log_llm_call(
            model.provider_id,
            model.id,
            result.total_tokens,
            latency_ms=round(latency_ms, 1),
            cost=cost,
        )

        return DispatchResponse(
            request_id=request.id,
            model_id=model.id,
            provider_id=model.provider_id,
            content=result.content,
            tokens=result.tokens,
            latency_ms=latency_ms,
            cost=cost,
        )

    def _record_failure(self, model: ModelInfo, started: float) -> None:
        latency_ms = (time.perf_counter() - started) * 1000
        self._metrics.record(model.id, 0, 0.0, latency_ms, False)

    def _resolve(self, pending: _PendingRequest, response: DispatchResponse) -> None:
        """Deliver a response unless the caller has gone."""
        if pending.future.done():
            logger.info("Discarding late response", request_id=pending.request.id)
            return

        if self._config.is_cache_enabled:
            self._cache.put(pending.cache_key, response)
        pending.state = RequestState.RESOLVED
        pending.future.set_result(response)

    def _reject(self, pending: _PendingRequest, error: Exception) -> None:
        """Deliver an error unless the caller has gone."""
        log_error(error, "dispatch", request_id=pending.request.id)
        if pending.future.done():
            return

        pending.state = RequestState.REJECTED
        pending.future.set_exception(error)

    # Introspection and configuration

    def get_status(self) -> DispatcherStatus:
        """Get a non-blocking snapshot of dispatcher state."""
        return DispatcherStatus(
            is_running=self.is_running,
            queue_length=len(self._queue),
            active_requests=len(self._active),
            cache_size=self._cache.size,
            provider_count=self._registry.provider_count,
            model_count=self._registry.model_count,
            total_requests=self._metrics.total_requests,
            total_cost=self._metrics.total_cost,
        )

    def get_request_state(self, request_id: str) -> Optional[RequestState]:
        """Get the state of a request the caller is still waiting on."""
        pending = self._pending.get(request_id)
        return pending.state if pending else None

    def get_model_metrics(
        self, model_id: Optional[str] = None
    ) -> Union[ModelMetrics, Dict[str, ModelMetrics]]:
        """
        Get metrics for one model or all models.

        Args:
            model_id: Model to inspect (all models if None)
        """
        if model_id:
            return self._metrics.get(model_id)
        return self._metrics.get_all()

    def get_model(self, model_id: str) -> Optional[ModelInfo]:
        """Get model by ID."""
        return self._registry.get_model(model_id)

    def list_available_models(
        self, request_type: Optional[RequestType] = None
    ) -> List[ModelInfo]:
        """List available models, optionally filtered by type."""
        return self._registry.list_available_models(request_type)

    def get_provider(self, provider_id: str) -> Optional[ProviderInfo]:
        """Get provider by ID."""
        return self._registry.get_provider(provider_id)

    def list_providers(self) -> List[ProviderInfo]:
        """List registered providers."""
        return self._registry.list_providers()

    async def check_health(self) -> Dict[str, str]:
        """Run one round of provider health checks now."""
        return await self._health_checker.check_all()

    def set_load_balancing_strategy(
        self, strategy: str, weights: Optional[Dict[str, float]] = None
    ) -> None:
        """
        Change the selection strategy for subsequent requests.

        Queued and in-flight requests keep their assigned model.

        Raises:
            ConfigurationError: If the strategy or weights are invalid
        """
        self._selector.set_strategy(strategy, weights)

    def clear_cache(self) -> None:
        """Remove all cached responses."""
        self._cache.clear()
