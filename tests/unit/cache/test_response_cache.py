"""Test in-process response cache."""

import pytest

from llm_dispatcher.cache.response_cache import ResponseCache
from llm_dispatcher.models.response import DispatchResponse, TokenUsage


def make_response(content: str = "hello", error=None) -> DispatchResponse:
    """Build a response."""
    return DispatchResponse(
        request_id="req-1",
        model_id="m1",
        provider_id="p1",
        content=content,
        tokens=TokenUsage.create(1, 1),
        latency_ms=10.0,
        cost=0.001,
        error=error,
    )


class TestResponseCache:
    """Test response cache."""

    @pytest.fixture
    def cache(self) -> ResponseCache:
        """Create unbounded cache."""
        return ResponseCache()

    def test_should_miss_unknown_key(self, cache):
        """Test cache miss."""
        assert cache.get("response:missing") is None

    def test_should_store_and_return_response(self, cache):
        """Test cache hit."""
        response = make_response()
        assert cache.put("k", response) is True
        assert cache.get("k") == response
        assert "k" in cache
        assert cache.size == 1

    def test_should_refuse_error_responses(self, cache):
        """Test errors are never cached."""
        assert cache.put("k", make_response(error="boom")) is False
        assert len(cache) == 0

    def test_should_overwrite_existing_key(self, cache):
        """Test last write wins."""
        cache.put("k", make_response("old"))
        cache.put("k", make_response("new"))
        assert cache.get("k").content == "new"
        assert cache.size == 1

    def test_should_clear(self, cache):
        """Test clearing."""
        cache.put("a", make_response())
        cache.put("b", make_response())
        cache.clear()
        assert cache.size == 0

    def test_should_evict_least_recently_used(self):
        """Test LRU bound."""
        cache = ResponseCache(max_entries=2)
        cache.put("a", make_response("a"))
        cache.put("b", make_response("b"))
        cache.get("a")

        cache.put("c", make_response("c"))

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
