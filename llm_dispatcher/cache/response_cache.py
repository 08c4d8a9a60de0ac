"""
In-process response cache.

Sandi Metz Principles:
- Single Responsibility: Store and serve completed responses
- Small methods: Each operation < 10 lines
- Dependency Injection: Bound injected
"""

from collections import OrderedDict
from typing import Optional

from llm_dispatcher.models.response import DispatchResponse
from llm_dispatcher.utils.logger import get_logger

logger = get_logger(__name__)


class ResponseCache:
    """
    Content-addressed response cache.

    Keys come from utils.hasher.generate_cache_key. No TTL; an optional
    LRU bound evicts the least recently used entry. All operations are
    synchronous and run on the event loop thread, so each is atomic.
    """

    def __init__(self, max_entries: int = 0):
        """
        Initialize cache.

        Args:
            max_entries: LRU bound (0 = unbounded)
        """
        self._entries: "OrderedDict[str, DispatchResponse]" = OrderedDict()
        self._max_entries = max_entries

    def get(self, key: str) -> Optional[DispatchResponse]:
        """
        Get cached response.

        Args:
            key: Cache key

        Returns:
            Cached response if found, None otherwise
        """
        response = self._entries.get(key)
        if response is not None:
            self._entries.move_to_end(key)
        return response

    def put(self, key: str, response: DispatchResponse) -> bool:
        """
        Store response.

        Args:
            key: Cache key
            response: Response to store

        Returns:
            True if stored, False for error responses
        """
        if response.is_error:
            return False

        self._entries[key] = response
        self._entries.move_to_end(key)
        self._evict_if_needed()
        return True

    def _evict_if_needed(self) -> None:
        if not self._max_entries:
            return
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry", key=evicted)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()
        logger.info("Response cache cleared")

    @property
    def size(self) -> int:
        """Get number of cached responses."""
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
