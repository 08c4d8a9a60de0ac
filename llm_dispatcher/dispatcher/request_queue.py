"""
Priority queue of pending dispatch requests.

Sandi Metz Principles:
- Single Responsibility: Order pending requests
- Small methods: Each method < 10 lines
- Clear naming: Self-documenting code
"""

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from llm_dispatcher.models.request import DispatchRequest


@dataclass(order=True)
class _QueueEntry:
    sort_key: tuple
    request: DispatchRequest = field(compare=False)


class PriorityRequestQueue:
    """
    Strict-priority queue with FIFO order among equal priorities.

    Entries sort on (-priority rank, insertion sequence), so two requests
    of the same priority are never reordered.
    """

    def __init__(self):
        """Initialize empty queue."""
        self._heap: List[_QueueEntry] = []
        self._sequence = itertools.count()
        self._not_empty = asyncio.Event()

    def push(self, request: DispatchRequest) -> None:
        """
        Add request to the queue.

        Args:
            request: Request to enqueue
        """
        entry = _QueueEntry((-request.priority_rank, next(self._sequence)), request)
        heapq.heappush(self._heap, entry)
        self._not_empty.set()

    def pop_nowait(self) -> Optional[DispatchRequest]:
        """
        Remove and return the next request.

        Returns:
            Highest-priority, oldest request, or None if empty
        """
        if not self._heap:
            return None
        request = heapq.heappop(self._heap).request
        if not self._heap:
            self._not_empty.clear()
        return request

    async def get(self) -> DispatchRequest:
        """
        Wait for and return the next request.

        Returns:
            Highest-priority, oldest request
        """
        while True:
            request = self.pop_nowait()
            if request is not None:
                return request
            await self._not_empty.wait()

    def remove(self, request_id: str) -> bool:
        """
        Remove a queued request.

        Args:
            request_id: Request to remove

        Returns:
            True if the request was queued
        """
        remaining = [e for e in self._heap if e.request.id != request_id]
        if len(remaining) == len(self._heap):
            return False

        heapq.heapify(remaining)
        self._heap = remaining
        if not self._heap:
            self._not_empty.clear()
        return True

    def __len__(self) -> int:
        return len(self._heap)

    def __contains__(self, request_id: str) -> bool:
        return any(e.request.id == request_id for e in self._heap)

    def __iter__(self) -> Iterator[DispatchRequest]:
        """Iterate requests in dispatch order without removing them."""
        return (e.request for e in sorted(self._heap))
