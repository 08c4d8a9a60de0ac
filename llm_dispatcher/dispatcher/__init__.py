"""
Request dispatching module.

Contains dispatching components:
- Priority Request Queue
- Dispatcher
"""

from llm_dispatcher.dispatcher.dispatcher import Dispatcher, RequestState
from llm_dispatcher.dispatcher.request_queue import PriorityRequestQueue

__all__ = [
    # Queue
    "PriorityRequestQueue",
    # Dispatcher
    "Dispatcher",
    "RequestState",
]
