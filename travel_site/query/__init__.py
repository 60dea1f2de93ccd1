"""
Cache-aware async query execution.
"""
from .executor import OptimizedQuery, QueryFn, QueryOptions, QueryState, error_message
from .client import QueryClient

__all__ = [
    "OptimizedQuery",
    "QueryClient",
    "QueryFn",
    "QueryOptions",
    "QueryState",
    "error_message",
]
