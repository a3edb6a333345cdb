# src/ticket_panel/infrastructure/__init__.py
"""
Infrastructure - remote client and query cache.
"""

from .cache import QueryCache, QueryState
from .supabase_client import get_supabase_client, reset_supabase_client

__all__ = [
    "QueryCache",
    "QueryState",
    "get_supabase_client",
    "reset_supabase_client",
]
