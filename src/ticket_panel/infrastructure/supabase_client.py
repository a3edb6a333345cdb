# src/ticket_panel/infrastructure/supabase_client.py
"""
Supabase Client

Provides the async Supabase client used by the data access layer.

Usage:
    from .supabase_client import get_supabase_client

    client = await get_supabase_client()
    result = await client.table("tickets").select("*").execute()
"""

import logging
from typing import Optional

from supabase import AsyncClient, acreate_client

from ..config import get_config

logger = logging.getLogger(__name__)

# Singleton client
_supabase_client: Optional[AsyncClient] = None


async def get_supabase_client() -> Optional[AsyncClient]:
    """
    Get the Supabase client singleton.

    Returns:
        Async Supabase client or None if not configured
    """
    global _supabase_client

    if _supabase_client is not None:
        return _supabase_client

    settings = get_config().supabase

    if not settings.is_configured:
        logger.warning("⚠️ Supabase not configured (missing SUPABASE_URL or SUPABASE_KEY)")
        return None

    _supabase_client = await acreate_client(settings.url, settings.key)
    logger.info(f"✅ Connected to Supabase: {settings.url}")
    return _supabase_client


def reset_supabase_client() -> None:
    """Drop the cached client so the next call reconnects."""
    global _supabase_client
    _supabase_client = None
