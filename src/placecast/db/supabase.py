"""Supabase client for the notification store and user directory."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import Settings


@lru_cache()
def _create_cached_client(url: str, key: str) -> Client:
    return create_client(url, key)


def get_supabase_client(settings: Settings) -> Client | None:
    """Get a cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return _create_cached_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None
