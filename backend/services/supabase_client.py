"""
Supabase client initialization.

Two clients are used: a synchronous one for match records (service role,
backend use) and an async one for Realtime broadcast channels, which a
player's client can open with the anon key.
"""

import os
import logging
from typing import Optional, Tuple
from supabase import create_client, acreate_client, Client, AsyncClient

logger = logging.getLogger(__name__)


_supabase_client: Optional[Client] = None


def _credentials(allow_anon: bool) -> Tuple[str, str]:
    url = os.getenv('SUPABASE_URL')
    key = os.getenv('SUPABASE_SERVICE_ROLE')
    if not key and allow_anon:
        key = os.getenv('SUPABASE_ANON_KEY')

    if not url:
        raise ValueError("SUPABASE_URL environment variable is required")

    if not key:
        if allow_anon:
            raise ValueError("SUPABASE_SERVICE_ROLE or SUPABASE_ANON_KEY environment variable is required")
        raise ValueError("SUPABASE_SERVICE_ROLE environment variable is required")

    return url, key


def get_supabase_client() -> Client:
    """
    Get or create the shared Supabase client.

    Uses environment variables:
    - SUPABASE_URL: The Supabase project URL
    - SUPABASE_SERVICE_ROLE: The service role key (full access)

    Raises:
        ValueError: If required environment variables are missing
    """
    global _supabase_client

    if _supabase_client is not None:
        return _supabase_client

    url, key = _credentials(allow_anon=False)

    try:
        _supabase_client = create_client(url, key)
        logger.info(f"Supabase client initialized successfully for project: {url}")
        return _supabase_client

    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {e}")
        raise


async def get_async_supabase_client() -> AsyncClient:
    """
    Create a new async Supabase client for Realtime channels.

    Each call returns a fresh client so two local players get two
    independent sockets. Falls back to SUPABASE_ANON_KEY when no service
    role key is configured.
    """
    url, key = _credentials(allow_anon=True)
    client = await acreate_client(url, key)
    logger.info(f"Async Supabase client created for project: {url}")
    return client


def reset_supabase_client():
    """
    Reset the Supabase client singleton.
    Useful for testing or when credentials change.
    """
    global _supabase_client
    _supabase_client = None
    logger.info("Supabase client reset")
