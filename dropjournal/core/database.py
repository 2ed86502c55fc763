"""
Supabase client factory.

The client is created lazily so that the in-memory backend (tests, local
development) never needs Supabase credentials.
"""

import logging
from functools import lru_cache

from supabase import Client, create_client

from dropjournal.core.config import settings

logger = logging.getLogger("DropJournal.Database")


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """Get the singleton Supabase client."""
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set for the supabase backend")

    client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    logger.info("Supabase client initialized")
    return client
