"""
Hosted backend client for Vision Assist
"""
import logging
from functools import lru_cache

from supabase import create_client

from .. import config

logger = logging.getLogger("SupabaseClient")


class ConfigurationError(Exception):
    """Raised when the hosted backend is not configured"""


@lru_cache()
def get_supabase_client():
    """Cached client built from SUPABASE_URL and SUPABASE_ANON_KEY"""
    if not config.SUPABASE_URL or not config.SUPABASE_ANON_KEY:
        raise ConfigurationError(
            "Set SUPABASE_URL and SUPABASE_ANON_KEY to enable accounts and detection logs"
        )

    logger.info(f"Connecting to Supabase at {config.SUPABASE_URL}")
    return create_client(config.SUPABASE_URL, config.SUPABASE_ANON_KEY)
