"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Cached settings accessor (clear the cache to reload)
    get_supabase_client: Cached Supabase client used by the services
    check_connection: Health check used by /health and startup
"""

from config.settings import settings, get_settings, Settings
from config.database import get_supabase_client, check_connection

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "get_supabase_client",
    "check_connection",
]
