"""Hosted platform (auth admin, REST, realtime) client and config."""
from sad.services.supabase.client import SupabaseClient
from sad.services.supabase.config import SupabaseConfig

__all__ = ["SupabaseClient", "SupabaseConfig"]
