"""Supabase (PostgREST) access shared by the profile and settings adapters."""

from app.adapters.supabase.client import SupabaseRestClient

__all__ = ["SupabaseRestClient"]
