"""Profile store adapters (sponsor lookups and referral counts)."""

from app.adapters.profiles.base import AbstractProfileStore
from app.adapters.profiles.in_memory import InMemoryProfileStore
from app.adapters.profiles.supabase import SupabaseProfileStore

__all__ = ["AbstractProfileStore", "InMemoryProfileStore", "SupabaseProfileStore"]
