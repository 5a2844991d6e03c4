"""
Adapters layer - External integrations (hosted booking database).
"""

from .factory import create_store
from .memory_store import InMemoryBookingStore
from .supabase_store import SupabaseBookingStore

__all__ = ["InMemoryBookingStore", "SupabaseBookingStore", "create_store"]
