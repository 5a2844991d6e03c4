"""
Builds the configured booking store.
"""

from ..config import AppConfig
from .memory_store import DEFAULT_SEED_FILE, InMemoryBookingStore
from .supabase_store import SupabaseBookingStore


def create_store(config: AppConfig):
    """Return the store selected by ``config.storage.backend``."""
    storage = config.storage

    if storage.backend == "memory":
        return InMemoryBookingStore.from_json(
            storage.seed_file or DEFAULT_SEED_FILE,
            timezone=config.timezone,
        )

    return SupabaseBookingStore(
        url=storage.url,
        service_role_key=storage.service_role_key,
        timeout=storage.timeout_seconds,
    )
