"""FastAPI dependencies."""
from functools import lru_cache

from app.core.config import settings
from app.services.call_session.manager import CallLifecycleTracker
from app.services.call_session.retention import RetentionMode, RetentionPolicy
from app.services.call_session.store import CallSessionStore, InMemoryCallSessionStore


def build_call_store() -> CallSessionStore:
    """Build the call session store selected by configuration."""
    if settings.call_store_backend == "database":
        from app.db.database import AsyncSessionLocal
        from app.services.persistence.calls import DatabaseCallSessionStore

        return DatabaseCallSessionStore(AsyncSessionLocal)
    if settings.call_store_backend != "memory":
        raise ValueError(f"Unknown call store backend: {settings.call_store_backend}")
    return InMemoryCallSessionStore()


@lru_cache
def get_call_tracker() -> CallLifecycleTracker:
    """Get the process-wide call lifecycle tracker."""
    return CallLifecycleTracker(
        store=build_call_store(),
        retention=RetentionPolicy(
            mode=RetentionMode(settings.retention_mode),
            days=settings.retention_days,
        ),
        default_intent=settings.default_intent,
    )
