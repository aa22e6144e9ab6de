"""Retention policy for call history."""
from datetime import datetime, timedelta
from enum import Enum

from app.services.call_session.models import CallSession

DEFAULT_RETENTION_DAYS = 730


class RetentionMode(str, Enum):
    """What happens to sessions older than the retention window."""

    NONE = "none"  # keep and show everything
    EXCLUDE = "exclude"  # keep stored, hide from history
    DELETE = "delete"  # remove from the store


class RetentionPolicy:
    """Decides whether a session has outlived the retention window."""

    def __init__(
        self,
        mode: RetentionMode = RetentionMode.NONE,
        days: int = DEFAULT_RETENTION_DAYS,
    ):
        if days <= 0:
            raise ValueError("retention days must be positive")
        self.mode = RetentionMode(mode)
        self.window = timedelta(days=days)

    @property
    def enforced(self) -> bool:
        return self.mode is not RetentionMode.NONE

    def is_expired(self, session: CallSession, now: datetime) -> bool:
        if not self.enforced:
            return False
        return now - session.started_at > self.window
