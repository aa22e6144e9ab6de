"""Call session storage interface and in-memory implementation."""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from app.services.call_session.errors import StateError
from app.services.call_session.models import CallSession, CallStatus


class CallSessionStore(ABC):
    """Abstract base class for call session storage."""

    @abstractmethod
    async def get(self, conversation_id: str) -> Optional[CallSession]:
        """Get a session by conversation ID."""
        pass

    @abstractmethod
    async def put(
        self, session: CallSession, expected_status: Optional[CallStatus] = None
    ) -> None:
        """Insert or replace a session.

        When ``expected_status`` is given the write only happens if the stored
        session still has that status; otherwise ``StateError`` is raised and
        nothing is written.
        """
        pass

    @abstractmethod
    async def list(self, user_id: Optional[str] = None) -> List[CallSession]:
        """List sessions in insertion order, optionally for one user."""
        pass

    @abstractmethod
    async def delete(self, conversation_id: str) -> bool:
        """Delete a session. Returns True if it existed."""
        pass


def concurrent_update_error(conversation_id: str, expected_status: CallStatus) -> StateError:
    return StateError(
        f"Call {conversation_id} is no longer {expected_status.value}; "
        f"it was changed by another request"
    )


# Module-level session storage (persists across requests)
_sessions: Dict[str, CallSession] = {}


class InMemoryCallSessionStore(CallSessionStore):
    """Process-wide in-memory session store."""

    def __init__(self, sessions: Optional[Dict[str, CallSession]] = None):
        self._sessions = _sessions if sessions is None else sessions

    async def get(self, conversation_id: str) -> Optional[CallSession]:
        session = self._sessions.get(conversation_id)
        # Hand out copies so callers cannot mutate stored state in place
        return session.model_copy(deep=True) if session else None

    async def put(
        self, session: CallSession, expected_status: Optional[CallStatus] = None
    ) -> None:
        if expected_status is not None:
            current = self._sessions.get(session.conversation_id)
            if current is None or current.status is not expected_status:
                raise concurrent_update_error(session.conversation_id, expected_status)
        self._sessions[session.conversation_id] = session.model_copy(deep=True)

    async def list(self, user_id: Optional[str] = None) -> List[CallSession]:
        return [
            session.model_copy(deep=True)
            for session in self._sessions.values()
            if user_id is None or session.user_id == user_id
        ]

    async def delete(self, conversation_id: str) -> bool:
        return self._sessions.pop(conversation_id, None) is not None
