"""Call session models."""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class CallStatus(str, Enum):
    """Lifecycle status of a call session."""

    CREATED = "created"
    ENDED = "ended"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (CallStatus.COMPLETED, CallStatus.FAILED)


# Forward order of the happy path; failed sits outside it.
STATUS_ORDER = {
    CallStatus.CREATED: 0,
    CallStatus.ENDED: 1,
    CallStatus.PROCESSING: 2,
    CallStatus.COMPLETED: 3,
}


class Recording(BaseModel):
    """Recording attached to a call at finalize time."""

    meta: Dict[str, Any] = Field(default_factory=dict)
    finalized_at: datetime
    audio_url: Optional[str] = None


class CallSession(BaseModel):
    """One voice conversation between a user and Aira."""

    conversation_id: str
    user_id: str
    intent: str
    status: CallStatus = CallStatus.CREATED
    started_at: datetime
    ended_at: Optional[datetime] = None
    recording: Optional[Recording] = None
    transcript: Optional[str] = None
    summary: Optional[Any] = None
    readiness: Optional[Any] = None
    failure_reason: Optional[str] = None


class HistoryEntry(BaseModel):
    """Projection of a completed call returned by history queries."""

    intent: str
    started_at: datetime
    summary: Optional[Any] = None
    readiness: Optional[Any] = None
    recording_url: Optional[str] = None

    @classmethod
    def from_session(cls, session: CallSession) -> "HistoryEntry":
        return cls(
            intent=session.intent,
            started_at=session.started_at,
            summary=session.summary,
            readiness=session.readiness,
            recording_url=session.recording.audio_url if session.recording else None,
        )
