"""Call lifecycle tracker."""
import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from app.services.call_session.errors import NotFoundError, StateError, ValidationError
from app.services.call_session.models import (
    CallSession,
    CallStatus,
    HistoryEntry,
    Recording,
    STATUS_ORDER,
)
from app.services.call_session.retention import RetentionMode, RetentionPolicy
from app.services.call_session.store import CallSessionStore

logger = logging.getLogger(__name__)

DEFAULT_INTENT = "general"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return value


def _require_present(value: Any, field: str) -> Any:
    if value is None:
        raise ValidationError(f"{field} is required")
    return value


def _advance(session: CallSession, target: CallStatus) -> None:
    """Move a session forward along the status chain, never backwards."""
    current = session.status
    if current is CallStatus.FAILED or STATUS_ORDER[target] < STATUS_ORDER[current]:
        raise StateError(
            f"Call {session.conversation_id} cannot move from "
            f"{current.value} to {target.value}"
        )
    session.status = target


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = asyncio.Lock()
        self.users = 0


class CallLifecycleTracker:
    """Owns call session state and enforces the order of lifecycle transitions.

    Every mutating operation loads the session, checks its precondition and
    writes the updated copy back under a per-conversation lock. Writes are
    conditional on the status that was loaded, so a store shared between
    processes rejects the slower of two racing transitions. A rejected
    operation never changes stored state.
    """

    def __init__(
        self,
        store: CallSessionStore,
        retention: Optional[RetentionPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
        default_intent: str = DEFAULT_INTENT,
    ):
        self.store = store
        self.retention = retention or RetentionPolicy()
        self.clock = clock
        self.default_intent = default_intent
        self._locks: Dict[str, _LockEntry] = {}

    @asynccontextmanager
    async def _locked(self, conversation_id: str) -> AsyncIterator[None]:
        entry = self._locks.get(conversation_id)
        if entry is None:
            entry = self._locks[conversation_id] = _LockEntry()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._locks.pop(conversation_id, None)

    async def _load(self, conversation_id: str) -> CallSession:
        session = await self.store.get(conversation_id)
        if session is None:
            raise NotFoundError(f"Call {conversation_id} not found")
        return session

    @staticmethod
    def _reject_if_failed(session: CallSession) -> None:
        if session.status is CallStatus.FAILED:
            raise StateError(f"Call {session.conversation_id} has failed")

    async def start_call(
        self, user_id: Optional[str], intent: Optional[str] = None
    ) -> CallSession:
        """Create a new session in the ``created`` state."""
        _require(user_id, "userId")

        conversation_id = str(uuid.uuid4())
        while await self.store.get(conversation_id) is not None:
            conversation_id = str(uuid.uuid4())

        session = CallSession(
            conversation_id=conversation_id,
            user_id=user_id,
            intent=intent or self.default_intent,
            started_at=self.clock(),
        )
        await self.store.put(session)
        logger.info(
            f"[CALL START] Created call - conversationId: {conversation_id}, "
            f"userId: {user_id}, intent: {session.intent}"
        )
        return session

    async def end_call(self, conversation_id: Optional[str]) -> int:
        """End a call and return its duration in whole seconds."""
        _require(conversation_id, "conversationId")
        async with self._locked(conversation_id):
            session = await self._load(conversation_id)
            loaded = session.status
            if loaded is not CallStatus.CREATED:
                raise StateError(
                    f"Call {conversation_id} cannot be ended from status "
                    f"{loaded.value}"
                )

            session.ended_at = self.clock()
            _advance(session, CallStatus.ENDED)
            await self.store.put(session, expected_status=loaded)

        duration = int((session.ended_at - session.started_at).total_seconds())
        logger.info(
            f"[CALL END] Call ended - conversationId: {conversation_id}, "
            f"duration: {duration}s"
        )
        return duration

    async def finalize_call(
        self,
        conversation_id: Optional[str],
        recording_meta: Optional[Dict[str, Any]] = None,
    ) -> CallSession:
        """Attach recording metadata to an ended call."""
        _require(conversation_id, "conversationId")
        async with self._locked(conversation_id):
            session = await self.store.get(conversation_id)
            if session is None or session.status is not CallStatus.ENDED:
                raise StateError("Call must be ended before it can be finalized")

            session.recording = Recording(
                meta=recording_meta or {},
                finalized_at=self.clock(),
            )
            _advance(session, CallStatus.PROCESSING)
            await self.store.put(session, expected_status=CallStatus.ENDED)

        logger.info(f"[CALL FINALIZE] Recording attached - conversationId: {conversation_id}")
        return session

    async def upload_audio(
        self, conversation_id: Optional[str], audio_url: Optional[str]
    ) -> CallSession:
        """Record where the call audio was uploaded."""
        _require(conversation_id, "conversationId")
        _require(audio_url, "audioUrl")
        async with self._locked(conversation_id):
            session = await self._load(conversation_id)
            if session.recording is None:
                raise NotFoundError(f"Call {conversation_id} has no recording")
            self._reject_if_failed(session)

            session.recording.audio_url = audio_url
            await self.store.put(session, expected_status=session.status)

        logger.info(f"[CALL AUDIO] Audio URL stored - conversationId: {conversation_id}")
        return session

    async def store_transcript(
        self, conversation_id: Optional[str], transcript_text: Optional[str]
    ) -> CallSession:
        """Store the call transcript once the recording exists."""
        _require(conversation_id, "conversationId")
        _require(transcript_text, "transcriptText")
        async with self._locked(conversation_id):
            session = await self._load(conversation_id)
            self._reject_if_failed(session)
            if session.recording is None:
                raise StateError("Call must be finalized before storing a transcript")

            session.transcript = transcript_text
            await self.store.put(session, expected_status=session.status)

        logger.info(
            f"[CALL TRANSCRIPT] Transcript stored - conversationId: {conversation_id}, "
            f"length: {len(transcript_text)}"
        )
        return session

    async def analyze_call(
        self, conversation_id: Optional[str], summary: Any, readiness: Any
    ) -> CallSession:
        """Store analysis results and complete the call."""
        _require(conversation_id, "conversationId")
        _require_present(summary, "summary")
        _require_present(readiness, "readiness")
        async with self._locked(conversation_id):
            session = await self.store.get(conversation_id)
            if session is None or not session.transcript:
                raise StateError("Transcript is required before analysis")
            loaded = session.status

            session.summary = summary
            session.readiness = readiness
            _advance(session, CallStatus.COMPLETED)
            await self.store.put(session, expected_status=loaded)

        logger.info(f"[CALL ANALYZE] Call completed - conversationId: {conversation_id}")
        return session

    async def fail_call(
        self, conversation_id: Optional[str], reason: Optional[str] = None
    ) -> CallSession:
        """Mark a non-terminal call as failed."""
        _require(conversation_id, "conversationId")
        async with self._locked(conversation_id):
            session = await self._load(conversation_id)
            loaded = session.status
            if loaded.is_terminal:
                raise StateError(
                    f"Call {conversation_id} is already {loaded.value}"
                )

            session.status = CallStatus.FAILED
            session.failure_reason = reason
            await self.store.put(session, expected_status=loaded)

        logger.warning(
            f"[CALL FAIL] Call marked failed - conversationId: {conversation_id}, "
            f"reason: {reason}"
        )
        return session

    async def get_call(self, conversation_id: Optional[str]) -> CallSession:
        _require(conversation_id, "conversationId")
        return await self._load(conversation_id)

    async def get_history(self, user_id: str) -> List[HistoryEntry]:
        """Return the user's completed calls in insertion order."""
        now = self.clock()
        history = []
        for session in await self.store.list(user_id=user_id):
            if session.status is not CallStatus.COMPLETED:
                continue
            if self.retention.is_expired(session, now):
                if self.retention.mode is RetentionMode.DELETE:
                    await self._delete(session.conversation_id)
                continue
            history.append(HistoryEntry.from_session(session))
        return history

    async def purge_expired(self) -> int:
        """Delete sessions past the retention window when the policy says so."""
        if self.retention.mode is not RetentionMode.DELETE:
            return 0

        now = self.clock()
        purged = 0
        for session in await self.store.list():
            if self.retention.is_expired(session, now):
                await self._delete(session.conversation_id)
                purged += 1
        if purged:
            logger.info(f"[RETENTION] Purged {purged} expired call sessions")
        return purged

    async def _delete(self, conversation_id: str) -> None:
        async with self._locked(conversation_id):
            await self.store.delete(conversation_id)
