"""Call session persistence backed by SQLAlchemy."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy import select, delete, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.models import CallSessionRecord
from app.services.call_session.models import CallSession, CallStatus, Recording
from app.services.call_session.store import CallSessionStore, concurrent_update_error


def _ensure_tz(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo on the way back; treat naive values as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class DatabaseCallSessionStore(CallSessionStore):
    """Store call sessions in the ``call_sessions`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, conversation_id: str) -> Optional[CallSession]:
        async with self.session_factory() as db:
            record = await self._get_record(db, conversation_id)
            return self._to_session(record) if record else None

    async def put(
        self, session: CallSession, expected_status: Optional[CallStatus] = None
    ) -> None:
        values = self._values(session)
        async with self.session_factory() as db:
            if expected_status is not None:
                # Compare-and-set: another worker may have moved the call on
                result = await db.execute(
                    update(CallSessionRecord)
                    .where(
                        CallSessionRecord.conversation_id == session.conversation_id,
                        CallSessionRecord.status == expected_status.value,
                    )
                    .values(**values)
                )
                if result.rowcount == 0:
                    await db.rollback()
                    raise concurrent_update_error(session.conversation_id, expected_status)
                await db.commit()
                return

            record = await self._get_record(db, session.conversation_id)
            if record is None:
                record = CallSessionRecord(conversation_id=session.conversation_id)
                db.add(record)
            for column, value in values.items():
                setattr(record, column, value)
            await db.commit()

    async def list(self, user_id: Optional[str] = None) -> List[CallSession]:
        query = select(CallSessionRecord).order_by(CallSessionRecord.id)
        if user_id is not None:
            query = query.where(CallSessionRecord.user_id == user_id)
        async with self.session_factory() as db:
            result = await db.execute(query)
            return [self._to_session(record) for record in result.scalars().all()]

    async def delete(self, conversation_id: str) -> bool:
        async with self.session_factory() as db:
            result = await db.execute(
                delete(CallSessionRecord).where(
                    CallSessionRecord.conversation_id == conversation_id
                )
            )
            await db.commit()
            return result.rowcount > 0

    @staticmethod
    async def _get_record(
        db: AsyncSession, conversation_id: str
    ) -> Optional[CallSessionRecord]:
        result = await db.execute(
            select(CallSessionRecord).where(
                CallSessionRecord.conversation_id == conversation_id
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _values(session: CallSession) -> Dict[str, Any]:
        return {
            "user_id": session.user_id,
            "intent": session.intent,
            "status": session.status.value,
            "started_at": session.started_at,
            "ended_at": session.ended_at,
            "recording": (
                session.recording.model_dump(mode="json") if session.recording else None
            ),
            "transcript": session.transcript,
            "summary": session.summary,
            "readiness": session.readiness,
            "failure_reason": session.failure_reason,
        }

    @staticmethod
    def _to_session(record: CallSessionRecord) -> CallSession:
        recording = None
        if record.recording is not None:
            recording = Recording.model_validate(record.recording)
            recording.finalized_at = _ensure_tz(recording.finalized_at)
        return CallSession(
            conversation_id=record.conversation_id,
            user_id=record.user_id,
            intent=record.intent,
            status=CallStatus(record.status),
            started_at=_ensure_tz(record.started_at),
            ended_at=_ensure_tz(record.ended_at),
            recording=recording,
            transcript=record.transcript,
            summary=record.summary,
            readiness=record.readiness,
            failure_reason=record.failure_reason,
        )
