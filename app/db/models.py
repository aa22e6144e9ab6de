"""Database models."""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CallSessionRecord(Base):
    """Persisted call session."""

    __tablename__ = "call_sessions"

    # Autoincrement id doubles as insertion order for history queries
    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(String, unique=True, index=True, nullable=False)
    user_id = Column(String, index=True, nullable=False)
    intent = Column(String, nullable=False)
    status = Column(String, default="created", nullable=False)  # created, ended, processing, completed, failed
    started_at = Column(DateTime(timezone=True), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    recording = Column(JSON, nullable=True)  # {meta, finalized_at, audio_url}
    transcript = Column(Text, nullable=True)
    summary = Column(JSON, nullable=True)
    readiness = Column(JSON, nullable=True)
    failure_reason = Column(Text, nullable=True)
