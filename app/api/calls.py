"""Call lifecycle API endpoints."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.core.dependencies import get_call_tracker
from app.services.call_session.manager import CallLifecycleTracker

router = APIRouter()
logger = logging.getLogger(__name__)


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON with the browser client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StartCallRequest(CamelModel):
    user_id: Optional[str] = None
    intent: Optional[str] = None


class ConversationRequest(CamelModel):
    conversation_id: Optional[str] = None


class FinalizeCallRequest(ConversationRequest):
    recording_meta: Optional[Dict[str, Any]] = None


class UploadAudioRequest(ConversationRequest):
    audio_url: Optional[str] = None


class TranscriptRequest(ConversationRequest):
    transcript_text: Optional[str] = None


class AnalyzeCallRequest(ConversationRequest):
    summary: Optional[Any] = None
    readiness: Optional[Any] = None


class FailCallRequest(ConversationRequest):
    reason: Optional[str] = None


class SuccessResponse(CamelModel):
    success: bool = True


class StartCallResponse(SuccessResponse):
    conversation_id: str


class EndCallResponse(SuccessResponse):
    duration_seconds: int


class HistoryItem(CamelModel):
    intent: str
    started_at: datetime
    summary: Optional[Any] = None
    readiness: Optional[Any] = None
    recording_url: Optional[str] = None


class HistoryResponse(CamelModel):
    history: List[HistoryItem] = []


def _client(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.post("/call/start", response_model=StartCallResponse)
async def start_call(
    request: Request,
    payload: StartCallRequest,
    tracker: CallLifecycleTracker = Depends(get_call_tracker),
):
    """Start a new call for a user."""
    logger.info(f"[CALL START] Request received - userId: {payload.user_id}, Client: {_client(request)}")
    session = await tracker.start_call(payload.user_id, payload.intent)
    return StartCallResponse(conversation_id=session.conversation_id)


@router.post("/call/end", response_model=EndCallResponse)
async def end_call(
    payload: ConversationRequest,
    tracker: CallLifecycleTracker = Depends(get_call_tracker),
):
    """End a call and report its duration."""
    duration = await tracker.end_call(payload.conversation_id)
    return EndCallResponse(duration_seconds=duration)


@router.post("/call/finalize", response_model=SuccessResponse)
async def finalize_call(
    payload: FinalizeCallRequest,
    tracker: CallLifecycleTracker = Depends(get_call_tracker),
):
    """Attach recording metadata to an ended call."""
    await tracker.finalize_call(payload.conversation_id, payload.recording_meta)
    return SuccessResponse()


@router.post("/call/upload-audio", response_model=SuccessResponse)
async def upload_audio(
    payload: UploadAudioRequest,
    tracker: CallLifecycleTracker = Depends(get_call_tracker),
):
    """Store the URL of the uploaded call audio."""
    await tracker.upload_audio(payload.conversation_id, payload.audio_url)
    return SuccessResponse()


@router.post("/call/transcript", response_model=SuccessResponse)
async def store_transcript(
    payload: TranscriptRequest,
    tracker: CallLifecycleTracker = Depends(get_call_tracker),
):
    """Store the call transcript."""
    await tracker.store_transcript(payload.conversation_id, payload.transcript_text)
    return SuccessResponse()


@router.post("/call/analyze", response_model=SuccessResponse)
async def analyze_call(
    payload: AnalyzeCallRequest,
    tracker: CallLifecycleTracker = Depends(get_call_tracker),
):
    """Store post-call analysis and complete the call."""
    await tracker.analyze_call(payload.conversation_id, payload.summary, payload.readiness)
    return SuccessResponse()


@router.post("/call/fail", response_model=SuccessResponse)
async def fail_call(
    payload: FailCallRequest,
    tracker: CallLifecycleTracker = Depends(get_call_tracker),
):
    """Mark a call as failed."""
    await tracker.fail_call(payload.conversation_id, payload.reason)
    return SuccessResponse()


@router.get("/history/{user_id}", response_model=HistoryResponse)
async def get_history(
    user_id: str,
    tracker: CallLifecycleTracker = Depends(get_call_tracker),
):
    """Get the user's completed calls."""
    entries = await tracker.get_history(user_id)
    logger.info(f"[HISTORY] Found {len(entries)} completed calls - userId: {user_id}")
    return HistoryResponse(
        history=[HistoryItem.model_validate(entry.model_dump()) for entry in entries]
    )
