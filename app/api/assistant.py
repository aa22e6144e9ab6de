"""OpenAI-backed assistant endpoints: chat, speech-to-text, text-to-speech."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from app.services.companion.chat import CompanionChatService
from app.services.speech.stt import SpeechToTextService
from app.services.speech.tts import TextToSpeechService

router = APIRouter()
logger = logging.getLogger(__name__)


class SpeechRequest(BaseModel):
    """Text-to-speech request model."""
    text: str
    voice: str = "alloy"


def get_chat_service() -> CompanionChatService:
    return CompanionChatService()


def get_stt_service() -> SpeechToTextService:
    return SpeechToTextService()


def get_tts_service() -> TextToSpeechService:
    return TextToSpeechService()


def _failure(tag: str, error: Exception) -> JSONResponse:
    logger.error(
        f"[{tag}] Upstream request failed - Error: {type(error).__name__}: {str(error)}",
        exc_info=True,
    )
    return JSONResponse(status_code=500, content={"success": False, "error": str(error)})


@router.get("/aira-test")
async def aira_test(
    q: Optional[str] = Query(None),
    chat_service: CompanionChatService = Depends(get_chat_service),
):
    """Ask Aira a single question."""
    try:
        reply = await chat_service.reply(q)
    except Exception as e:
        return _failure("AIRA TEST", e)
    return {"success": True, "response": reply}


@router.post("/speech-to-text")
async def speech_to_text(
    file: UploadFile = File(...),
    stt_service: SpeechToTextService = Depends(get_stt_service),
):
    """Transcribe an uploaded audio clip."""
    audio = await file.read()
    logger.info(
        f"[STT] Transcription requested - filename: {file.filename}, "
        f"size: {len(audio)} bytes"
    )
    try:
        text = await stt_service.transcribe_audio(
            audio,
            filename=file.filename or "audio.webm",
            content_type=file.content_type or "audio/webm",
        )
    except ValueError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": str(e)})
    except Exception as e:
        return _failure("STT", e)
    return {"success": True, "text": text}


@router.post("/text-to-speech")
async def text_to_speech(
    payload: SpeechRequest,
    tts_service: TextToSpeechService = Depends(get_tts_service),
):
    """Synthesize speech and return MP3 audio."""
    try:
        audio = await tts_service.synthesize_speech(payload.text, voice=payload.voice)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": str(e)})
    except Exception as e:
        return _failure("TTS", e)
    return Response(content=audio, media_type="audio/mpeg")


@router.post("/audio-chunk")
async def audio_chunk(request: Request):
    """Acknowledge an audio stream ping from the browser."""
    logger.debug(
        f"[AUDIO CHUNK] Stream ping received - Client: {request.client.host if request.client else 'unknown'}"
    )
    return {"success": True}
