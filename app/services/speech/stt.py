"""Speech-to-text service."""
from typing import Optional
from openai import AsyncOpenAI
from app.core.config import settings


class SpeechToTextService:
    """Service for converting speech to text."""

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        self.client = client or AsyncOpenAI(api_key=settings.openai_api_key)

    async def transcribe_audio(
        self,
        audio_data: bytes,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
    ) -> str:
        """
        Transcribe audio to text using OpenAI Whisper.

        Args:
            audio_data: Raw audio bytes as uploaded by the browser
            filename: Original file name; Whisper infers the format from it
            content_type: MIME type of the upload

        Returns:
            Transcribed text
        """
        if not audio_data:
            raise ValueError("Audio file is empty")

        transcript = await self.client.audio.transcriptions.create(
            model="whisper-1",
            file=(filename, audio_data, content_type),
        )
        return transcript.text
