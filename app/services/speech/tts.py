"""Text-to-speech service."""
from typing import Optional
from openai import AsyncOpenAI
from app.core.config import settings

VOICES = ("alloy", "echo", "fable", "onyx", "nova", "shimmer")


class TextToSpeechService:
    """Service for converting text to speech."""

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        self.client = client or AsyncOpenAI(api_key=settings.openai_api_key)

    async def synthesize_speech(
        self,
        text: str,
        voice: str = "alloy",
        model: str = "tts-1",
    ) -> bytes:
        """
        Synthesize speech from text using OpenAI TTS.

        Args:
            text: Text to convert to speech
            voice: Voice to use (alloy, echo, fable, onyx, nova, shimmer)
            model: Model to use (tts-1 or tts-1-hd)

        Returns:
            Audio bytes (MP3 format)
        """
        if not text or not text.strip():
            raise ValueError("text is required")
        if voice not in VOICES:
            raise ValueError(f"Unsupported voice: {voice}")

        response = await self.client.audio.speech.create(
            model=model,
            voice=voice,
            input=text,
        )
        return response.content
