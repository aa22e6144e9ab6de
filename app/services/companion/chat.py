"""Aira companion chat service."""
import logging
from typing import Optional
from openai import AsyncOpenAI
from app.core.config import settings
from app.services.companion.prompt import DEFAULT_USER_PROMPT, build_messages

logger = logging.getLogger(__name__)


class CompanionChatService:
    """Single-turn chat completions with the Aira persona."""

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        self.client = client or AsyncOpenAI(api_key=settings.openai_api_key)

    async def reply(self, user_input: Optional[str] = None) -> str:
        """
        Ask the model for Aira's reply to one user message.

        Args:
            user_input: What the user said; falls back to a default prompt

        Returns:
            The assistant message text
        """
        user_input = user_input or DEFAULT_USER_PROMPT
        logger.debug(f"[COMPANION] Requesting completion - input length: {len(user_input)}")
        completion = await self.client.chat.completions.create(
            model=settings.openai_chat_model,
            messages=build_messages(user_input),
        )
        return completion.choices[0].message.content
