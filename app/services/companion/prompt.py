"""Companion prompt templates."""

SYSTEM_PROMPT = (
    "You are Aira, a calm, wise AI companion. "
    "Be practical, supportive, and concise."
)

DEFAULT_USER_PROMPT = "I feel stuck in my career. What should I do?"


def build_messages(user_input: str) -> list[dict[str, str]]:
    """Build the chat messages for a single companion turn."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_input or DEFAULT_USER_PROMPT},
    ]
