"""
Message assembly and speech handling for the chat relay.
"""

from __future__ import annotations

import base64
import logging
from typing import Iterable, Optional

from backend.schemas import ChatMessage
from models import openai_speech, prompts
from shared.config import Settings

logger = logging.getLogger(__name__)

ROLE_ALIASES = {"ai": "assistant"}


def to_api_message(message: ChatMessage) -> dict:
    return {
        "role": ROLE_ALIASES.get(message.role, message.role),
        "content": message.text or message.content or "",
    }


def build_chat_messages(
    messages: Iterable[ChatMessage],
    resume_id: Optional[str] = None,
    training_type: Optional[str] = None,
) -> list[dict]:
    """System prompt first, then the caller's history in order."""
    system_message = {
        "role": "system",
        "content": prompts.make_system_prompt(resume_id, training_type),
    }
    return [system_message, *(to_api_message(message) for message in messages)]


def synthesize_reply_audio(
    reply: str, voice: Optional[str], settings: Settings
) -> Optional[str]:
    """
    Returns base64 encoded audio for the reply, or None if synthesis fails.
    """
    try:
        audio_bytes = openai_speech.synthesize_speech(reply, voice, settings)
    except Exception:
        logger.exception("Speech synthesis failed")
        return None
    return base64.b64encode(audio_bytes).decode("ascii")
