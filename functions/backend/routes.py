"""
HTTP routes for the chat relay.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend import chat
from backend.schemas import (
    ChatAudioResponse,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
)
from models import openai_chat
from shared.config import Settings, get_settings
from shared.constants import SPEECH_MIME_TYPE

logger = logging.getLogger(__name__)

router = APIRouter()

MESSAGES_REQUIRED = "Messages array is required."
OVERLOADED = "AI service is currently overloaded. Please try again shortly."
INTERNAL_ERROR = "Internal server error"


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post(
    "/chat",
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def post_chat(payload: ChatRequest, settings: Settings = Depends(get_settings)):
    """
    Relays the conversation to the LLM and returns its reply.

    When `includeAudio` is set, the reply is also synthesized to speech; a
    synthesis failure returns `audio: null` instead of failing the request.
    """
    if not payload.messages:
        raise HTTPException(status_code=400, detail=MESSAGES_REQUIRED)

    api_messages = chat.build_chat_messages(
        payload.messages, payload.resume_id, payload.training_type
    )

    try:
        reply = openai_chat.call_chat_completion(api_messages, settings)
    except openai_chat.OpenAIRateLimitException:
        raise HTTPException(status_code=429, detail=OVERLOADED)
    except openai_chat.OpenAIResponseException as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("Chat relay failed")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)

    if not payload.include_audio:
        return ChatResponse(reply=reply).model_dump()

    audio = chat.synthesize_reply_audio(reply, payload.voice, settings)
    return ChatAudioResponse(
        reply=reply, audio=audio, mime_type=SPEECH_MIME_TYPE
    ).model_dump(by_alias=True)
