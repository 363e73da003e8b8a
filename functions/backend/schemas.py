"""
Pydantic schemas for the chat relay API.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    role: str
    text: Optional[str] = None
    content: Optional[str] = None


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: Optional[list[ChatMessage]] = None
    resume_id: Optional[str] = Field(default=None, alias="resumeId")
    training_type: Optional[str] = Field(default=None, alias="trainingType")
    include_audio: bool = Field(default=False, alias="includeAudio")
    voice: Optional[str] = None


class ChatResponse(BaseModel):
    reply: str


class ChatAudioResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    audio: Optional[str] = None
    mime_type: str = Field(alias="mimeType")


class ErrorResponse(BaseModel):
    error: str
