# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""
Environment-backed settings shared by the chat relay and the Cloud Functions.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Values are read from the environment (or a local .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # LLM chat completion (OpenAI-compatible)
    openai_api_key: Optional[str] = Field(default=None)
    openai_chat_url: str = Field(
        default="https://api.openai.com/v1/chat/completions"
    )
    openai_chat_model: str = Field(default="gpt-4o-mini")
    chat_max_tokens: int = Field(default=800)
    chat_temperature: float = Field(default=0.7)

    # Text-to-speech
    openai_speech_url: str = Field(default="https://api.openai.com/v1/audio/speech")
    openai_speech_model: str = Field(default="gpt-4o-mini-tts")
    openai_speech_voice: str = Field(default="alloy")

    request_timeout_sec: float = Field(default=60)

    # HTTP server
    port: int = Field(default=3000)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # SMTP relay for password reset codes
    smtp_host: Optional[str] = Field(default=None)
    smtp_port: int = Field(default=587)
    smtp_user: Optional[str] = Field(default=None)
    smtp_password: Optional[str] = Field(default=None)
    smtp_sender: Optional[str] = Field(default=None)

    # Push notifications
    fcm_channel_id: str = Field(default="spark_channel")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
