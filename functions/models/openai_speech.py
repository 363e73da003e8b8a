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

import logging

import requests

from shared.config import Settings, get_settings

logger = logging.getLogger(__name__)

SPEECH_RESPONSE_FORMAT = "mp3"


def synthesize_speech(
    text: str, voice: str | None = None, settings: Settings | None = None
) -> bytes:
    """Returns mp3 audio for the text; raises on any failure."""
    settings = settings or get_settings()
    if not settings.openai_api_key:
        raise ValueError("Missing OPENAI_API_KEY")

    response = requests.post(
        settings.openai_speech_url,
        headers={"Authorization": f"Bearer {settings.openai_api_key}"},
        json={
            "model": settings.openai_speech_model,
            "voice": voice or settings.openai_speech_voice,
            "input": text,
            "response_format": SPEECH_RESPONSE_FORMAT,
        },
        timeout=settings.request_timeout_sec,
    )
    response.raise_for_status()
    if not response.content:
        raise ValueError("Speech endpoint returned no audio")
    return response.content
