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
from typing import List

import requests

from shared.config import Settings, get_settings
from shared.constants import REPLY_FALLBACK_TEXT

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429
DEFAULT_UPSTREAM_ERROR = "OpenAI API error"


class OpenAIRateLimitException(Exception):
    pass


class OpenAIResponseException(Exception):
    """Non-success response from the chat endpoint."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class OpenAIConfigException(Exception):
    pass


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return DEFAULT_UPSTREAM_ERROR
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return DEFAULT_UPSTREAM_ERROR


def extract_reply(payload: dict) -> str:
    """Returns the first choice's trimmed content, or the fallback text."""
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    if content is None:
        return REPLY_FALLBACK_TEXT
    return content.strip()


def call_chat_completion(
    messages: List[dict], settings: Settings | None = None
) -> str:
    """
    Sends a chat completion request and returns the reply text.

    Args:
        messages (List[dict]): `{role, content}` dicts, system message first.
        settings (Settings): Endpoint, model and sampling parameters.

    Raises:
        OpenAIConfigException: If no API key is configured.
        OpenAIRateLimitException: If the endpoint answered 429.
        OpenAIResponseException: For any other non-success status.
    """
    settings = settings or get_settings()
    if not settings.openai_api_key:
        raise OpenAIConfigException("Missing OPENAI_API_KEY")

    response = requests.post(
        settings.openai_chat_url,
        headers={"Authorization": f"Bearer {settings.openai_api_key}"},
        json={
            "model": settings.openai_chat_model,
            "messages": messages,
            "max_tokens": settings.chat_max_tokens,
            "temperature": settings.chat_temperature,
        },
        timeout=settings.request_timeout_sec,
    )

    if response.status_code == RATE_LIMIT_STATUS:
        raise OpenAIRateLimitException(_error_message(response))
    if not response.ok:
        message = _error_message(response)
        logger.error("OpenAI error %s: %s", response.status_code, message)
        raise OpenAIResponseException(response.status_code, message)

    return extract_reply(response.json())
