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

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict


@dataclass
class NotificationRecord:
    """In-app notification stored in the `notifications` collection."""

    user_id: str
    type: str
    title: str
    body: str
    data: Dict[str, str] = field(default_factory=dict)
    read: bool = False
    created_at: (
        Any  # Firestore timestamp (created with firestore_v1.SERVER_TIMESTAMP)
    ) = None


@dataclass
class PasswordResetTicket:
    """One-time password reset code, keyed by the account uid."""

    email: str
    hash: str
    salt: str
    expires_at: datetime
    attempts: int = 0


@dataclass
class PasswordOtpResult:
    ok: bool
