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

from enum import StrEnum


class ApplicationStatus(StrEnum):
    PENDING = "Pending"
    REVIEWED = "Reviewed"
    INTERVIEWING = "Interviewing"
    REJECTED = "Rejected"
    HIRED = "Hired"


class NotificationType(StrEnum):
    NEW_OPPORTUNITY = "new_opportunity"
    REVIEW_REPLY = "review_reply"
    APPLICATION_STATUS_UPDATE = "application_status_update"
    DEADLINE_INFO = "deadline_info"
    DEADLINE_REMINDER = "deadline_reminder"
    TEST = "test"


class PasswordResetErrorCode(StrEnum):
    NOT_FOUND = "not-found"
    EXPIRED = "expired"
    TOO_MANY_ATTEMPTS = "too-many-attempts"
    INVALID_CODE = "invalid-code"
    INVALID_ARGUMENT = "invalid-argument"
    DELIVERY_FAILED = "delivery-failed"
