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

# Notifications
REPLY_SNIPPET_MAX_LENGTH = 100
FIRESTORE_BATCH_LIMIT = 500
FCM_MULTICAST_LIMIT = 500
DEADLINE_REMINDER_WINDOW_START_HOURS = 24
DEADLINE_REMINDER_WINDOW_END_HOURS = 25

# Password reset
OTP_LENGTH = 6
OTP_TTL_MINUTES = 10
OTP_MAX_ATTEMPTS = 5
MIN_PASSWORD_LENGTH = 6
MAX_EMAIL_LENGTH = 320

# Chat relay
REPLY_FALLBACK_TEXT = "No response from AI."
SPEECH_MIME_TYPE = "audio/mpeg"
