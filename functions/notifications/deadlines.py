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
"""Deadline arithmetic for application and bookmark notices."""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from shared.constants import (
    DEADLINE_REMINDER_WINDOW_END_HOURS,
    DEADLINE_REMINDER_WINDOW_START_HOURS,
)

SECONDS_PER_DAY = 24 * 60 * 60


def _as_utc(value: datetime) -> datetime:
    # Firestore returns aware datetimes; naive values are treated as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_until(deadline: datetime, now: datetime) -> int:
    """Whole days from now until the deadline, rounded up."""
    delta = _as_utc(deadline) - _as_utc(now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def describe_deadline(deadline: datetime, now: datetime) -> Optional[str]:
    """
    Renders how far away a deadline is.

    Returns "today", "tomorrow" or "in N days", or None once the deadline has
    passed.
    """
    if _as_utc(deadline) < _as_utc(now):
        return None
    days = days_until(deadline, now)
    if days == 0:
        return "today"
    if days == 1:
        return "tomorrow"
    return f"in {days} days"


def reminder_window(now: datetime) -> Tuple[datetime, datetime]:
    """The [start, end) range of deadlines the hourly scan reminds about."""
    now = _as_utc(now)
    return (
        now + timedelta(hours=DEADLINE_REMINDER_WINDOW_START_HOURS),
        now + timedelta(hours=DEADLINE_REMINDER_WINDOW_END_HOURS),
    )
