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
"""Notification copy, kept apart from the trigger code."""

from typing import Tuple

from shared.types import ApplicationStatus

NEW_OPPORTUNITY_TITLE = "{company_name} posted a new opportunity!"
NEW_OPPORTUNITY_BODY = "Check out the {role} position."

REVIEW_REPLY_TITLE = "New Reply to Your Review"
REVIEW_REPLY_BODY = "Someone replied to your review about {company_name}"

COMPANY_REPLY_TITLE = "{company_name} replied to your review"
COMPANY_REPLY_BODY = "Check out the company's response"

APPLY_DEADLINE_TITLE = "📅 Application Deadline"
BOOKMARK_DEADLINE_TITLE = "📌 Bookmark Reminder"
DEADLINE_INFO_BODY = "The deadline for {role} at {company_name} is {deadline_text}"

DEADLINE_REMINDER_TITLE = "⏰ Deadline Reminder"
DEADLINE_REMINDER_BODY = "Reminder: {role} at {company_name} deadline is tomorrow!"

TEST_NOTIFICATION_TITLE = "Test Notification"
TEST_NOTIFICATION_BODY = "This is a test notification from Spark!"

GENERIC_STATUS_TITLE = "Application Status Updated"
GENERIC_STATUS_BODY = "Your application status has been updated to: {status}"

APPLICATION_STATUS_COPY = {
    ApplicationStatus.REVIEWED: (
        "Application Reviewed",
        "Your application for {opportunity_title} at {company_name} has been reviewed",
    ),
    ApplicationStatus.REJECTED: (
        "Application Update",
        "Thank you for your interest in {opportunity_title} at {company_name}",
    ),
    ApplicationStatus.HIRED: (
        "Congratulations!",
        "You've been selected for {opportunity_title} at {company_name}!",
    ),
    ApplicationStatus.INTERVIEWING: (
        "Interview Invitation",
        "{company_name} has invited you for an interview for {opportunity_title}",
    ),
}


def application_status_copy(
    status: str, opportunity_title: str, company_name: str
) -> Tuple[str, str]:
    """Returns the (title, body) pair for a new application status."""
    copy = APPLICATION_STATUS_COPY.get(status)
    if copy is None:
        return GENERIC_STATUS_TITLE, GENERIC_STATUS_BODY.format(status=status)
    title, body = copy
    return title, body.format(
        opportunity_title=opportunity_title, company_name=company_name
    )
