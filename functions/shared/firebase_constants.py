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
"""Firestore collection and field names shared by the Spark functions."""

OPPORTUNITIES_COLLECTION = "opportunities"
COMPANIES_COLLECTION = "companies"
STUDENTS_COLLECTION = "student"
REVIEWS_COLLECTION = "reviews"
REPLIES_COLLECTION = "replies"
APPLICATIONS_COLLECTION = "applications"
BOOKMARKS_COLLECTION = "bookmarks"
NOTIFICATIONS_COLLECTION = "notifications"
PASSWORD_RESETS_COLLECTION = "password_resets"

FCM_TOKEN_FIELD = "fcmToken"
FOLLOWED_COMPANIES_FIELD = "followedCompanies"
APPLICATION_DEADLINE_FIELD = "applicationDeadline"
