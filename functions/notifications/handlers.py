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
Notification logic behind the Firestore and scheduled triggers.

Each handler receives the Firestore client and the triggering document data,
computes the notification copy and hands it to the dispatch helper. Handlers
log and return None on failure; there is no caller to report errors to.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from firebase_functions import logger
from google.cloud.firestore_v1 import DELETE_FIELD
from google.cloud.firestore_v1.base_query import FieldFilter

from notifications import deadlines, dispatch, templates
from shared.constants import FIRESTORE_BATCH_LIMIT, REPLY_SNIPPET_MAX_LENGTH
from shared.firebase_constants import (
    APPLICATION_DEADLINE_FIELD,
    APPLICATIONS_COLLECTION,
    BOOKMARKS_COLLECTION,
    COMPANIES_COLLECTION,
    FCM_TOKEN_FIELD,
    FOLLOWED_COMPANIES_FIELD,
    NOTIFICATIONS_COLLECTION,
    OPPORTUNITIES_COLLECTION,
    REVIEWS_COLLECTION,
    STUDENTS_COLLECTION,
)
from shared.types import ApplicationStatus, NotificationType

OPPORTUNITIES_ROUTE = "/opportunities"
MY_REVIEWS_ROUTE = "/my-reviews"


def _get_company_name(db, company_id: Optional[str], default: str) -> str:
    if not company_id:
        return default
    company_doc = db.collection(COMPANIES_COLLECTION).document(company_id).get()
    if not company_doc.exists:
        return default
    return (company_doc.to_dict() or {}).get("companyName") or default


def _get_doc_data(db, collection: str, doc_id: str) -> Optional[dict]:
    doc = db.collection(collection).document(doc_id).get()
    if not doc.exists:
        return None
    return doc.to_dict() or {}


def _commit_in_batches(db, writes) -> None:
    """Applies (method, ref, data) writes in batches under the Firestore limit."""
    for start in range(0, len(writes), FIRESTORE_BATCH_LIMIT):
        batch = db.batch()
        for method, ref, data in writes[start : start + FIRESTORE_BATCH_LIMIT]:
            getattr(batch, method)(ref, data)
        batch.commit()


def notify_followers_on_new_opportunity(
    db, opportunity_id: str, opportunity: Optional[dict]
) -> None:
    """
    Tells every follower of a company about its new opportunity.

    Push goes out as a single multicast; every follower gets an in-app
    record whether or not they have a usable token.
    """
    try:
        if not opportunity:
            logger.warn("No data found in new opportunity event")
            return None

        company_id = opportunity.get("companyId")
        role = opportunity.get("role") or "new opportunity"
        if not company_id:
            logger.error("Missing companyId in opportunity")
            return None

        company = _get_doc_data(db, COMPANIES_COLLECTION, company_id)
        if company is None:
            logger.error(f"Company not found: {company_id}")
            return None
        company_name = company.get("companyName") or "A company"

        followers = (
            db.collection(STUDENTS_COLLECTION)
            .where(
                filter=FieldFilter(
                    FOLLOWED_COMPANIES_FIELD, "array_contains", company_id
                )
            )
            .get()
        )
        if not followers:
            logger.info(f"No followers found for {company_name}")
            return None

        title = templates.NEW_OPPORTUNITY_TITLE.format(company_name=company_name)
        body = templates.NEW_OPPORTUNITY_BODY.format(role=role)
        data = {
            "route": OPPORTUNITIES_ROUTE,
            "opportunityId": opportunity_id,
            "companyId": company_id,
        }

        token_owners: Dict[str, str] = {}
        for follower in followers:
            token = (follower.to_dict() or {}).get(FCM_TOKEN_FIELD)
            if token:
                token_owners[token] = follower.id

        stale_token_writes = []
        if token_owners:
            invalid_tokens = dispatch.send_multicast(
                list(token_owners),
                title,
                body,
                {**data, "type": NotificationType.NEW_OPPORTUNITY.value},
            )
            if invalid_tokens:
                logger.info(f"Removing {len(invalid_tokens)} invalid tokens")
            for token in invalid_tokens:
                student_ref = db.collection(STUDENTS_COLLECTION).document(
                    token_owners[token]
                )
                stale_token_writes.append(
                    ("update", student_ref, {FCM_TOKEN_FIELD: DELETE_FIELD})
                )
        else:
            logger.info("No valid FCM tokens found.")

        record_writes = []
        for follower in followers:
            record = dispatch.build_notification_record(
                follower.id,
                title,
                body,
                data,
                NotificationType.NEW_OPPORTUNITY,
                {
                    "opportunityId": opportunity_id,
                    "companyId": company_id,
                    "companyName": company_name,
                },
            )
            notification_ref = db.collection(NOTIFICATIONS_COLLECTION).document()
            record_writes.append(("set", notification_ref, record))

        # Records are committed apart from token cleanup.
        _commit_in_batches(db, record_writes)
        logger.info(f"Notification records saved for {len(followers)} followers")

        try:
            _commit_in_batches(db, stale_token_writes)
        except Exception as e:
            logger.error(f"Error removing invalid tokens: {e}")
        return None
    except Exception as e:
        logger.error(f"Error in notify_followers_on_new_opportunity: {e}")
        return None


def _truncate_snippet(text: str) -> str:
    if len(text) > REPLY_SNIPPET_MAX_LENGTH:
        return text[:REPLY_SNIPPET_MAX_LENGTH] + "..."
    return text


def notify_student_on_review_reply(
    db, review_id: str, reply: Optional[dict]
) -> None:
    """Notifies a review's author when another student replies to it."""
    try:
        if not reply:
            return None

        parent_id = (reply.get("parentId") or "").strip()
        if not parent_id:
            logger.info("Not a reply, skipping notification")
            return None

        logger.info("New reply created", reviewId=review_id, parentId=parent_id)

        parent_review = _get_doc_data(db, REVIEWS_COLLECTION, parent_id)
        if parent_review is None:
            logger.error(f"Parent review not found: {parent_id}")
            return None

        original_student_id = parent_review.get("studentId")
        if not original_student_id:
            logger.error("Parent review missing studentId")
            return None

        if reply.get("studentId") == original_student_id:
            logger.info("Student replied to their own review, skipping")
            return None

        company_id = reply.get("companyId") or ""
        company_name = _get_company_name(db, company_id, "a company")

        dispatch.send_notification_to_student(
            db,
            student_id=original_student_id,
            title=templates.REVIEW_REPLY_TITLE,
            body=templates.REVIEW_REPLY_BODY.format(company_name=company_name),
            data={
                "route": MY_REVIEWS_ROUTE,
                "reviewId": parent_id,
                "replyId": review_id,
                "companyId": company_id,
            },
            notification_type=NotificationType.REVIEW_REPLY,
            additional_data={
                "companyName": company_name,
                "companyId": company_id,
                "reviewId": parent_id,
                "replyId": review_id,
                "replySnippet": _truncate_snippet(reply.get("reviewText") or ""),
            },
        )
        return None
    except Exception as e:
        logger.error(f"Error in notify_student_on_review_reply: {e}")
        return None


def notify_student_on_company_reply(
    db, review_id: str, reply_id: str, reply: Optional[dict]
) -> None:
    """Notifies a review's author when the company answers in `replies`."""
    try:
        if not reply:
            return None

        logger.info(
            "Company reply created",
            reviewId=review_id,
            replyId=reply_id,
            companyId=reply.get("companyId"),
        )

        parent_review = _get_doc_data(db, REVIEWS_COLLECTION, review_id)
        if parent_review is None:
            logger.error(f"Parent review not found: {review_id}")
            return None

        student_id = parent_review.get("studentId")
        if not student_id:
            logger.error("Parent review missing studentId")
            return None

        company_id = reply.get("companyId") or ""
        company_name = reply.get("companyName") or "A company"

        dispatch.send_notification_to_student(
            db,
            student_id=student_id,
            title=templates.COMPANY_REPLY_TITLE.format(company_name=company_name),
            body=templates.COMPANY_REPLY_BODY,
            data={
                "route": MY_REVIEWS_ROUTE,
                "reviewId": review_id,
                "replyId": reply_id,
                "companyId": company_id,
            },
            notification_type=NotificationType.REVIEW_REPLY,
            additional_data={
                "companyName": company_name,
                "companyId": company_id,
                "reviewId": review_id,
                "replyId": reply_id,
            },
        )
        return None
    except Exception as e:
        logger.error(f"Error in notify_student_on_company_reply: {e}")
        return None


def notify_student_on_application_update(
    db, application_id: str, before: Optional[dict], after: Optional[dict]
) -> None:
    """Notifies the applicant once per change of application status."""
    try:
        if not before or not after:
            return None

        old_status = before.get("status")
        new_status = after.get("status")
        if old_status == new_status:
            logger.info("No status change, skipping notification")
            return None

        logger.info(
            "Application status changed",
            applicationId=application_id,
            oldStatus=old_status,
            newStatus=new_status,
        )

        student_id = after.get("studentId")
        if not student_id:
            logger.error("Application missing studentId")
            return None

        opportunity_id = after.get("opportunityId") or ""
        opportunity_title = "an opportunity"
        company_name = "a company"
        if opportunity_id:
            opportunity = _get_doc_data(db, OPPORTUNITIES_COLLECTION, opportunity_id)
            if opportunity is not None:
                opportunity_title = opportunity.get("role") or opportunity_title
                company_name = _get_company_name(
                    db, opportunity.get("companyId"), company_name
                )

        title, body = templates.application_status_copy(
            new_status, opportunity_title, company_name
        )

        dispatch.send_notification_to_student(
            db,
            student_id=student_id,
            title=title,
            body=body,
            data={
                "route": OPPORTUNITIES_ROUTE,
                "applicationId": application_id,
                "opportunityId": opportunity_id,
                "status": str(new_status),
            },
            notification_type=NotificationType.APPLICATION_STATUS_UPDATE,
            additional_data={
                "companyName": company_name,
                "opportunityTitle": opportunity_title,
                "opportunityId": opportunity_id,
                "applicationId": application_id,
                "status": new_status,
                "oldStatus": old_status,
            },
        )
        return None
    except Exception as e:
        logger.error(f"Error in notify_student_on_application_update: {e}")
        return None


def _send_deadline_notice(
    db,
    student_id: Optional[str],
    opportunity_id: Optional[str],
    title: str,
    now: Optional[datetime],
) -> None:
    if not student_id or not opportunity_id:
        logger.error("Missing studentId or opportunityId")
        return None

    opportunity = _get_doc_data(db, OPPORTUNITIES_COLLECTION, opportunity_id)
    if opportunity is None:
        logger.error(f"Opportunity not found: {opportunity_id}")
        return None

    deadline = opportunity.get(APPLICATION_DEADLINE_FIELD)
    if not deadline:
        logger.info("Opportunity has no deadline")
        return None

    deadline_text = deadlines.describe_deadline(
        deadline, now or datetime.now(timezone.utc)
    )
    if deadline_text is None:
        logger.info(f"Deadline already passed for {opportunity_id}")
        return None

    company_id = opportunity.get("companyId") or ""
    company_name = _get_company_name(db, company_id, "Company")
    role = opportunity.get("role") or "Position"

    dispatch.send_notification_to_student(
        db,
        student_id=student_id,
        title=title,
        body=templates.DEADLINE_INFO_BODY.format(
            role=role, company_name=company_name, deadline_text=deadline_text
        ),
        data={
            "route": OPPORTUNITIES_ROUTE,
            "opportunityId": opportunity_id,
            "companyId": company_id,
        },
        notification_type=NotificationType.DEADLINE_INFO,
        additional_data={
            "opportunityId": opportunity_id,
            "opportunityRole": role,
            "companyName": company_name,
            "companyId": company_id,
            "deadline": deadline,
        },
    )
    return None


def send_deadline_notification_on_apply(
    db, application_id: str, application: Optional[dict], now=None
) -> None:
    try:
        if not application:
            return None
        logger.info(
            "New application created",
            applicationId=application_id,
            studentId=application.get("studentId"),
            opportunityId=application.get("opportunityId"),
        )
        return _send_deadline_notice(
            db,
            application.get("studentId"),
            application.get("opportunityId"),
            templates.APPLY_DEADLINE_TITLE,
            now,
        )
    except Exception as e:
        logger.error(f"Error in send_deadline_notification_on_apply: {e}")
        return None


def send_deadline_notification_on_bookmark(
    db, bookmark_id: str, bookmark: Optional[dict], now=None
) -> None:
    try:
        if not bookmark:
            return None
        logger.info(
            "New bookmark created",
            bookmarkId=bookmark_id,
            studentId=bookmark.get("studentId"),
            opportunityId=bookmark.get("opportunityId"),
        )
        return _send_deadline_notice(
            db,
            bookmark.get("studentId"),
            bookmark.get("opportunityId"),
            templates.BOOKMARK_DEADLINE_TITLE,
            now,
        )
    except Exception as e:
        logger.error(f"Error in send_deadline_notification_on_bookmark: {e}")
        return None


def _interested_student_ids(db, opportunity_id: str) -> List[str]:
    """Bookmarkers plus applicants whose application is still pending."""
    student_ids = []
    bookmarks = (
        db.collection(BOOKMARKS_COLLECTION)
        .where(filter=FieldFilter("opportunityId", "==", opportunity_id))
        .get()
    )
    pending_applications = (
        db.collection(APPLICATIONS_COLLECTION)
        .where(filter=FieldFilter("opportunityId", "==", opportunity_id))
        .where(filter=FieldFilter("status", "==", ApplicationStatus.PENDING.value))
        .get()
    )
    for doc in [*bookmarks, *pending_applications]:
        student_id = (doc.to_dict() or {}).get("studentId")
        if student_id and student_id not in student_ids:
            student_ids.append(student_id)
    return student_ids


def _has_deadline_reminder(db, student_id: str, opportunity_id: str) -> bool:
    existing = (
        db.collection(NOTIFICATIONS_COLLECTION)
        .where(filter=FieldFilter("userId", "==", student_id))
        .where(
            filter=FieldFilter(
                "type", "==", NotificationType.DEADLINE_REMINDER.value
            )
        )
        .where(filter=FieldFilter("data.opportunityId", "==", opportunity_id))
        .limit(1)
        .get()
    )
    return len(existing) > 0


def check_deadline_reminders(db, now: Optional[datetime] = None) -> int:
    """
    Reminds interested students about deadlines 24 to 25 hours away.

    A student is skipped when a `deadline_reminder` for the same opportunity
    already exists, so overlapping hourly runs do not repeat reminders.

    Returns:
        int: The number of reminders dispatched.
    """
    sent = 0
    try:
        logger.info("Checking for deadline reminders...")
        window_start, window_end = deadlines.reminder_window(
            now or datetime.now(timezone.utc)
        )

        opportunities = (
            db.collection(OPPORTUNITIES_COLLECTION)
            .where(filter=FieldFilter(APPLICATION_DEADLINE_FIELD, ">=", window_start))
            .where(filter=FieldFilter(APPLICATION_DEADLINE_FIELD, "<", window_end))
            .where(filter=FieldFilter("isActive", "==", True))
            .get()
        )
        if not opportunities:
            logger.info("No upcoming deadlines found")
            return sent

        logger.info(f"Found {len(opportunities)} opportunities with upcoming deadlines")

        for opportunity_doc in opportunities:
            opportunity = opportunity_doc.to_dict() or {}
            opportunity_id = opportunity_doc.id

            student_ids = _interested_student_ids(db, opportunity_id)
            if not student_ids:
                continue

            company_id = opportunity.get("companyId") or ""
            company_name = _get_company_name(db, company_id, "Company")
            role = opportunity.get("role") or "Position"

            for student_id in student_ids:
                if _has_deadline_reminder(db, student_id, opportunity_id):
                    continue

                delivered = dispatch.send_notification_to_student(
                    db,
                    student_id=student_id,
                    title=templates.DEADLINE_REMINDER_TITLE,
                    body=templates.DEADLINE_REMINDER_BODY.format(
                        role=role, company_name=company_name
                    ),
                    data={
                        "route": OPPORTUNITIES_ROUTE,
                        "opportunityId": opportunity_id,
                        "companyId": company_id,
                    },
                    notification_type=NotificationType.DEADLINE_REMINDER,
                    additional_data={
                        "opportunityId": opportunity_id,
                        "opportunityRole": role,
                        "companyName": company_name,
                        "companyId": company_id,
                    },
                )
                if delivered:
                    sent += 1

            logger.info(f"Sent reminders for {role} to {len(student_ids)} students")
        return sent
    except Exception as e:
        logger.error(f"Error in check_deadline_reminders: {e}")
        return sent
