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

# Cloud functions for the Spark app - push notifications + password reset.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.
# Function names below are the deployed function ids the app calls, so they
# stay camelCase.

# Standard library imports
from dataclasses import asdict

# Third-party library imports
from firebase_admin import initialize_app, firestore
from firebase_functions import https_fn, logger, options, scheduler_fn
from firebase_functions.firestore_fn import (
    on_document_created,
    on_document_updated,
    Event,
    Change,
    DocumentSnapshot,
)

# Local application imports
from notifications import dispatch, handlers, templates
from password_reset import otp
from shared.constants import MAX_EMAIL_LENGTH
from shared.firebase_constants import (
    APPLICATIONS_COLLECTION,
    BOOKMARKS_COLLECTION,
    OPPORTUNITIES_COLLECTION,
    REPLIES_COLLECTION,
    REVIEWS_COLLECTION,
)
from shared.json_utils import convert_keys
from shared.types import NotificationType, PasswordResetErrorCode

options.set_global_options(region="us-central1", max_instances=10)

initialize_app()

PASSWORD_RESET_ERROR_CODES = {
    PasswordResetErrorCode.INVALID_ARGUMENT: https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
    PasswordResetErrorCode.NOT_FOUND: https_fn.FunctionsErrorCode.NOT_FOUND,
    PasswordResetErrorCode.EXPIRED: https_fn.FunctionsErrorCode.DEADLINE_EXCEEDED,
    PasswordResetErrorCode.TOO_MANY_ATTEMPTS: https_fn.FunctionsErrorCode.RESOURCE_EXHAUSTED,
    PasswordResetErrorCode.INVALID_CODE: https_fn.FunctionsErrorCode.PERMISSION_DENIED,
    PasswordResetErrorCode.DELIVERY_FAILED: https_fn.FunctionsErrorCode.INTERNAL,
}


def _snapshot_data(snapshot: DocumentSnapshot | None) -> dict | None:
    if snapshot is None:
        return None
    return snapshot.to_dict()


@on_document_created(document=OPPORTUNITIES_COLLECTION + "/{opportunityId}")
def notifyFollowersOnNewOpportunity(
    event: Event[DocumentSnapshot | None],
) -> None:
    """Push + in-app notification to every follower of the posting company."""
    handlers.notify_followers_on_new_opportunity(
        firestore.client(),
        event.params["opportunityId"],
        _snapshot_data(event.data),
    )


@on_document_created(document=REVIEWS_COLLECTION + "/{reviewId}")
def notifyStudentOnReviewReply(event: Event[DocumentSnapshot | None]) -> None:
    """A review with a parentId is a reply; notify the parent's author."""
    handlers.notify_student_on_review_reply(
        firestore.client(), event.params["reviewId"], _snapshot_data(event.data)
    )


@on_document_created(
    document=REVIEWS_COLLECTION + "/{reviewId}/" + REPLIES_COLLECTION + "/{replyId}"
)
def notifyStudentOnCompanyReply(event: Event[DocumentSnapshot | None]) -> None:
    handlers.notify_student_on_company_reply(
        firestore.client(),
        event.params["reviewId"],
        event.params["replyId"],
        _snapshot_data(event.data),
    )


@on_document_updated(document=APPLICATIONS_COLLECTION + "/{applicationId}")
def notifyStudentOnApplicationUpdate(
    event: Event[Change[DocumentSnapshot] | None],
) -> None:
    if event.data is None:
        return
    handlers.notify_student_on_application_update(
        firestore.client(),
        event.params["applicationId"],
        _snapshot_data(event.data.before),
        _snapshot_data(event.data.after),
    )


@on_document_created(document=APPLICATIONS_COLLECTION + "/{applicationId}")
def sendDeadlineNotificationOnApply(
    event: Event[DocumentSnapshot | None],
) -> None:
    handlers.send_deadline_notification_on_apply(
        firestore.client(),
        event.params["applicationId"],
        _snapshot_data(event.data),
    )


@on_document_created(document=BOOKMARKS_COLLECTION + "/{bookmarkId}")
def sendDeadlineNotificationOnBookmark(
    event: Event[DocumentSnapshot | None],
) -> None:
    handlers.send_deadline_notification_on_bookmark(
        firestore.client(),
        event.params["bookmarkId"],
        _snapshot_data(event.data),
    )


@scheduler_fn.on_schedule(schedule="every 1 hours")
def checkDeadlineReminders(event: scheduler_fn.ScheduledEvent) -> None:
    """Hourly reminder for deadlines 24-25 hours away."""
    sent = handlers.check_deadline_reminders(firestore.client())
    logger.info(f"Deadline reminder scan dispatched {sent} reminders")


@https_fn.on_request()
def testNotification(req: https_fn.Request) -> https_fn.Response:
    """
    Sends a test notification to `?userId=` through the dispatch helper.
    """
    user_id = req.args.get("userId")
    if not user_id:
        return https_fn.Response("Missing userId parameter", status=400)

    try:
        success = dispatch.send_notification_to_student(
            firestore.client(),
            student_id=user_id,
            title=templates.TEST_NOTIFICATION_TITLE,
            body=templates.TEST_NOTIFICATION_BODY,
            data={"route": "/notifications"},
            notification_type=NotificationType.TEST,
        )
    except Exception as e:
        logger.error(f"Error sending test notification: {e}")
        return https_fn.Response(f"Error: {e}", status=500)

    if success:
        return https_fn.Response("Test notification sent successfully!")
    return https_fn.Response("Failed to send test notification", status=500)


def _raise_password_reset_error(error: otp.PasswordResetError):
    raise https_fn.HttpsError(PASSWORD_RESET_ERROR_CODES[error.code], str(error))


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def sendPasswordOtp(req: https_fn.CallableRequest) -> dict:
    """
    Emails a 6-digit password reset code to the account's address.

    Args:
        req (https_fn.CallableRequest): The request, containing the email.

    Returns:
        A dictionary representation of the PasswordOtpResult object.
    """
    email = req.data.get("email")
    if not email or not isinstance(email, str):
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "Must specify email parameter.",
        )
    if len(email) > MAX_EMAIL_LENGTH:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "Incorrect email length.",
        )

    try:
        result = otp.request_password_otp(firestore.client(), email)
    except otp.PasswordResetError as e:
        _raise_password_reset_error(e)

    return convert_keys(asdict(result), "snake_to_camel")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def verifyPasswordOtp(req: https_fn.CallableRequest) -> dict:
    """
    Checks a reset code and sets the new password.

    Args:
        req (https_fn.CallableRequest): The request, containing email, code
            and newPassword.

    Returns:
        A dictionary representation of the PasswordOtpResult object.
    """
    email = req.data.get("email")
    code = req.data.get("code")
    new_password = req.data.get("newPassword")

    if not email or not code or not new_password:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "Must specify email, code and newPassword parameters.",
        )
    if not isinstance(email, str) or not isinstance(new_password, str):
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "email and newPassword must be strings.",
        )

    try:
        result = otp.verify_password_otp(
            firestore.client(), email, str(code), new_password
        )
    except otp.PasswordResetError as e:
        _raise_password_reset_error(e)

    return convert_keys(asdict(result), "snake_to_camel")
