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
"""Sends push notifications over FCM and records the in-app copy."""

from dataclasses import asdict
from typing import Dict, List, Optional

from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging
from firebase_functions import logger
from google.cloud.firestore_v1 import DELETE_FIELD, SERVER_TIMESTAMP

from shared.api import NotificationRecord
from shared.config import get_settings
from shared.constants import FCM_MULTICAST_LIMIT
from shared.firebase_constants import (
    FCM_TOKEN_FIELD,
    NOTIFICATIONS_COLLECTION,
    STUDENTS_COLLECTION,
)
from shared.json_utils import convert_keys

# Errors FCM raises for tokens that will never be deliverable again.
INVALID_TOKEN_ERRORS = (
    messaging.UnregisteredError,
    firebase_exceptions.InvalidArgumentError,
)


def is_invalid_token_error(error: Optional[Exception]) -> bool:
    return isinstance(error, INVALID_TOKEN_ERRORS)


def _android_config() -> messaging.AndroidConfig:
    return messaging.AndroidConfig(
        priority="high",
        notification=messaging.AndroidNotification(
            channel_id=get_settings().fcm_channel_id,
            sound="default",
            click_action="FLUTTER_NOTIFICATION_CLICK",
        ),
    )


def _apns_config() -> messaging.APNSConfig:
    return messaging.APNSConfig(
        payload=messaging.APNSPayload(aps=messaging.Aps(sound="default", badge=1))
    )


def build_message(
    token: str, title: str, body: str, data: Dict[str, str]
) -> messaging.Message:
    return messaging.Message(
        token=token,
        notification=messaging.Notification(title=title, body=body),
        data=data,
        android=_android_config(),
        apns=_apns_config(),
    )


def build_notification_record(
    student_id: str,
    title: str,
    body: str,
    data: Dict[str, str],
    notification_type: str,
    additional_data: Optional[dict] = None,
) -> dict:
    """
    Returns the Firestore payload for one in-app notification.

    Extra fields are merged on top of the base record but never override
    `read` or `createdAt`.
    """
    record = NotificationRecord(
        user_id=student_id,
        type=str(notification_type),
        title=title,
        body=body,
        data=dict(data),
    )
    record_json = convert_keys(asdict(record), "snake_to_camel")
    read = record_json.pop("read")
    record_json.pop("createdAt")
    return {
        **record_json,
        **(additional_data or {}),
        "read": read,
        "createdAt": SERVER_TIMESTAMP,
    }


def remove_fcm_token(db, student_id: str) -> None:
    db.collection(STUDENTS_COLLECTION).document(student_id).update(
        {FCM_TOKEN_FIELD: DELETE_FIELD}
    )


def send_notification_to_student(
    db,
    student_id: str,
    title: str,
    body: str,
    data: Dict[str, str],
    notification_type: str,
    additional_data: Optional[dict] = None,
) -> bool:
    """
    Sends a push notification to one student and saves the in-app record.

    Push delivery is best effort: an invalid token is removed from the student
    document and any other send error is only logged. The notification record
    is written whenever the student exists.

    Args:
        db: The Firestore client.
        student_id (str): Document id in the `student` collection.
        title (str): Notification title.
        body (str): Notification body.
        data (Dict[str, str]): FCM data payload, also stored on the record.
        notification_type (str): The NotificationType tag.
        additional_data (dict): Extra fields merged into the stored record.

    Returns:
        bool: False if the student is missing or a local error occurred.
    """
    try:
        student_ref = db.collection(STUDENTS_COLLECTION).document(student_id)
        student_doc = student_ref.get()
        if not student_doc.exists:
            logger.error(f"Student not found: {student_id}")
            return False

        fcm_token = (student_doc.to_dict() or {}).get(FCM_TOKEN_FIELD)
        if fcm_token:
            message = build_message(
                fcm_token, title, body, {**data, "type": str(notification_type)}
            )
            try:
                messaging.send(message)
                logger.info(f"Push notification sent to student {student_id}")
            except Exception as e:
                if is_invalid_token_error(e):
                    logger.info(f"Removing invalid token for student {student_id}")
                    remove_fcm_token(db, student_id)
                else:
                    logger.error(f"Error sending push to {student_id}: {e}")
        else:
            logger.warn(f"Student {student_id} has no FCM token")

        db.collection(NOTIFICATIONS_COLLECTION).add(
            build_notification_record(
                student_id, title, body, data, notification_type, additional_data
            )
        )
        logger.info(f"In-app notification saved for student {student_id}")
        return True
    except Exception as e:
        logger.error(f"Error in send_notification_to_student: {e}")
        return False


def send_multicast(
    tokens: List[str], title: str, body: str, data: Dict[str, str]
) -> List[str]:
    """
    Sends the same notification to many tokens.

    Tokens are sent in chunks of the FCM multicast limit.

    Returns:
        List[str]: The tokens FCM reported as permanently invalid.
    """
    invalid_tokens = []
    success_count = 0
    failure_count = 0
    for start in range(0, len(tokens), FCM_MULTICAST_LIMIT):
        chunk = tokens[start : start + FCM_MULTICAST_LIMIT]
        message = messaging.MulticastMessage(
            tokens=chunk,
            notification=messaging.Notification(title=title, body=body),
            data=data,
            android=_android_config(),
            apns=_apns_config(),
        )
        response = messaging.send_each_for_multicast(message)
        success_count += response.success_count
        failure_count += response.failure_count
        for token, send_response in zip(chunk, response.responses):
            if send_response.success:
                continue
            logger.warn(f"Failed to send to token: {send_response.exception}")
            if is_invalid_token_error(send_response.exception):
                invalid_tokens.append(token)

    logger.info(f"Sent {success_count} notifications, failed {failure_count}")
    return invalid_tokens
