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
One-time code password reset.

A ticket in `password_resets/{uid}` holds only a salted hash of the code, an
expiry and a failed-attempt counter. The ticket is deleted on success, on
expiry and once the attempt limit is reached.
"""

import hashlib
import hmac
import secrets
from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from typing import Optional

from dacite import Config, from_dict
from firebase_admin import auth
from firebase_functions import logger
from google.cloud.firestore_v1 import Increment

from password_reset import mailer
from shared.api import PasswordOtpResult, PasswordResetTicket
from shared.constants import (
    MIN_PASSWORD_LENGTH,
    OTP_LENGTH,
    OTP_MAX_ATTEMPTS,
    OTP_TTL_MINUTES,
)
from shared.firebase_constants import PASSWORD_RESETS_COLLECTION
from shared.json_utils import convert_keys
from shared.types import PasswordResetErrorCode


class PasswordResetError(Exception):
    """Base class for reset failures surfaced to the caller."""

    code = PasswordResetErrorCode.INVALID_ARGUMENT


class InvalidRequestError(PasswordResetError):
    code = PasswordResetErrorCode.INVALID_ARGUMENT


class TicketNotFoundError(PasswordResetError):
    code = PasswordResetErrorCode.NOT_FOUND


class TicketExpiredError(PasswordResetError):
    code = PasswordResetErrorCode.EXPIRED


class TooManyAttemptsError(PasswordResetError):
    code = PasswordResetErrorCode.TOO_MANY_ATTEMPTS


class InvalidCodeError(PasswordResetError):
    code = PasswordResetErrorCode.INVALID_CODE


class DeliveryFailedError(PasswordResetError):
    code = PasswordResetErrorCode.DELIVERY_FAILED


def generate_code() -> str:
    return "".join(secrets.choice("0123456789") for _ in range(OTP_LENGTH))


def hash_code(code: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}:{code}".encode("utf-8")).hexdigest()


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _get_uid(email: str) -> str:
    try:
        return auth.get_user_by_email(email).uid
    except auth.UserNotFoundError:
        raise TicketNotFoundError("No account found for this email.")


def _ticket_ref(db, uid: str):
    return db.collection(PASSWORD_RESETS_COLLECTION).document(uid)


def request_password_otp(
    db, email: Optional[str], now: Optional[datetime] = None
) -> PasswordOtpResult:
    """
    Creates a reset ticket for the account and emails the plaintext code.

    Any earlier ticket for the same account is replaced.
    """
    email = normalize_email(email)
    if not email:
        raise InvalidRequestError("Must specify email parameter.")

    uid = _get_uid(email)
    now = now or datetime.now(timezone.utc)
    code = generate_code()
    salt = secrets.token_hex(16)
    ticket = PasswordResetTicket(
        email=email,
        hash=hash_code(code, salt),
        salt=salt,
        expires_at=now + timedelta(minutes=OTP_TTL_MINUTES),
        attempts=0,
    )
    ticket_ref = _ticket_ref(db, uid)
    ticket_ref.set(convert_keys(asdict(ticket), "snake_to_camel"))

    try:
        mailer.send_otp_email(email, code, OTP_TTL_MINUTES)
    except Exception as e:
        logger.error(f"Failed to send password reset email: {e}")
        # Nobody received this code.
        ticket_ref.delete()
        raise DeliveryFailedError("Could not send the reset code email.") from e

    logger.info("Password reset code issued", uid=uid)
    return PasswordOtpResult(ok=True)


def verify_password_otp(
    db,
    email: Optional[str],
    code: Optional[str],
    new_password: Optional[str],
    now: Optional[datetime] = None,
) -> PasswordOtpResult:
    """
    Checks a reset code and, when it matches, sets the new password.

    Raises:
        TicketNotFoundError: No account or no outstanding ticket.
        TicketExpiredError: The ticket expired; it is deleted.
        TooManyAttemptsError: The attempt limit was reached; it is deleted.
        InvalidCodeError: The code does not match; the attempt is counted.
    """
    email = normalize_email(email)
    code = (code or "").strip()
    if not email or not code or not new_password:
        raise InvalidRequestError("Must specify email, code and newPassword.")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise InvalidRequestError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        )

    uid = _get_uid(email)
    ticket_ref = _ticket_ref(db, uid)
    ticket_doc = ticket_ref.get()
    if not ticket_doc.exists:
        raise TicketNotFoundError("No reset code was requested for this email.")

    ticket = from_dict(
        data_class=PasswordResetTicket,
        data=convert_keys(ticket_doc.to_dict(), "camel_to_snake"),
        config=Config(check_types=False),
    )

    expires_at = ticket.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if (now or datetime.now(timezone.utc)) > expires_at:
        ticket_ref.delete()
        raise TicketExpiredError("The reset code has expired.")

    if ticket.attempts >= OTP_MAX_ATTEMPTS:
        ticket_ref.delete()
        raise TooManyAttemptsError("Too many attempts. Request a new code.")

    if not hmac.compare_digest(hash_code(code, ticket.salt), ticket.hash):
        ticket_ref.update({"attempts": Increment(1)})
        raise InvalidCodeError("The reset code is incorrect.")

    auth.update_user(uid, password=new_password)
    ticket_ref.delete()
    logger.info("Password reset completed", uid=uid)
    return PasswordOtpResult(ok=True)
