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
"""Sends password reset codes through the configured SMTP relay."""

import smtplib
from email.message import EmailMessage

from firebase_functions import logger

from shared.config import Settings, get_settings

SMTP_TIMEOUT_SEC = 20
IMPLICIT_TLS_PORT = 465
DEFAULT_SENDER = "noreply@localhost"

OTP_EMAIL_SUBJECT = "Your Spark password reset code"
OTP_EMAIL_BODY = """Hi,

Use this code to reset your Spark password:

    {code}

The code expires in {ttl_minutes} minutes. If you did not ask to reset your
password you can ignore this email.

The Spark Team
"""


class MailerNotConfiguredException(Exception):
    pass


def build_otp_email(sender: str, recipient: str, code: str, ttl_minutes: int):
    message = EmailMessage()
    message["Subject"] = OTP_EMAIL_SUBJECT
    message["From"] = sender
    message["To"] = recipient
    message.set_content(OTP_EMAIL_BODY.format(code=code, ttl_minutes=ttl_minutes))
    return message


def send_otp_email(
    recipient: str, code: str, ttl_minutes: int, settings: Settings | None = None
) -> None:
    """
    Emails a one-time code.

    Port 465 uses implicit TLS; any other port is upgraded with STARTTLS.

    Raises:
        MailerNotConfiguredException: If no SMTP host is configured.
        smtplib.SMTPException: If the relay rejects the message.
    """
    settings = settings or get_settings()
    if not settings.smtp_host:
        raise MailerNotConfiguredException("SMTP_HOST is not configured")

    sender = settings.smtp_sender or settings.smtp_user or DEFAULT_SENDER
    message = build_otp_email(sender, recipient, code, ttl_minutes)

    implicit_tls = settings.smtp_port == IMPLICIT_TLS_PORT
    smtp_class = smtplib.SMTP_SSL if implicit_tls else smtplib.SMTP

    with smtp_class(
        settings.smtp_host, settings.smtp_port, timeout=SMTP_TIMEOUT_SEC
    ) as server:
        if not implicit_tls:
            server.starttls()
        if settings.smtp_user and settings.smtp_password:
            server.login(settings.smtp_user, settings.smtp_password)
        server.send_message(message)

    logger.info("Password reset code emailed")
