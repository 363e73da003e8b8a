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

import unittest
from unittest.mock import patch

from password_reset import mailer
from shared.config import Settings


class SendOtpEmailTest(unittest.TestCase):

    @patch("password_reset.mailer.smtplib.SMTP")
    def test_starttls_relay(self, mock_smtp):
        settings = Settings(
            smtp_host="smtp.example.com",
            smtp_port=587,
            smtp_user="noreply@example.com",
            smtp_password="secret",
        )

        mailer.send_otp_email("student@example.com", "123456", 10, settings)

        mock_smtp.assert_called_once_with("smtp.example.com", 587, timeout=20)
        server = mock_smtp.return_value.__enter__.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("noreply@example.com", "secret")
        message = server.send_message.call_args.args[0]
        self.assertEqual(message["To"], "student@example.com")
        self.assertEqual(message["From"], "noreply@example.com")
        self.assertIn("123456", message.get_content())

    @patch("password_reset.mailer.smtplib.SMTP_SSL")
    def test_implicit_tls_relay(self, mock_smtp_ssl):
        settings = Settings(
            smtp_host="smtp.example.com",
            smtp_port=465,
            smtp_sender="Spark <noreply@example.com>",
        )

        mailer.send_otp_email("student@example.com", "654321", 10, settings)

        server = mock_smtp_ssl.return_value.__enter__.return_value
        server.starttls.assert_not_called()
        server.login.assert_not_called()
        message = server.send_message.call_args.args[0]
        self.assertEqual(message["From"], "Spark <noreply@example.com>")

    def test_missing_host_raises(self):
        with self.assertRaises(mailer.MailerNotConfiguredException):
            mailer.send_otp_email("student@example.com", "123456", 10, Settings())


if __name__ == "__main__":
    unittest.main()
