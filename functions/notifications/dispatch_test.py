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

from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from main_testing_utils import FakeFirestore, make_batch_response
from notifications import dispatch


class SendNotificationToStudentTest(unittest.TestCase):

    def setUp(self):
        self.db = FakeFirestore(
            {
                "student/with-token": {"fcmToken": "token-1"},
                "student/no-token": {"name": "Sam"},
            }
        )

    def _send(self, student_id, **kwargs):
        return dispatch.send_notification_to_student(
            self.db,
            student_id=student_id,
            title="Title",
            body="Body",
            data={"route": "/notifications"},
            notification_type="test",
            **kwargs,
        )

    @patch("notifications.dispatch.messaging.send")
    def test_missing_student_sends_nothing(self, mock_send):
        result = self._send("ghost")

        self.assertFalse(result)
        mock_send.assert_not_called()
        self.assertEqual(self.db.docs_in("notifications"), {})

    @patch("notifications.dispatch.messaging.send")
    def test_sends_push_and_saves_record(self, mock_send):
        result = self._send("with-token", additional_data={"companyName": "Acme"})

        self.assertTrue(result)
        mock_send.assert_called_once()
        message = mock_send.call_args.args[0]
        self.assertEqual(message.token, "token-1")
        self.assertEqual(message.notification.title, "Title")
        self.assertEqual(message.data, {"route": "/notifications", "type": "test"})
        self.assertEqual(message.android.priority, "high")
        self.assertEqual(message.android.notification.channel_id, "spark_channel")
        self.assertEqual(message.apns.payload.aps.badge, 1)

        records = list(self.db.docs_in("notifications").values())
        self.assertEqual(len(records), 1)
        record = records[0]
        self.assertEqual(record["userId"], "with-token")
        self.assertEqual(record["type"], "test")
        self.assertEqual(record["title"], "Title")
        self.assertEqual(record["body"], "Body")
        self.assertEqual(record["data"], {"route": "/notifications"})
        self.assertEqual(record["companyName"], "Acme")
        self.assertFalse(record["read"])
        self.assertIs(record["createdAt"], SERVER_TIMESTAMP)

    @patch("notifications.dispatch.messaging.send")
    def test_student_without_token_still_gets_record(self, mock_send):
        result = self._send("no-token")

        self.assertTrue(result)
        mock_send.assert_not_called()
        self.assertEqual(len(self.db.docs_in("notifications")), 1)

    @patch("notifications.dispatch.messaging.send")
    def test_unregistered_token_is_removed_and_record_saved(self, mock_send):
        mock_send.side_effect = messaging.UnregisteredError("not registered")

        result = self._send("with-token")

        self.assertTrue(result)
        self.assertNotIn("fcmToken", self.db.documents["student/with-token"])
        self.assertEqual(len(self.db.docs_in("notifications")), 1)

    @patch("notifications.dispatch.messaging.send")
    def test_invalid_argument_token_is_removed(self, mock_send):
        mock_send.side_effect = firebase_exceptions.InvalidArgumentError(
            "invalid registration token"
        )

        self._send("with-token")

        self.assertNotIn("fcmToken", self.db.documents["student/with-token"])

    @patch("notifications.dispatch.messaging.send")
    def test_other_send_errors_keep_token(self, mock_send):
        mock_send.side_effect = firebase_exceptions.UnavailableError("try later")

        result = self._send("with-token")

        self.assertTrue(result)
        self.assertEqual(self.db.documents["student/with-token"]["fcmToken"], "token-1")
        self.assertEqual(len(self.db.docs_in("notifications")), 1)

    @patch("notifications.dispatch.messaging.send")
    def test_extra_fields_do_not_override_read_flag(self, mock_send):
        self._send("no-token", additional_data={"read": True})

        record = list(self.db.docs_in("notifications").values())[0]
        self.assertFalse(record["read"])


class SendMulticastTest(unittest.TestCase):

    @patch("notifications.dispatch.messaging.send_each_for_multicast")
    def test_returns_only_permanently_invalid_tokens(self, mock_multicast):
        mock_multicast.return_value = make_batch_response(
            [
                None,
                messaging.UnregisteredError("gone"),
                firebase_exceptions.UnavailableError("busy"),
            ]
        )

        invalid = dispatch.send_multicast(
            ["a", "b", "c"], "Title", "Body", {"type": "new_opportunity"}
        )

        self.assertEqual(invalid, ["b"])
        message = mock_multicast.call_args.args[0]
        self.assertEqual(message.tokens, ["a", "b", "c"])

    @patch("notifications.dispatch.FCM_MULTICAST_LIMIT", 2)
    @patch("notifications.dispatch.messaging.send_each_for_multicast")
    def test_large_token_lists_are_chunked(self, mock_multicast):
        mock_multicast.side_effect = lambda message: make_batch_response(
            [None] * len(message.tokens)
        )

        dispatch.send_multicast(["a", "b", "c"], "Title", "Body", {})

        self.assertEqual(mock_multicast.call_count, 2)


if __name__ == "__main__":
    unittest.main()
