import base64
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from backend.app import create_app
from models.openai_chat import OpenAIRateLimitException, OpenAIResponseException
from shared.config import Settings, get_settings

HISTORY = [
    {"role": "user", "text": "How do I answer 'tell me about yourself'?"},
    {"role": "ai", "text": "Start with a short summary."},
    {"role": "user", "content": "Can you give an example?"},
]


class ChatRelayApiTests(unittest.TestCase):
    def setUp(self):
        app = create_app()
        app.dependency_overrides[get_settings] = lambda: Settings(
            openai_api_key="test-key"
        )
        self.client = TestClient(app)

    @patch("backend.routes.openai_chat.call_chat_completion")
    def test_missing_or_empty_messages_are_rejected(self, mock_completion):
        for body in ({}, {"messages": []}, {"messages": None}, {"messages": "hi"}):
            with self.subTest(body=body):
                response = self.client.post("/chat", json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(
                    response.json(), {"error": "Messages array is required."}
                )
        mock_completion.assert_not_called()

    @patch("backend.routes.openai_chat.call_chat_completion")
    def test_system_prompt_first_and_ai_role_rewritten(self, mock_completion):
        mock_completion.return_value = "Here is an example."

        response = self.client.post(
            "/chat",
            json={"messages": HISTORY, "resumeId": "res-1", "trainingType": "Sales"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"reply": "Here is an example."})
        sent_messages = mock_completion.call_args.args[0]
        self.assertEqual(sent_messages[0]["role"], "system")
        self.assertIn("res-1", sent_messages[0]["content"])
        self.assertIn("'Sales'", sent_messages[0]["content"])
        self.assertEqual(
            sent_messages[1:],
            [
                {"role": "user", "content": HISTORY[0]["text"]},
                {"role": "assistant", "content": HISTORY[1]["text"]},
                {"role": "user", "content": HISTORY[2]["content"]},
            ],
        )

    @patch("backend.routes.openai_chat.call_chat_completion")
    def test_rate_limit_maps_to_429(self, mock_completion):
        mock_completion.side_effect = OpenAIRateLimitException("slow down")

        response = self.client.post("/chat", json={"messages": HISTORY})

        self.assertEqual(response.status_code, 429)
        self.assertEqual(
            response.json(),
            {"error": "AI service is currently overloaded. Please try again shortly."},
        )

    @patch("backend.routes.openai_chat.call_chat_completion")
    def test_upstream_error_mirrors_status(self, mock_completion):
        mock_completion.side_effect = OpenAIResponseException(
            401, "Incorrect API key provided"
        )

        response = self.client.post("/chat", json={"messages": HISTORY})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Incorrect API key provided"})

    @patch("backend.routes.openai_chat.call_chat_completion")
    def test_local_failure_is_internal_error(self, mock_completion):
        mock_completion.side_effect = ConnectionError("network down")

        response = self.client.post("/chat", json={"messages": HISTORY})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Internal server error"})

    @patch("backend.chat.openai_speech.synthesize_speech")
    @patch("backend.routes.openai_chat.call_chat_completion")
    def test_reply_with_audio(self, mock_completion, mock_speech):
        mock_completion.return_value = "Practice out loud."
        mock_speech.return_value = b"mp3-bytes"

        response = self.client.post(
            "/chat",
            json={"messages": HISTORY, "includeAudio": True, "voice": "nova"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {
                "reply": "Practice out loud.",
                "audio": base64.b64encode(b"mp3-bytes").decode("ascii"),
                "mimeType": "audio/mpeg",
            },
        )
        self.assertEqual(mock_speech.call_args.args[:2], ("Practice out loud.", "nova"))

    @patch("backend.chat.openai_speech.synthesize_speech")
    @patch("backend.routes.openai_chat.call_chat_completion")
    def test_speech_failure_returns_text_only(self, mock_completion, mock_speech):
        mock_completion.return_value = "Practice out loud."
        mock_speech.side_effect = RuntimeError("tts down")

        response = self.client.post(
            "/chat", json={"messages": HISTORY, "includeAudio": True}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"reply": "Practice out loud.", "audio": None, "mimeType": "audio/mpeg"},
        )

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_unknown_route_uses_error_body(self):
        response = self.client.get("/missing")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Not Found"})

    def test_chat_errors_documented_with_error_schema(self):
        schema = self.client.get("/openapi.json").json()
        responses = schema["paths"]["/chat"]["post"]["responses"]
        for status in ("400", "429", "500"):
            with self.subTest(status=status):
                self.assertEqual(
                    responses[status]["content"]["application/json"]["schema"],
                    {"$ref": "#/components/schemas/ErrorResponse"},
                )


if __name__ == "__main__":
    unittest.main()
