import unittest
from unittest import mock
import requests
from mediroute.services.medibot import EMPTY_QUESTION_REPLY, FALLBACK_REPLY, MediBotClient

class TestMediBot(unittest.TestCase):
    def setUp(self):
        self.session = mock.Mock()
        self.client = MediBotClient(api_key="key", model="test-model", session=self.session, timeout=2.0)

    def test_blank_question(self):
        self.assertEqual(self.client.ask("   "), EMPTY_QUESTION_REPLY)
        self.session.post.assert_not_called()

    def test_reply_text(self):
        response = mock.Mock()
        response.raise_for_status.return_value = None
        response.json.return_value = {
            "candidates": [{"content": {"parts": [{"text": "1. Apply pressure.\n2. Elevate the limb."}]}}]
        }
        self.session.post.return_value = response

        reply = self.client.ask("deep cut on forearm")

        self.assertEqual(reply, "1. Apply pressure.\n2. Elevate the limb.")
        args, kwargs = self.session.post.call_args
        self.assertTrue(args[0].endswith("/models/test-model:generateContent"))
        self.assertEqual(kwargs["params"], {"key": "key"})
        self.assertIn("deep cut on forearm", kwargs["json"]["contents"][0]["parts"][0]["text"])

    def test_upstream_error_falls_back(self):
        self.session.post.side_effect = requests.Timeout("slow")
        self.assertEqual(self.client.ask("unconscious patient"), FALLBACK_REPLY)

    def test_malformed_response_falls_back(self):
        response = mock.Mock()
        response.raise_for_status.return_value = None
        response.json.return_value = {"candidates": []}
        self.session.post.return_value = response
        self.assertEqual(self.client.ask("chest pain"), FALLBACK_REPLY)

    def test_missing_key_falls_back(self):
        client = MediBotClient(api_key="", session=self.session)
        self.assertEqual(client.ask("chest pain"), FALLBACK_REPLY)
        self.session.post.assert_not_called()

if __name__ == '__main__':
    unittest.main()
