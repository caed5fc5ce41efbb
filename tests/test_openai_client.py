import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from openai import OpenAIError

from notewright.core.models import OpenAIConfig
from notewright.core.storage import Storage
from notewright.errors import ConfigurationError, FilesystemError, RemoteCallError
from notewright.providers.openai import API_KEY_ENV_VAR, OpenAIClient


def make_completion(content):
    completion = MagicMock()
    completion.choices = [MagicMock()]
    completion.choices[0].message.content = content
    completion.model_dump.return_value = {"choices": [{"message": {"content": content}}]}
    return completion


class TestOpenAIClient(unittest.TestCase):
    def setUp(self):
        patcher = patch("notewright.providers.openai.client.OpenAI")
        self.mock_openai_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.sdk = self.mock_openai_cls.return_value

        env_patcher = patch.dict(os.environ, {API_KEY_ENV_VAR: "sk-test"})
        env_patcher.start()
        self.addCleanup(env_patcher.stop)

        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.root = Path(self.tmp.name)

        self.client = OpenAIClient(OpenAIConfig(), Storage())

    def test_missing_api_key_is_configuration_error(self):
        with patch.dict(os.environ, {}, clear=True):
            client = OpenAIClient(OpenAIConfig())
            with self.assertRaises(ConfigurationError) as ctx:
                client.create_completion([{"role": "user", "content": "hi"}])
        self.assertIn("OPENAI_API_KEY", str(ctx.exception))
        self.sdk.chat.completions.create.assert_not_called()

    def test_config_key_used_when_env_missing(self):
        self.sdk.chat.completions.create.return_value = make_completion("hello")
        with patch.dict(os.environ, {}, clear=True):
            client = OpenAIClient(OpenAIConfig(api_key="sk-config"))
            client.create_completion([{"role": "user", "content": "hi"}])
        self.assertEqual(self.mock_openai_cls.call_args.kwargs["api_key"], "sk-config")

    def test_sdk_client_created_once(self):
        self.sdk.chat.completions.create.return_value = make_completion("hello")
        self.client.create_completion([{"role": "user", "content": "a"}])
        self.client.create_completion([{"role": "user", "content": "b"}])
        self.mock_openai_cls.assert_called_once()

    def test_completion_returns_text(self):
        self.sdk.chat.completions.create.return_value = make_completion("  Generated note content \n")
        messages = [{"role": "user", "content": "hi"}]

        result = self.client.create_completion(messages, model="gpt-4o-mini")

        self.assertEqual(result, "Generated note content")
        self.sdk.chat.completions.create.assert_called_once_with(model="gpt-4o-mini", messages=messages)

    def test_empty_completion_is_remote_error(self):
        self.sdk.chat.completions.create.return_value = make_completion("")
        with self.assertRaises(RemoteCallError) as ctx:
            self.client.create_completion([{"role": "user", "content": "hi"}])
        self.assertEqual(str(ctx.exception), "No response received from OpenAI")

    def test_no_choices_is_remote_error(self):
        completion = make_completion("x")
        completion.choices = []
        self.sdk.chat.completions.create.return_value = completion
        with self.assertRaises(RemoteCallError):
            self.client.create_completion([{"role": "user", "content": "hi"}])

    def test_sdk_error_is_remote_error(self):
        self.sdk.chat.completions.create.side_effect = OpenAIError("rate limited")
        with self.assertRaises(RemoteCallError) as ctx:
            self.client.create_completion([{"role": "user", "content": "hi"}])
        self.assertIsInstance(ctx.exception.__cause__, OpenAIError)

    def test_json_response_format_is_parsed(self):
        self.sdk.chat.completions.create.return_value = make_completion('{"type": "note", "subject": "Test"}')
        response_format = {"type": "json_object"}

        result = self.client.create_completion([{"role": "user", "content": "hi"}], response_format=response_format)

        self.assertEqual(result, {"type": "note", "subject": "Test"})
        self.assertEqual(self.sdk.chat.completions.create.call_args.kwargs["response_format"], response_format)

    def test_malformed_json_is_remote_error(self):
        self.sdk.chat.completions.create.return_value = make_completion("not json")
        with self.assertRaises(RemoteCallError):
            self.client.create_completion([{"role": "user", "content": "hi"}], response_format={"type": "json_object"})

    def test_debug_file_written_only_in_debug_mode(self):
        self.sdk.chat.completions.create.return_value = make_completion("hello")
        debug_file = self.root / "note.response.json"

        self.client.create_completion([{"role": "user", "content": "hi"}], debug=False, debug_file=debug_file)
        self.assertFalse(debug_file.exists())

        self.client.create_completion([{"role": "user", "content": "hi"}], debug=True, debug_file=debug_file)
        data = json.loads(debug_file.read_text(encoding="utf-8"))
        self.assertEqual(data["choices"][0]["message"]["content"], "hello")

    def test_transcribe_returns_text(self):
        audio = self.root / "memo.mp3"
        audio.write_bytes(b"audio")
        self.sdk.audio.transcriptions.create.return_value = MagicMock(text=" Test transcription ")

        result = self.client.transcribe_audio(audio, model="whisper-1")

        self.assertEqual(result, {"text": "Test transcription"})
        self.assertEqual(self.sdk.audio.transcriptions.create.call_args.kwargs["model"], "whisper-1")

    def test_empty_transcription_is_remote_error(self):
        audio = self.root / "memo.mp3"
        audio.write_bytes(b"audio")
        self.sdk.audio.transcriptions.create.return_value = MagicMock(text="")

        with self.assertRaises(RemoteCallError) as ctx:
            self.client.transcribe_audio(audio)
        self.assertEqual(str(ctx.exception), "No transcription received from OpenAI")

    def test_missing_transcription_is_remote_error(self):
        audio = self.root / "memo.mp3"
        audio.write_bytes(b"audio")
        self.sdk.audio.transcriptions.create.return_value = None

        with self.assertRaises(RemoteCallError):
            self.client.transcribe_audio(audio)

    def test_unreadable_audio_is_filesystem_error(self):
        with self.assertRaises(FilesystemError):
            self.client.transcribe_audio(self.root / "missing.mp3")
        self.sdk.audio.transcriptions.create.assert_not_called()

if __name__ == '__main__':
    unittest.main()
