import json
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

from notewright.core.models import AppConfig
from notewright.core.storage import Storage
from notewright.errors import ClassificationError, RemoteCallError
from notewright.pipeline.classify import ClassifyPhase
from notewright.prompts import PromptFactory

CREATION_TIME = datetime(2023, 1, 1, 12, 0)
CLASSIFICATION_FILENAME = "2023-01-01-12345678.classification.json"


class TestClassifyPhase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        self.interim = self.root / ".interim"
        self.interim.mkdir()

        self.config = AppConfig()
        self.client = MagicMock()
        self.client.create_completion.return_value = {
            "type": "Meeting",
            "subject": "Quarterly planning",
            "confidence": 0.82,
            "classificationSignals": [{"type": "keyword", "value": "agenda", "weight": 70}],
            "reasoning": "Several speakers and an agenda.",
            "tags": ["planning", "planning", "q3"],
            "text": "model should not override this",
        }
        self.phase = ClassifyPhase(self.config, self.client, PromptFactory(self.config), Storage())

    def tearDown(self):
        self.tmp.cleanup()

    def classify(self, text="Test transcription"):
        return self.phase.classify(
            CREATION_TIME,
            self.root,
            self.root / ".context",
            self.interim,
            text,
            "12345678",
            "test-audio.mp3",
        )

    def test_classifies_and_caches(self):
        result = self.classify()

        self.assertEqual(result.type, "meeting")
        self.assertEqual(result.subject, "Quarterly planning")
        self.assertEqual(result.text, "Test transcription")
        self.assertEqual(result.audio_file_basename, "test-audio.mp3")
        self.assertEqual(result.tags, ["planning", "q3"])
        self.assertEqual(result.classification_signals[0].weight, 70)

        data = json.loads((self.interim / CLASSIFICATION_FILENAME).read_text(encoding="utf-8"))
        self.assertEqual(data["audioFileBasename"], "test-audio.mp3")
        self.assertEqual(data["classificationSignals"][0]["value"], "agenda")

    def test_request_uses_json_object_format(self):
        self.classify()

        args, kwargs = self.client.create_completion.call_args
        self.assertEqual(kwargs["model"], "gpt-4o")
        self.assertEqual(kwargs["response_format"], {"type": "json_object"})
        self.assertIsNone(kwargs["debug_file"])
        self.assertIn("Test transcription", args[0][-1]["content"])

    def test_classify_model_override(self):
        self.phase.config = AppConfig(models={"completion": "gpt-4o", "classify": "gpt-4o-mini"})
        self.classify()
        self.assertEqual(self.client.create_completion.call_args.kwargs["model"], "gpt-4o-mini")

    def test_second_call_reuses_artifact(self):
        first = self.classify()
        second = self.classify()

        self.assertEqual(first, second)
        self.client.create_completion.assert_called_once()

    def test_null_optional_fields_are_accepted(self):
        self.client.create_completion.return_value = {
            "type": "note",
            "subject": "x",
            "confidence": None,
            "classificationSignals": None,
            "reasoning": None,
            "tags": None,
            "project": None,
        }

        result = self.classify()

        self.assertEqual(result.classification_signals, [])
        self.assertEqual(result.tags, [])
        self.assertIsNone(result.confidence)
        self.assertIsNone(result.project)
        data = json.loads((self.interim / CLASSIFICATION_FILENAME).read_text(encoding="utf-8"))
        self.assertEqual(data["classificationSignals"], [])

    def test_missing_subject_is_classification_error(self):
        self.client.create_completion.return_value = {"type": "note"}

        with self.assertRaises(ClassificationError):
            self.classify()
        self.assertFalse((self.interim / CLASSIFICATION_FILENAME).exists())

    def test_confidence_out_of_range_is_classification_error(self):
        self.client.create_completion.return_value = {"type": "note", "subject": "x", "confidence": 87}
        with self.assertRaises(ClassificationError):
            self.classify()

    def test_non_object_response_is_classification_error(self):
        self.client.create_completion.return_value = ["note"]
        with self.assertRaises(ClassificationError):
            self.classify()

    def test_invalid_cached_artifact_is_classification_error(self):
        (self.interim / CLASSIFICATION_FILENAME).write_text(json.dumps({"text": "x"}), encoding="utf-8")
        with self.assertRaises(ClassificationError):
            self.classify()
        self.client.create_completion.assert_not_called()

    def test_remote_failure_propagates(self):
        self.client.create_completion.side_effect = RemoteCallError("No response received from OpenAI")
        with self.assertRaises(RemoteCallError):
            self.classify()

if __name__ == '__main__':
    unittest.main()
