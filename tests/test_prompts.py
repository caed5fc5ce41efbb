import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from notewright.core.models import AppConfig, ClassifiedTranscription
from notewright.core.templates import load_template, parse_template
from notewright.errors import ConfigurationError
from notewright.prompts import DEFAULT_PERSONA, PromptFactory


def make_transcription(type="meeting"):
    return ClassifiedTranscription(
        text="We agreed to ship on Friday.",
        audio_file_basename="memo.mp3",
        type=type,
        subject="Release planning",
    )


class TestTemplates(unittest.TestCase):
    def test_parse_front_matter(self):
        metadata, body = parse_template("---\npersona: Test\n---\nHello {{ name }}")
        self.assertEqual(metadata, {"persona": "Test"})
        self.assertEqual(body, "Hello {{ name }}")

    def test_without_front_matter(self):
        self.assertEqual(parse_template("Just a body"), ({}, "Just a body"))

    def test_compose_templates_exist_for_every_type(self):
        for name in ("default", "note", "meeting", "call", "email", "idea", "task"):
            content, path = load_template(name, group="compose")
            self.assertIsNotNone(content, name)
            self.assertEqual(path.parent.name, "compose")

    def test_missing_template(self):
        self.assertEqual(load_template("nope", group="compose"), (None, None))


class TestPromptFactory(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_classify_prompt_lists_types_and_text(self):
        messages = PromptFactory(AppConfig()).create_classify_prompt("Buy milk tomorrow")

        self.assertEqual([m["role"] for m in messages], ["system", "user"])
        self.assertIn("Buy milk tomorrow", messages[1]["content"])
        for note_type in ("note", "meeting", "call", "email", "idea", "task"):
            self.assertIn(f"- {note_type}:", messages[1]["content"])

    def test_compose_prompt_uses_type_template(self):
        messages = PromptFactory(AppConfig()).create_compose_prompt(make_transcription(), "meeting")

        self.assertIn("We agreed to ship on Friday.", messages[1]["content"])
        self.assertIn("Release planning", messages[1]["content"])
        self.assertNotEqual(messages[0]["content"], "")

    def test_unknown_type_uses_default_template(self):
        messages = PromptFactory(AppConfig()).create_compose_prompt(make_transcription("journal"), "journal")

        self.assertIn("We agreed to ship on Friday.", messages[1]["content"])
        default_meta, _ = parse_template(load_template("default", group="compose")[0])
        self.assertEqual(messages[0]["content"], default_meta.get("persona", DEFAULT_PERSONA))

    @patch("notewright.prompts.load_template", return_value=(None, None))
    def test_missing_template_is_configuration_error(self, mock_load):
        with self.assertRaises(ConfigurationError):
            PromptFactory(AppConfig()).create_classify_prompt("text")

    @patch("notewright.prompts.load_template", return_value=("---\njust a string\n---\nBody", Path("classify.j2")))
    def test_scalar_front_matter_is_configuration_error(self, mock_load):
        with self.assertRaises(ConfigurationError):
            PromptFactory(AppConfig()).create_classify_prompt("text")

    def test_context_files_are_appended(self):
        context_dir = self.root / "context"
        context_dir.mkdir()
        (context_dir / "people.md").write_text("Anna leads the release team.", encoding="utf-8")
        (context_dir / "ignored.txt").write_text("not markdown", encoding="utf-8")
        config = AppConfig(paths={"context": [str(context_dir), str(self.root / "missing")]})

        messages = PromptFactory(config).create_compose_prompt(make_transcription(), "meeting")

        self.assertIn("Anna leads the release team.", messages[0]["content"])
        self.assertNotIn("not markdown", messages[0]["content"])

if __name__ == '__main__':
    unittest.main()
