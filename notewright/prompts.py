"""Builds chat messages for the classify and compose phases."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Template

from .core.models import AppConfig, ClassifiedTranscription, NoteType
from .core.storage import Storage
from .core.templates import load_template, parse_template
from .errors import ConfigurationError

logger = logging.getLogger("Notewright.Prompts")

NOTE_TYPE_DESCRIPTIONS = {
    NoteType.NOTE: "A general personal note, observation or reminder.",
    NoteType.MEETING: "A recap of a meeting with several participants, decisions and follow-ups.",
    NoteType.CALL: "A summary of a phone or video call with one or two other people.",
    NoteType.EMAIL: "A dictated email or message intended to be sent to someone.",
    NoteType.IDEA: "A new idea, concept or brainstorm worth developing later.",
    NoteType.TASK: "One or more action items or to-dos.",
}

DEFAULT_PERSONA = "You are a careful assistant that turns voice recordings into well organised markdown notes."


class PromptFactory:
    def __init__(self, config: AppConfig, storage: Optional[Storage] = None):
        self.config = config
        self.storage = storage or Storage()

    def _render(self, name: str, group: Optional[str] = None, **context: Any) -> tuple[Dict[str, Any], str]:
        content, path = load_template(name, group=group)
        if content is None:
            raise ConfigurationError(f"Template '{name}' not found.")
        metadata, body = parse_template(content)
        if not isinstance(metadata, dict):
            raise ConfigurationError(f"Front matter of template {path} must be a mapping.")
        logger.debug("Rendering template %s", path)
        return metadata, Template(body).render(**context).strip()

    def load_context(self) -> str:
        """Concatenate markdown files from the configured context directories."""
        sections = []
        for directory in self.config.paths.context:
            context_dir = Path(directory).expanduser()
            if not self.storage.is_directory(context_dir):
                logger.warning("Context directory %s does not exist, skipping", context_dir)
                continue
            for name in self.storage.list_files(context_dir):
                if not name.endswith(".md"):
                    continue
                sections.append(self.storage.read_file(context_dir / name, "utf-8").strip())
        return "\n\n".join(section for section in sections if section)

    def create_classify_prompt(self, text: str) -> List[Dict[str, str]]:
        metadata, body = self._render(
            "classify",
            text=text,
            types=[{"name": t.value, "description": d} for t, d in NOTE_TYPE_DESCRIPTIONS.items()],
        )
        return [
            {"role": "system", "content": metadata.get("persona", DEFAULT_PERSONA)},
            {"role": "user", "content": body},
        ]

    def create_compose_prompt(self, transcription: ClassifiedTranscription, note_type: str) -> List[Dict[str, str]]:
        """Compose instructions come from compose/<type>.j2, or compose/default.j2 for unknown types."""
        template_name = note_type if note_type in NoteType._value2member_map_ else "default"
        metadata, body = self._render(
            template_name,
            group="compose",
            transcription=transcription,
            type=note_type,
        )

        system = metadata.get("persona", DEFAULT_PERSONA)
        context = self.load_context()
        if context:
            system = f"{system}\n\nUse the following background context where it helps:\n\n{context}"

        return [
            {"role": "system", "content": system},
            {"role": "user", "content": body},
        ]
