import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .base import BasePhase, PhaseName
from ..constants import REQUEST_SUFFIX, RESPONSE_SUFFIX
from ..core.models import ClassifiedTranscription
from ..prompts import PromptFactory
from ..providers.openai import OpenAIClient

logger = logging.getLogger("Notewright.Compose")

def format_date(date: datetime) -> str:
    """January 1, 2023"""
    return f"{date.strftime('%B')} {date.day}, {date.year}"

def format_time(date: datetime) -> str:
    """12:05 PM"""
    hour = date.hour % 12 or 12
    return f"{hour}:{date.minute:02d} {'AM' if date.hour < 12 else 'PM'}"

def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)

class MetadataBuilder:
    """Accumulates ordered metadata sections; empty sections are dropped when rendering."""

    def __init__(self, title: str = "## Metadata"):
        self.title = title
        self._sections: List[List[str]] = []

    def section(self, *lines: Optional[str]) -> "MetadataBuilder":
        present = [line for line in lines if line is not None]
        if present:
            self._sections.append(present)
        return self

    def render(self) -> str:
        blocks = ["\n".join(lines) for lines in self._sections]
        return "\n".join([self.title, "", "\n\n".join(blocks), ""])

def generate_metadata(transcription: ClassifiedTranscription, creation_time: datetime, destination_path) -> str:
    builder = MetadataBuilder()

    builder.section(
        f"**Date**: {format_date(creation_time)}",
        f"**Time**: {format_time(creation_time)}",
    )

    if transcription.project:
        builder.section(
            f"**Project**: {transcription.project}",
            f"**Project ID**: `{transcription.project}`",
        )

    confidence = None
    if transcription.confidence is not None:
        confidence = f"**Confidence**: {transcription.confidence * 100:.1f}%"
    builder.section("### Routing", "", f"**Destination**: {destination_path}", confidence)

    if transcription.classification_signals:
        builder.section(
            "**Classification Signals**:",
            *(
                f'- {signal.type}: "{signal.value}" ({_format_number(signal.weight)}% weight)'
                for signal in transcription.classification_signals
            ),
        )

    if transcription.reasoning:
        builder.section(f"**Reasoning**: {transcription.reasoning}")

    if transcription.tags:
        builder.section(f"**Tags**: {', '.join(f'`{tag}`' for tag in transcription.tags)}")

    return builder.render()

class ComposePhase(BasePhase):
    phase_name = PhaseName.COMPOSE

    def __init__(self, config, client: OpenAIClient, prompts: PromptFactory, storage=None):
        super().__init__(config, storage)
        self.client = client
        self.prompts = prompts

    @property
    def extension(self) -> str:
        return self.config.output.extension

    def compose(
        self,
        transcription: ClassifiedTranscription,
        output_path: Path,
        context_path: Path,
        interim_path: Path,
        filename: str,
        hash: str,
        creation_time: datetime,
        destination_path: Path,
    ) -> Optional[str]:
        """
        Render the note for a classified transcription and write it next to its siblings.

        Returns:
            None if a decorated note for this filename already exists,
            the existing note's contents if the exact note path exists,
            otherwise the newly written note.
        """
        output_path = Path(output_path)
        interim_path = Path(interim_path)
        base_filename = Path(filename).name

        # Any existing note whose name contains the base filename counts, decorated or not.
        # Substring matching: a base filename contained in another note's name also matches.
        files = self.storage.list_files(output_path)
        matching_files = [f for f in files if base_filename in f and f.endswith(f".{self.extension}")]
        if matching_files:
            logger.info("Note file %s already exists, skipping", matching_files[0])
            return None

        note_path = output_path / f"{base_filename}.{self.extension}"
        logger.debug("Checking if output file %s exists", note_path)
        if self.storage.exists(note_path):
            logger.info("Output file %s already exists, returning existing content", note_path)
            return self.storage.read_file(note_path, "utf-8")

        model = self.config.models.compose_model
        messages = self.prompts.create_compose_prompt(transcription, transcription.type)

        request_path = interim_path / f"{base_filename}{REQUEST_SUFFIX}"
        request = {"model": model, "messages": messages}
        self.storage.write_file(request_path, json.dumps(request, indent=2, ensure_ascii=False), "utf-8")
        logger.debug("Wrote chat request to %s", request_path)

        debug_file = interim_path / f"{base_filename}{RESPONSE_SUFFIX}" if self.config.debug else None
        completion = self.client.create_completion(
            messages,
            model=model,
            debug=self.config.debug,
            debug_file=debug_file,
        )

        metadata = generate_metadata(transcription, creation_time, destination_path)
        note = f"{metadata}\n{completion}"

        self.storage.write_file(note_path, note, "utf-8", overwrite=False)
        logger.debug("Wrote note with metadata to %s", note_path)
        return note
