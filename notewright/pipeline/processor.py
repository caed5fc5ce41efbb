import logging
from pathlib import Path
from typing import Optional

from .locate import LocatePhase
from .transcribe import TranscribePhase
from .classify import ClassifyPhase
from .compose import ComposePhase
from .complete import CompletePhase
from ..core.filename import FilenameOperator
from ..core.models import AppConfig, ProcessingResult
from ..core.storage import Storage
from ..prompts import PromptFactory
from ..providers.openai import OpenAIClient

logger = logging.getLogger("Notewright.Processor")

class Processor:
    """
    Runs a recording through locate -> transcribe -> classify -> compose -> complete.

    Each phase receives only the previous phases' results. Errors are not caught
    here; the first failing phase's exception reaches the caller unchanged and
    the remaining phases do not run. Callers must not process the same file
    concurrently.
    """

    def __init__(self, config: AppConfig, operator: FilenameOperator, client: OpenAIClient, storage: Optional[Storage] = None):
        self.config = config
        self.operator = operator
        self.storage = storage or Storage()
        prompts = PromptFactory(config, self.storage)

        self.locate_phase = LocatePhase(config, operator, self.storage)
        self.transcribe_phase = TranscribePhase(config, client, self.storage)
        self.classify_phase = ClassifyPhase(config, client, prompts, self.storage)
        self.compose_phase = ComposePhase(config, client, prompts, self.storage)
        self.complete_phase = CompletePhase(config, self.storage)

    def process(self, source_file: Path) -> ProcessingResult:
        logger.info("Processing file %s", source_file)

        logger.debug("Locating file %s", source_file)
        located = self.locate_phase.locate(source_file)

        logger.debug("Transcribing file %s", source_file)
        transcription = self.transcribe_phase.transcribe(
            located.creation_time,
            located.output_path,
            located.context_path,
            located.interim_path,
            located.transcription_filename,
            located.hash,
            source_file,
        )

        logger.debug("Classifying transcription for file %s", source_file)
        classified = self.classify_phase.classify(
            located.creation_time,
            located.output_path,
            located.context_path,
            located.interim_path,
            transcription.text,
            located.hash,
            transcription.audio_file_basename,
        )

        filename = self.operator.construct_filename(
            located.creation_time,
            classified.type,
            located.hash,
            subject=classified.subject,
        )
        destination_path = located.output_path / filename

        logger.debug("Composing Note %s in %s", filename, located.output_path)
        note = self.compose_phase.compose(
            classified,
            located.output_path,
            located.context_path,
            located.interim_path,
            filename,
            located.hash,
            located.creation_time,
            destination_path,
        )

        logger.debug("Completing processing for %s", source_file)
        processed_path = self.complete_phase.complete(
            classified.type,
            classified.subject,
            located.hash,
            located.creation_time,
            source_file,
        )

        logger.info("Processed file %s", source_file)
        return ProcessingResult(
            source_file=Path(source_file),
            hash=located.hash,
            note_path=located.output_path / f"{filename}.{self.config.output.extension}",
            note=note,
            processed_path=processed_path,
        )
