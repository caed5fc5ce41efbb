import logging
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from .base import BasePhase, PhaseName
from ..constants import RESPONSE_SUFFIX, TRANSCRIPTION_SUFFIX
from ..core.models import Transcription
from ..errors import FilesystemError
from ..providers.openai import OpenAIClient

logger = logging.getLogger("Notewright.Transcribe")

class TranscribePhase(BasePhase):
    phase_name = PhaseName.TRANSCRIBE

    def __init__(self, config, client: OpenAIClient, storage=None):
        super().__init__(config, storage)
        self.client = client

    def transcribe(
        self,
        creation_time: datetime,
        output_path: Path,
        context_path: Path,
        interim_path: Path,
        transcription_filename: str,
        hash: str,
        source_file: Path,
    ) -> Transcription:
        """
        Return the transcription for a recording, reusing the interim JSON artifact when present.
        """
        source_file = Path(source_file)
        transcription_path = Path(interim_path) / transcription_filename

        if self.storage.exists(transcription_path):
            logger.info("Transcription file %s already exists, reusing it", transcription_path)
            data = self.read_json_artifact(transcription_path)
            try:
                return Transcription.model_validate(data)
            except ValidationError as e:
                raise FilesystemError(f"Cached transcription {transcription_path} is invalid: {e}") from e

        debug_file = None
        if self.config.debug:
            debug_name = transcription_filename.removesuffix(TRANSCRIPTION_SUFFIX) + ".transcription" + RESPONSE_SUFFIX
            debug_file = Path(interim_path) / debug_name

        logger.info(f"Transcribing {source_file.name} with {self.config.models.transcription}")
        response = self.client.transcribe_audio(
            source_file,
            model=self.config.models.transcription,
            debug=self.config.debug,
            debug_file=debug_file,
        )

        transcription = Transcription(text=response["text"], audio_file_basename=source_file.name)
        self.write_json_artifact(transcription_path, transcription)
        logger.info(f"Transcription complete: {len(transcription.text)} chars")
        return transcription
