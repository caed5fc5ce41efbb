import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from .base import BasePhase, PhaseName, artifact_filename
from ..constants import CLASSIFICATION_SUFFIX, RESPONSE_SUFFIX
from ..core.models import ClassifiedTranscription
from ..errors import ClassificationError
from ..prompts import PromptFactory
from ..providers.openai import OpenAIClient

logger = logging.getLogger("Notewright.Classify")

CLASSIFICATION_RESPONSE_FORMAT = {"type": "json_object"}

class ClassifyPhase(BasePhase):
    phase_name = PhaseName.CLASSIFY

    def __init__(self, config, client: OpenAIClient, prompts: PromptFactory, storage=None):
        super().__init__(config, storage)
        self.client = client
        self.prompts = prompts

    def classify(
        self,
        creation_time: datetime,
        output_path: Path,
        context_path: Path,
        interim_path: Path,
        text: str,
        hash: str,
        audio_file_basename: str,
    ) -> ClassifiedTranscription:
        """
        Determine the note type, subject and routing metadata for a transcription.
        The result is cached in the interim directory under the recording's hash.
        """
        filename = artifact_filename(creation_time, hash, CLASSIFICATION_SUFFIX)
        classification_path = Path(interim_path) / filename

        if self.storage.exists(classification_path):
            logger.info("Classification file %s already exists, reusing it", classification_path)
            return self._validate(self.read_json_artifact(classification_path), source=str(classification_path))

        debug_file = None
        if self.config.debug:
            debug_file = Path(interim_path) / (filename.removesuffix(".json") + RESPONSE_SUFFIX)

        messages = self.prompts.create_classify_prompt(text)
        response = self.client.create_completion(
            messages,
            model=self.config.models.classify_model,
            debug=self.config.debug,
            debug_file=debug_file,
            response_format=CLASSIFICATION_RESPONSE_FORMAT,
        )
        if not isinstance(response, dict):
            raise ClassificationError(f"Expected a JSON object from classification, got {type(response).__name__}")

        # Transcript fields always come from the transcription, never from the model
        payload: Dict[str, Any] = {**response, "text": text, "audioFileBasename": audio_file_basename}
        payload.pop("audio_file_basename", None)
        classified = self._validate(payload, source="classification response")

        self.write_json_artifact(classification_path, classified)
        logger.info(f"Classified as '{classified.type}': {classified.subject}")
        return classified

    def _validate(self, data: Dict[str, Any], source: str) -> ClassifiedTranscription:
        try:
            return ClassifiedTranscription.model_validate(data)
        except ValidationError as e:
            raise ClassificationError(f"Invalid classification in {source}: {e}") from e
