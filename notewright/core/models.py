from enum import Enum
from typing import List, Optional
from datetime import datetime
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from ..constants import DEFAULT_AUDIO_EXTENSIONS, DEFAULT_NOTE_EXTENSION

class NoteType(str, Enum):
    """Note categories with a dedicated compose template."""
    NOTE = "note"
    MEETING = "meeting"
    CALL = "call"
    EMAIL = "email"
    IDEA = "idea"
    TASK = "task"

class OutputStructure(str, Enum):
    NONE = "none"
    YEAR = "year"
    MONTH = "month"
    DAY = "day"

class FilenameOption(str, Enum):
    DATE = "date"
    TIME = "time"
    SUBJECT = "subject"

# --- Configuration ---

class ModelsConfig(BaseModel):
    completion: str = "gpt-4o"
    classify: Optional[str] = None
    compose: Optional[str] = None
    transcription: str = "whisper-1"

    @property
    def classify_model(self) -> str:
        return self.classify or self.completion

    @property
    def compose_model(self) -> str:
        return self.compose or self.completion

class PathsConfig(BaseModel):
    input: str = "./recordings"
    output: str = "./notes"
    processed: Optional[str] = None
    context: List[str] = Field(default_factory=list)

class OutputConfig(BaseModel):
    structure: OutputStructure = OutputStructure.MONTH
    filename_options: List[FilenameOption] = Field(
        default_factory=lambda: [FilenameOption.DATE, FilenameOption.TIME, FilenameOption.SUBJECT]
    )
    extension: str = DEFAULT_NOTE_EXTENSION

    @field_validator("extension")
    @classmethod
    def _strip_dot(cls, value: str) -> str:
        return value.lstrip(".")

class OpenAIConfig(BaseModel):
    api_key: Optional[SecretStr] = Field(default=None, description="OpenAI API key")
    base_url: Optional[str] = None
    timeout: float = 600

class AppConfig(BaseModel):
    debug: bool = False
    dry_run: bool = False
    recursive: bool = False
    audio_extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_AUDIO_EXTENSIONS))
    models: ModelsConfig = Field(default_factory=ModelsConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)

    @field_validator("audio_extensions")
    @classmethod
    def _normalize_extensions(cls, value: List[str]) -> List[str]:
        return [ext.lower().lstrip(".") for ext in value]

# --- Pipeline records ---

class LocateResult(BaseModel):
    """Where a source file's artifacts live and the hash that keys them."""
    model_config = ConfigDict(frozen=True)

    creation_time: datetime
    output_path: Path
    context_path: Path
    interim_path: Path
    transcription_filename: str
    hash: str

class Transcription(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str
    audio_file_basename: str = Field(alias="audioFileBasename")

class ClassificationSignal(BaseModel):
    type: str
    value: str
    weight: float

class ClassifiedTranscription(Transcription):
    type: str
    subject: str
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    classification_signals: List[ClassificationSignal] = Field(default_factory=list, alias="classificationSignals")
    reasoning: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    project: Optional[str] = None

    @field_validator("type", "subject")
    @classmethod
    def _require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("type")
    @classmethod
    def _lower_type(cls, value: str) -> str:
        return value.lower()

    @field_validator("classification_signals", "tags", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        # Models send null for lists they have nothing to put in
        return [] if value is None else value

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: List[str]) -> List[str]:
        seen = []
        for tag in value:
            if tag and tag not in seen:
                seen.append(tag)
        return seen

class ProcessingResult(BaseModel):
    """Outcome of running one source file through the pipeline."""
    source_file: Path
    hash: str
    note_path: Path
    note: Optional[str] = None
    processed_path: Path
