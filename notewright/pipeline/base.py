import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel

from ..core.models import AppConfig
from ..core.storage import Storage
from ..errors import FilesystemError

logger = logging.getLogger("Notewright.Pipeline")

class PhaseName(str, Enum):
    LOCATE = "locate"
    TRANSCRIBE = "transcribe"
    CLASSIFY = "classify"
    COMPOSE = "compose"
    COMPLETE = "complete"

def artifact_filename(creation_time: datetime, hash: str, suffix: str) -> str:
    """Interim artifact name keyed by recording date and hash, e.g. 2023-01-01-12345678.transcription.json"""
    return f"{creation_time.strftime('%Y-%m-%d')}-{hash}{suffix}"

class BasePhase:
    """Shared plumbing for pipeline phases: configuration, storage and JSON artifacts."""

    phase_name: PhaseName

    def __init__(self, config: AppConfig, storage: Optional[Storage] = None):
        self.config = config
        self.storage = storage or Storage()

    def read_json_artifact(self, path: Path) -> Dict[str, Any]:
        """Load a cached JSON artifact. A file that is not valid JSON is a FilesystemError."""
        content = self.storage.read_file(path, "utf-8")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise FilesystemError(f"Cached artifact {path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise FilesystemError(f"Cached artifact {path} does not contain a JSON object")
        return data

    def write_json_artifact(self, path: Path, model: BaseModel) -> None:
        self.storage.write_file(path, model.model_dump_json(by_alias=True, indent=2), "utf-8")
        logger.debug(f"[{self.phase_name.value}] Wrote artifact {path}")
