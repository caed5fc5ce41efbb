import json
import logging
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Optional

from .base import BasePhase, PhaseName, artifact_filename
from ..constants import CONTEXT_DIRNAME, HASH_LENGTH, INTERIM_DIRNAME, TRANSCRIPTION_SUFFIX
from ..core.filename import FilenameOperator
from ..core.models import LocateResult
from ..errors import FilesystemError

logger = logging.getLogger("Notewright.Locate")

class LocatePhase(BasePhase):
    phase_name = PhaseName.LOCATE

    def __init__(self, config, operator: FilenameOperator, storage=None):
        super().__init__(config, storage)
        self.operator = operator

    def locate(self, source_file: Path) -> LocateResult:
        """
        Work out where a recording's note and artifacts go and compute its hash.
        Creates the output, context and interim directories.
        """
        source_file = Path(source_file)
        if not self.storage.exists(source_file):
            raise FilesystemError(f"Source file not found: {source_file}")

        creation_time = self._get_creation_time(source_file)
        file_hash = self.storage.hash_file(source_file, HASH_LENGTH)

        output_path = self.operator.construct_output_directory(creation_time)
        context_path = output_path / CONTEXT_DIRNAME
        interim_path = output_path / INTERIM_DIRNAME
        for directory in (output_path, context_path, interim_path):
            self.storage.create_directory(directory)

        result = LocateResult(
            creation_time=creation_time,
            output_path=output_path,
            context_path=context_path,
            interim_path=interim_path,
            transcription_filename=artifact_filename(creation_time, file_hash, TRANSCRIPTION_SUFFIX),
            hash=file_hash,
        )
        logger.debug(f"Located {source_file.name}: hash={file_hash}, created={creation_time.isoformat()}, output={output_path}")
        return result

    def _get_creation_time(self, source_file: Path) -> datetime:
        """
        Prefer the recording time embedded in the container metadata,
        then st_birthtime (macOS) and finally st_mtime.
        """
        metadata_time = self._probe_creation_time(source_file)
        if metadata_time:
            return metadata_time

        try:
            stat_info = source_file.stat()
        except OSError as e:
            raise FilesystemError(f"Could not read metadata for {source_file}: {e}") from e

        if hasattr(stat_info, "st_birthtime"):
            return datetime.fromtimestamp(stat_info.st_birthtime)
        return datetime.fromtimestamp(stat_info.st_mtime)

    def _probe_creation_time(self, source_file: Path) -> Optional[datetime]:
        cmd = [
            "ffprobe", "-v", "error",
            "-show_entries", "format_tags=creation_time",
            "-of", "json",
            str(source_file),
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True)
            info = json.loads(result.stdout or "{}")
        except FileNotFoundError:
            logger.debug("ffprobe not found, using file timestamps")
            return None
        except (subprocess.CalledProcessError, json.JSONDecodeError) as e:
            logger.debug(f"ffprobe could not read {source_file.name}: {e}")
            return None

        creation_time_str = info.get("format", {}).get("tags", {}).get("creation_time")
        if not creation_time_str:
            return None

        try:
            parsed = datetime.fromisoformat(creation_time_str.replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Could not parse creation_time from metadata: {creation_time_str}")
            return None

        # Normalise to naive local time to match the filesystem fallback
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed
