import logging
from datetime import datetime
from pathlib import Path

from .base import BasePhase, PhaseName
from ..core.filename import slugify

logger = logging.getLogger("Notewright.Complete")

class CompletePhase(BasePhase):
    phase_name = PhaseName.COMPLETE

    def processed_filename(self, type: str, subject: str, hash: str, creation_time: datetime, source_file: Path) -> str:
        """e.g. 2023-1-1-12345678-note-test-subject.mp3"""
        date = f"{creation_time.year}-{creation_time.month}-{creation_time.day}"
        return f"{date}-{hash}-{slugify(type)}-{slugify(subject)}{source_file.suffix}"

    def complete(self, type: str, subject: str, hash: str, creation_time: datetime, source_file: Path) -> Path:
        """
        Move the processed recording into the processed directory.

        Returns:
            The recording's new path, or the original path when no processed
            directory is configured.
        """
        source_file = Path(source_file)
        processed_dir = self.config.paths.processed
        if not processed_dir:
            logger.debug("No processed directory configured, leaving %s in place", source_file)
            return source_file

        processed_dir = Path(processed_dir).expanduser()
        new_path = processed_dir / self.processed_filename(type, subject, hash, creation_time, source_file)

        if self.config.dry_run:
            logger.info("Dry run: would move %s to %s", source_file, new_path)
            return new_path

        self.storage.create_directory(processed_dir)
        self.storage.move_file(source_file, new_path)
        logger.info("Moved %s to %s", source_file.name, new_path)
        return new_path
