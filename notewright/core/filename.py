import re
import logging
import unicodedata
from datetime import datetime
from pathlib import Path
from typing import Optional

from .models import OutputConfig, OutputStructure, FilenameOption

logger = logging.getLogger("Notewright.Filename")

MAX_SLUG_LENGTH = 50

def slugify(text: Optional[str]) -> str:
    """
    Convert text to a lowercase, dash-separated, filename-safe slug.
    Unicode letters are kept; filesystem-unsafe characters are dropped.
    """
    if not text:
        return "untitled"

    text = unicodedata.normalize("NFKC", text).lower()
    # Strip unsafe filesystem chars and punctuation, keep word chars
    slug = re.sub(r"[^\w\s-]", "", text)
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")

    if len(slug) > MAX_SLUG_LENGTH:
        slug = slug[:MAX_SLUG_LENGTH].rstrip("-")

    return slug or "untitled"

class FilenameOperator:
    """Builds note directories and base filenames from a recording's creation time."""

    def __init__(self, output_dir: Path, config: OutputConfig):
        self.output_dir = Path(output_dir)
        self.config = config

    def construct_output_directory(self, creation_time: datetime) -> Path:
        structure = self.config.structure
        if structure == OutputStructure.YEAR:
            return self.output_dir / f"{creation_time.year}"
        if structure == OutputStructure.MONTH:
            return self.output_dir / f"{creation_time.year}" / f"{creation_time.month}"
        if structure == OutputStructure.DAY:
            return self.output_dir / f"{creation_time.year}" / f"{creation_time.month}" / f"{creation_time.day}"
        return self.output_dir

    def _date_prefix(self, creation_time: datetime) -> Optional[str]:
        # Components already encoded in the directory are left out of the name
        structure = self.config.structure
        if structure == OutputStructure.NONE:
            return f"{creation_time.year}-{creation_time.month}-{creation_time.day}"
        if structure == OutputStructure.YEAR:
            return f"{creation_time.month}-{creation_time.day}"
        if structure == OutputStructure.MONTH:
            return f"{creation_time.day}"
        return None

    def construct_filename(self, creation_time: datetime, type: str, hash: str, subject: Optional[str] = None) -> str:
        """
        Build the base filename (no extension) for a note.

        Example (structure=month, options=date,time,subject):
            "1-1200-12345678-note-test-subject"
        """
        options = self.config.filename_options
        parts = []

        if FilenameOption.DATE in options:
            prefix = self._date_prefix(creation_time)
            if prefix:
                parts.append(prefix)
        if FilenameOption.TIME in options:
            parts.append(creation_time.strftime("%H%M"))

        parts.append(hash)
        parts.append(slugify(type))

        if FilenameOption.SUBJECT in options and subject:
            parts.append(slugify(subject))

        filename = "-".join(parts)
        logger.debug("Constructed filename %s", filename)
        return filename
