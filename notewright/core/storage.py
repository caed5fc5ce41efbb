"""Filesystem access for pipeline artifacts."""

import os
import shutil
import hashlib
import logging
import tempfile
from pathlib import Path
from typing import List, Union

from ..constants import CHECKSUM_BLOCK_SIZE
from ..errors import FilesystemError

logger = logging.getLogger("Notewright.Storage")

PathLike = Union[str, Path]


class Storage:
    """Reads and writes artifacts, translating OS errors into FilesystemError."""

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def is_directory(self, path: PathLike) -> bool:
        return Path(path).is_dir()

    def list_files(self, directory: PathLike) -> List[str]:
        """
        List entry names in a directory.

        Returns:
            Sorted entry names (not full paths)
        """
        try:
            return sorted(entry.name for entry in Path(directory).iterdir())
        except OSError as e:
            raise FilesystemError(f"Failed to list {directory}: {e}") from e

    def read_file(self, path: PathLike, encoding: str = "utf-8") -> str:
        try:
            with open(path, "r", encoding=encoding) as f:
                return f.read()
        except OSError as e:
            raise FilesystemError(f"Failed to read {path}: {e}") from e

    def write_file(self, path: PathLike, content: Union[str, bytes], encoding: str = "utf-8", overwrite: bool = True) -> None:
        """
        Write content atomically: a temp file in the same directory is renamed over the target.

        Args:
            path: Destination path
            content: Text or bytes to write
            encoding: Encoding used when content is text
            overwrite: When False, refuse to replace an existing file

        Raises:
            FilesystemError: If the write fails or the target exists and overwrite is False
        """
        target = Path(path)
        if not overwrite and target.exists():
            raise FilesystemError(f"Refusing to overwrite existing file {target}")

        data = content.encode(encoding) if isinstance(content, str) else content
        tmp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            if not overwrite and target.exists():
                raise FilesystemError(f"Refusing to overwrite existing file {target}")
            os.replace(tmp_name, target)
            tmp_name = None
        except OSError as e:
            raise FilesystemError(f"Failed to write {target}: {e}") from e
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug("Wrote %s", target)

    def create_directory(self, path: PathLike) -> None:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Failed to create directory {path}: {e}") from e

    def move_file(self, source: PathLike, destination: PathLike) -> None:
        try:
            Path(destination).parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(destination))
        except OSError as e:
            raise FilesystemError(f"Failed to move {source} to {destination}: {e}") from e

    def hash_file(self, path: PathLike, length: int) -> str:
        """
        Calculate the SHA256 checksum of a file, truncated to ``length`` hex characters.
        """
        sha256_hash = hashlib.sha256()
        try:
            with open(path, "rb") as f:
                for byte_block in iter(lambda: f.read(CHECKSUM_BLOCK_SIZE), b""):
                    sha256_hash.update(byte_block)
        except OSError as e:
            raise FilesystemError(f"Failed to hash {path}: {e}") from e
        return sha256_hash.hexdigest()[:length]
