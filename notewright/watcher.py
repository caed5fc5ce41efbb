"""File system watcher for monitoring the input directory."""

import time
import logging
from pathlib import Path
from typing import Iterable, Set
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler, FileCreatedEvent, FileMovedEvent

from .constants import FILE_STABILIZATION_CHECK_INTERVAL, FILE_WAIT_TIMEOUT
from .core.models import AppConfig
from .errors import NotewrightError
from .pipeline.processor import Processor

logger = logging.getLogger("Notewright.Watcher")

def wait_for_file(filepath: Path, timeout: int = FILE_WAIT_TIMEOUT) -> bool:
    """
    Wait for file to exist and its size to stabilize.

    Returns:
        True if file is ready, False otherwise
    """
    start = time.time()
    last_size = -1

    while time.time() - start < timeout:
        if filepath.exists():
            current_size = filepath.stat().st_size
            if current_size == last_size and current_size > 0:
                return True
            last_size = current_size
        time.sleep(FILE_STABILIZATION_CHECK_INTERVAL)
    return False

class AudioFileHandler(FileSystemEventHandler):
    """Runs new audio files through the processor, one at a time."""

    def __init__(self, processor: Processor, audio_extensions: Iterable[str]):
        self.processor = processor
        self.audio_extensions = {f".{ext}" for ext in audio_extensions}
        self.processing_files: Set[Path] = set()

    def on_created(self, event: FileCreatedEvent):
        if event.is_directory:
            return
        self.handle(Path(event.src_path))

    def on_moved(self, event: FileMovedEvent):
        # Recorders often write a temp file and rename it into place
        if event.is_directory:
            return
        self.handle(Path(event.dest_path))

    def handle(self, filepath: Path):
        filepath = filepath.resolve()
        if filepath.suffix.lower() not in self.audio_extensions:
            return

        # Avoid duplicate processing
        if filepath in self.processing_files:
            logger.debug(f"Already processing {filepath.name}, skipping")
            return

        self.processing_files.add(filepath)
        try:
            if not wait_for_file(filepath):
                logger.warning(f"File {filepath.name} did not stabilise or disappeared before processing")
                return

            logger.info(f"New file detected: {filepath.name}")
            try:
                self.processor.process(filepath)
            except NotewrightError as e:
                logger.error(f"Processing failed for {filepath.name}: {e}")
        finally:
            self.processing_files.discard(filepath)

class FileWatcher:
    """Watches the input directory for new audio files."""

    def __init__(self, config: AppConfig, processor: Processor):
        self.config = config
        self.input_dir = Path(config.paths.input).expanduser()
        self.processor = processor

    def start(self):
        self.input_dir.mkdir(parents=True, exist_ok=True)

        event_handler = AudioFileHandler(self.processor, self.config.audio_extensions)

        observer = Observer()
        observer.schedule(event_handler, str(self.input_dir), recursive=self.config.recursive)
        observer.start()

        logger.info(f"Watching for recordings in: {self.input_dir}")
        logger.info(f"Notes directory: {self.config.paths.output}")
        logger.info("Press Ctrl+C to stop.")

        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            logger.info("Stopping file watcher...")
        finally:
            observer.stop()
            observer.join()
