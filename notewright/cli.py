import argparse
import sys
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .core.config import load_config
from .core.console import console
from .core.filename import FilenameOperator
from .core.models import AppConfig
from .core.storage import Storage
from .errors import ConfigurationError, NotewrightError
from .pipeline.processor import Processor
from .providers.openai import OpenAIClient

logger = logging.getLogger("Notewright.CLI")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="notewright", description="Notewright - turn voice recordings into markdown notes.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress terminal output; the log file still records everything.")
    parser.add_argument("--config", help="Path to a config YAML file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser("process", help="Process audio files or directories")
    process_parser.add_argument("paths", nargs="+", help="Audio files or directories containing audio files")
    process_parser.add_argument("--output-dir", help="Directory notes are written to")
    process_parser.add_argument("--processed-dir", help="Move processed recordings here")
    process_parser.add_argument("--model", help="Completion model used for classify and compose")
    process_parser.add_argument("--recursive", action="store_true", help="Scan directories recursively")
    process_parser.add_argument("--dry-run", action="store_true", help="Do not move recordings after processing")
    process_parser.add_argument("--debug", action="store_true", help="Write raw provider responses to the interim directory")

    watch_parser = subparsers.add_parser("watch", help="Watch the input directory and process new recordings")
    watch_parser.add_argument("--input-dir", help="Directory to watch")
    watch_parser.add_argument("--output-dir", help="Directory notes are written to")
    watch_parser.add_argument("--processed-dir", help="Move processed recordings here")
    watch_parser.add_argument("--debug", action="store_true", help="Write raw provider responses to the interim directory")

    return parser

def config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate CLI flags into a nested dict merged over the config file."""
    overrides: Dict[str, Any] = {}
    paths: Dict[str, Any] = {}

    if getattr(args, "input_dir", None):
        paths["input"] = args.input_dir
    if getattr(args, "output_dir", None):
        paths["output"] = args.output_dir
    if getattr(args, "processed_dir", None):
        paths["processed"] = args.processed_dir
    if paths:
        overrides["paths"] = paths

    if getattr(args, "model", None):
        overrides["models"] = {"completion": args.model}
    if getattr(args, "recursive", False):
        overrides["recursive"] = True
    if getattr(args, "dry_run", False):
        overrides["dry_run"] = True
    if getattr(args, "debug", False):
        overrides["debug"] = True

    return overrides

def collect_audio_files(paths: List[str], config: AppConfig) -> List[Path]:
    """Expand files and directories into a sorted, de-duplicated list of audio files."""
    extensions = {f".{ext}" for ext in config.audio_extensions}
    files: List[Path] = []

    for raw in paths:
        path = Path(raw).expanduser()
        if path.is_dir():
            pattern = "**/*" if config.recursive else "*"
            candidates = sorted(p for p in path.glob(pattern) if p.is_file())
        elif path.is_file():
            candidates = [path]
        else:
            logger.error(f"File not found: {path}")
            continue

        for candidate in candidates:
            if candidate.suffix.lower() not in extensions:
                if candidate == path:
                    logger.error(f"Unsupported file format: {path.suffix}. Supported: {', '.join(sorted(extensions))}")
                continue
            resolved = candidate.resolve()
            if resolved not in files:
                files.append(resolved)

    return files

def build_processor(config: AppConfig) -> Processor:
    storage = Storage()
    operator = FilenameOperator(Path(config.paths.output).expanduser(), config.output)
    client = OpenAIClient(config.openai, storage)
    return Processor(config, operator, client, storage)

def run_process(files: List[Path], processor: Processor) -> int:
    """Process files one after another; a failure is logged and the next file still runs."""
    failed = 0
    for file_path in files:
        try:
            with console.status(f"Processing {file_path.name}"):
                result = processor.process(file_path)
        except ConfigurationError:
            raise
        except NotewrightError as e:
            failed += 1
            logger.error(f"Failed to process {file_path.name}: {e}")
            continue

        if result.note is None:
            console.success(f"{file_path.name}: note already exists")
        else:
            console.success(f"{file_path.name} -> {result.note_path}")

    if failed:
        logger.error(f"{failed} of {len(files)} file(s) failed")
        return 1
    return 0

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    from .utils import setup_logging

    try:
        config = load_config(args.config, overrides=config_overrides(args))
    except ConfigurationError as e:
        setup_logging(debug=args.verbose)
        logger.error(str(e))
        return 1

    output_mode = "silent" if args.quiet else "standard"
    setup_logging(debug=args.verbose or config.debug, output_mode=output_mode)

    try:
        processor = build_processor(config)

        if args.command == "process":
            files = collect_audio_files(args.paths, config)
            if not files:
                logger.error("No audio files to process.")
                return 1
            logger.info(f"Processing {len(files)} file(s)")
            return run_process(files, processor)

        if args.command == "watch":
            from .watcher import FileWatcher
            FileWatcher(config, processor).start()
            return 0

    except ConfigurationError as e:
        console.error_panel(str(e), title="Configuration Error")
        return 1

    parser.print_help()
    return 0

if __name__ == "__main__":
    sys.exit(main())
