import logging
import os
from pathlib import Path
from typing import Optional, Tuple
from logging.handlers import TimedRotatingFileHandler
from rich.logging import RichHandler
from notewright.core.console import console as console_manager

LOG_FILENAME = "notewright.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
NOISY_LOGGERS = ("openai", "httpx", "httpcore", "urllib3", "watchdog", "asyncio")

def default_log_dir() -> Path:
    """$XDG_STATE_HOME/notewright/logs, or ~/.local/state/notewright/logs"""
    xdg_state = os.environ.get("XDG_STATE_HOME")
    base = Path(xdg_state) if xdg_state else Path.home() / ".local" / "state"
    return base / "notewright" / "logs"

def handler_levels(debug: bool, output_mode: str) -> Tuple[int, int]:
    """(console level, file level). Silent mode still logs everything to file."""
    if output_mode == "silent":
        return logging.CRITICAL, logging.DEBUG
    level = logging.DEBUG if debug else logging.INFO
    return level, level

def setup_logging(log_dir: Optional[str] = None, debug: bool = False, output_mode: str = "standard") -> logging.Logger:
    """Configures the Notewright logger with a rich console handler and a daily rotating file.

    Args:
        log_dir: Directory for log files, defaults to default_log_dir()
        debug: Log DEBUG records instead of INFO
        output_mode: 'standard', 'verbose' or 'silent'. 'silent' keeps the terminal quiet.
    """
    log_path = Path(log_dir) if log_dir else default_log_dir()
    console_level, file_level = handler_levels(debug, output_mode)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger("Notewright")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    console_manager.configure(output_mode=output_mode, debug=debug)

    # Called again from the watcher or tests: only adjust levels
    if logger.handlers:
        for handler in logger.handlers:
            if isinstance(handler, TimedRotatingFileHandler):
                handler.setLevel(file_level)
            elif isinstance(handler, RichHandler):
                handler.setLevel(console_level)
        return logger

    console_handler = RichHandler(
        console=console_manager.console,
        rich_tracebacks=True,
        markup=False,
        show_time=True,
        show_path=False,
    )
    console_handler.setLevel(console_level)
    logger.addHandler(console_handler)

    log_file = log_path / LOG_FILENAME
    try:
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(log_file, when="midnight", interval=1, backupCount=30)
    except OSError as e:
        logger.warning("Could not create log file at %s: %s. Logging to console only.", log_file, e)
        return logger

    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(file_handler)
    return logger
