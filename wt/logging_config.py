"""Logging configuration for wt

stdout is reserved for the shell commands the wrapper function evaluates,
so every handler here writes to stderr or to a file.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

DEFAULT_LOG_DIR = Path.home() / '.wt'
LOG_FILE_NAME = 'wt.log'

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
SHORT_FORMAT = '[%(name)s] %(message)s'


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name when the stream is a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',     # Cyan
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str, datefmt: Optional[str] = None, stream: Optional[TextIO] = None):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.stream = stream or sys.stderr

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if not color or not self.stream.isatty():
            return super().format(record)
        # Copy so other handlers see the plain level name
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def _level_for(verbose: bool, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / LOG_FILE_NAME, mode='w')  # Overwrite each run
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=DETAILED_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(verbose: bool = False, debug: bool = False, log_dir: Optional[Path] = None) -> None:
    """
    Configure the root logger for one wt run.

    Args:
        verbose: Show INFO messages (completed git mutations)
        debug: Show DEBUG messages with timestamps and also write
            ``<log_dir>/wt.log``
        log_dir: Directory for the debug log file (defaults to ~/.wt)
    """
    level = _level_for(verbose, debug)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if debug:
        root_logger.addHandler(_file_handler(log_dir or DEFAULT_LOG_DIR))

    stream = sys.stderr
    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(level)
    if debug:
        console_handler.setFormatter(ColoredFormatter(DETAILED_FORMAT, DATE_FORMAT, stream=stream))
    else:
        console_handler.setFormatter(ColoredFormatter(SHORT_FORMAT, stream=stream))
    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a wt module.

    ``wt.services.github_service`` logs as ``github_service`` and
    ``wt.ui.picker`` as ``ui.picker``.
    """
    for prefix in ('wt.', 'services.'):
        if name.startswith(prefix):
            name = name[len(prefix):]
    return logging.getLogger(name)
