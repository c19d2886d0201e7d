"""Logging configuration for PageSync."""

import logging
import sys
from logging.handlers import RotatingFileHandler
import os
from typing import Optional
from .utils import ensure_dir_exists

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
DEFAULT_LOG_DIR = 'logs'
DEFAULT_LOG_FILE = 'pagesync.log'

# Whisper pulls in numba, which is very chatty at DEBUG
NOISY_LOGGERS = ("numba", "urllib3")

def parse_log_level(name: str) -> int:
    """Maps a level name such as 'debug' or 'INFO' to its logging constant."""
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level

def _reset_root(log_level: int) -> logging.Logger:
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(log_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return root

def setup_console_logging(log_level: int = logging.INFO, log_format: str = DEFAULT_LOG_FORMAT) -> None:
    """
    Console-only logging, used until the config (and so the log directory) is known.
    """
    root = _reset_root(log_level)
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter(log_format, datefmt=DEFAULT_DATE_FORMAT))
    stream_handler.setLevel(log_level)
    root.addHandler(stream_handler)

def setup_logging(
    log_level: int = logging.INFO,
    log_dir: str = DEFAULT_LOG_DIR,
    log_file: str = DEFAULT_LOG_FILE,
    log_format: str = DEFAULT_LOG_FORMAT,
    max_bytes: int = 10 * 1024 * 1024, # 10 MB
    backup_count: int = 5
) -> Optional[str]:
    """
    Logs to stdout and to a rotating file under log_dir.

    Calling it again replaces the handlers installed by a previous call.

    Args:
        log_level: The minimum logging level (e.g., logging.INFO, logging.DEBUG).
        log_dir: The directory to store log files.
        log_file: The name of the log file.
        log_format: The format string for log messages.
        max_bytes: Maximum size of a log file before rotation.
        backup_count: Number of backup log files to keep.

    Returns:
        The log file path, or None when only console logging could be set up.
    """
    setup_console_logging(log_level, log_format)
    root = logging.getLogger()

    try:
        ensure_dir_exists(log_dir)
        log_path = os.path.join(log_dir, log_file)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
    except Exception as e:
        # Console logging still works without the file handler
        root.error(f"Failed to set up file logging handler at {log_dir}/{log_file}: {e}", exc_info=True)
        return None

    file_handler.setFormatter(logging.Formatter(log_format, datefmt=DEFAULT_DATE_FORMAT))
    root.addHandler(file_handler)
    root.info(f"Logging initialized. Log file: {log_path}")
    return log_path

def setup_logging_from_config(config: dict, log_level: int = logging.INFO) -> Optional[str]:
    """Applies the log_dir/log_file settings of a loaded config."""
    return setup_logging(
        log_level=log_level,
        log_dir=config.get('log_dir') or DEFAULT_LOG_DIR,
        log_file=config.get('log_file') or DEFAULT_LOG_FILE
    )
