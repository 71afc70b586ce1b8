"""
Logging setup utilities for the player process.

Configures the root logger with a console handler and, optionally, a file
handler so every module can simply use ``logging.getLogger(__name__)``.
"""

import logging
from pathlib import Path
from typing import Optional


DEFAULT_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> Optional[Path]:
    """
    Set up logging with a console handler and an optional file handler.

    Calling it again replaces the handlers installed by a previous call.

    Args:
        level: Logging level (default: logging.INFO)
        log_file: Optional path of a log file; parent directories are created
        format_string: Optional custom format string. If None, uses default format.

    Returns:
        Path to the log file, or None when logging only to the console

    Example:
        >>> setup_logging(logging.DEBUG)
        >>> logging.getLogger(__name__).debug("visible")
    """
    formatter = logging.Formatter(
        format_string or DEFAULT_FORMAT,
        datefmt='%H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file is None:
        return None

    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    return log_file


def level_from_verbosity(verbosity: int) -> int:
    """Map the number of ``-v`` flags to a logging level."""
    return logging.DEBUG if verbosity > 0 else logging.INFO
