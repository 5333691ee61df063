"""Logging configuration for the API server.

Dual output (stdout + optional file) at the level configured by LOG_LEVEL.
Default: INFO. Set LOG_LEVEL=WARNING for production, DEBUG for verbose output.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_log_level(level_name: Optional[str]) -> int:
    """Translate a level name to a logging constant (unknown names give INFO)."""
    return LOG_LEVEL_MAP.get((level_name or "INFO").upper(), logging.INFO)


def setup_server_logging(log_file: Optional[str] = "logs/server.log", level: str = "INFO") -> None:
    """
    Configure root logger for the API server.

    Args:
        log_file: Path to log file; None or "" logs to stdout only
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Behavior:
        - Replaces any existing root handlers (no duplicates on repeated calls)
        - ISO format timestamps for consistency
        - Creates the log directory when missing
    """
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    log_level = get_log_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
