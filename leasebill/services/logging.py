"""Logging configuration for the API server and the billing CLI.

Every record goes to stdout and to a log file, with the level taken from
LOG_LEVEL (default INFO). DEBUG shows per-batch progress of billing runs.
"""

import logging
import sys
from pathlib import Path

from leasebill.config import get_settings

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Chatty third-party loggers, raised to WARNING unless running at DEBUG
NOISY_LOGGERS = ("stripe", "aiosqlite")


def get_log_level(level_name: str | None = None) -> int:
    """Resolve a level name, falling back to the LOG_LEVEL setting.

    Returns:
        Logging level constant (default: INFO)
    """
    level_str = (level_name or get_settings().log_level).upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


def setup_server_logging(log_file: str | None = None, level_name: str | None = None) -> None:
    """
    Configure the root logger for the API server or a billing run.

    Args:
        log_file: Path to log file (default: LOG_FILE setting)
        level_name: Level name overriding LOG_LEVEL

    Calling it again replaces the handlers instead of stacking new ones.
    """
    log_path = Path(log_file or get_settings().log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    log_level = get_log_level(level_name)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    for handler in (logging.StreamHandler(sys.stdout), logging.FileHandler(log_path)):
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    third_party_level = log_level if log_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)
