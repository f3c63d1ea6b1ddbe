"""Centralized logging configuration for the SC Connect background jobs."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_DIR = Path(__file__).resolve().parents[2] / "logs"
DEFAULT_LOG_FILE = LOG_DIR / "sc_connect.log"
ROOT_LOGGER_NAME = "sc_connect"


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[Path, str]] = None,
    log_to_console: bool = False,
) -> logging.Logger:
    """
    Configure and return the root logger for the jobs process.

    Parameters
    ----------
    level : int or str
        Logging level (e.g., logging.INFO or "DEBUG").
    log_file : Optional[Path]
        Path to the log file. Defaults to logs/sc_connect.log.
    log_to_console : bool
        If True, also emit logs to stderr.

    Returns
    -------
    logging.Logger
        The configured root logger.
    """
    log_file = Path(log_file) if log_file else DEFAULT_LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    # Avoid adding duplicate handlers on repeated calls
    if not root_logger.handlers:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        if log_to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            root_logger.addHandler(console_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the sc_connect namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
