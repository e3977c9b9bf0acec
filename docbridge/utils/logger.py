"""
Logging utilities for applications embedding docbridge.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from docbridge.config import get_settings

DEFAULT_LOG_FILE = "docbridge.log"

_logging_initialized = False


def get_root_logger() -> logging.Logger:
    """Return the process-wide root logger."""
    return logging.getLogger("")


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _build_file_handler(log_dir: str, log_file: str, *, formatter: logging.Formatter) -> RotatingFileHandler:
    os.makedirs(log_dir, exist_ok=True)
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, log_file),
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    return file_handler


def _ensure_handlers(logger: logging.Logger, handlers: list[logging.Handler]) -> None:
    existing = set(logger.handlers)
    for handler in handlers:
        if handler not in existing:
            logger.addHandler(handler)


def setup_logging(
    *,
    level: str | int | None = None,
    log_dir: Optional[str] = None,
    log_file: str = DEFAULT_LOG_FILE,
    with_console: bool = True,
) -> logging.Logger:
    """
    Configure the root logger with a console and an optional rotating file handler.
    The level defaults to the configured ``LOG_LEVEL``.
    Safe to call multiple times; handlers are only added once.
    """
    global _logging_initialized

    root = get_root_logger()
    root.setLevel(get_settings().LOG_LEVEL if level is None else level)

    if _logging_initialized:
        return root
    _logging_initialized = True

    formatter = _build_formatter()
    handlers: list[logging.Handler] = []
    if with_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        handlers.append(console)
    if log_dir is not None:
        handlers.append(_build_file_handler(log_dir, log_file, formatter=formatter))

    _ensure_handlers(root, handlers)
    return root
