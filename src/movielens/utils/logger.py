"""Logging for the report generator.

Every component asks for a named logger through get_logger(); the
level, the log folder and whether a dated file is written all come
from settings.logging. Loggers are built once per name and reused.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"
DEFAULT_LOG_DIR = Path("logs")

_LOGGERS_CACHE: dict[str, logging.Logger] = {}


def setup_logger(
    name: str,
    level: int | str = logging.INFO,
    log_dir: Path | None = None,
    to_file: bool = True,
) -> logging.Logger:
    """Build (or fetch from cache) a named logger.

    Args:
        name: Dotted logger name, e.g. 'movielens.loader.ml-100k'.
        level: Numeric level or level name.
        log_dir: Folder of the dated log file (DEFAULT_LOG_DIR when None).
        to_file: Also write to '<name>_<YYYYMMDD>.log'.

    Returns:
        Logger writing to stdout and, optionally, to a file.
    """
    cached = _LOGGERS_CACHE.get(name)
    if cached is not None:
        return cached

    numeric_level = _resolve_level(level)
    formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)
    logger.propagate = False
    logger.handlers.clear()

    for handler in _build_handlers(name, formatter, numeric_level, log_dir, to_file):
        logger.addHandler(handler)

    _LOGGERS_CACHE[name] = logger
    return logger


def get_logger(name: str) -> logging.Logger:
    """Named logger configured from settings.logging."""
    from src.settings import settings

    return setup_logger(
        name,
        level=settings.logging.numeric_level,
        log_dir=settings.paths.project_root / settings.logging.log_dir,
        to_file=settings.logging.to_file,
    )


def _resolve_level(level: int | str) -> int:
    """Level name to number; unknown names fall back to INFO."""
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.strip().upper())
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def _build_handlers(
    name: str,
    formatter: logging.Formatter,
    level: int,
    log_dir: Path | None,
    to_file: bool,
) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [_create_console_handler(formatter, level)]
    if to_file:
        file_handler = _create_file_handler(name, formatter, level, log_dir)
        if file_handler is not None:
            handlers.append(file_handler)
    return handlers


def _create_console_handler(formatter: logging.Formatter, level: int) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def _create_file_handler(
    name: str,
    formatter: logging.Formatter,
    level: int,
    log_dir: Path | None,
) -> logging.FileHandler | None:
    """File handler on the dated log file.

    Returns:
        The handler, or None when the file cannot be opened (the logger
        then stays console-only).
    """
    try:
        handler = logging.FileHandler(_get_log_file_path(name, log_dir), encoding="utf-8")
    except OSError as e:
        print(f"Warning: Could not create log file: {e}", file=sys.stderr)
        return None
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def _get_log_file_path(name: str, log_dir: Path | None) -> Path:
    """Path of today's log file for a logger, creating its folder."""
    folder = log_dir if log_dir is not None else DEFAULT_LOG_DIR
    folder.mkdir(parents=True, exist_ok=True)

    stem = name.replace(".", "_").replace("/", "_")
    return folder / f"{stem}_{datetime.now():%Y%m%d}.log"
