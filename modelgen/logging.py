"""Logging utilities for modelgen commands."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

_LOGGER_NAME = "modelgen"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the modelgen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure root logger for modelgen with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[modelgen] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


@contextmanager
def progress(logger: logging.Logger, message: str) -> Iterator[None]:
    """Log the start and outcome of a pipeline stage."""
    logger.info("%s", message)
    started = time.perf_counter()
    try:
        yield
    except Exception:
        logger.error("%s failed after %.2fs", message.rstrip(". "), time.perf_counter() - started)
        raise
    logger.info("%s done (%.2fs)", message.rstrip(". "), time.perf_counter() - started)


__all__ = ["configure_logging", "get_logger", "progress"]
