"""Logging for probopt optimizers.

Optimizers report per-iteration progress at DEBUG level, convergence at INFO
and recoverable anomalies (iteration limits, stalled line searches, skipped
quasi-Newton updates) at WARNING. Every logger lives under the ``probopt``
namespace, writes to its own handler and does not propagate to the root
logger, so tracing an optimizer never floods an application's log.

The initial level is read from the ``PROBOPT_LOG_LEVEL`` environment variable
(``WARNING`` when unset).
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import IO, Iterator, Optional

import numpy as np

LEVEL_ENV_VAR = "PROBOPT_LOG_LEVEL"
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_loggers: dict[str, logging.Logger] = {}


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown logging level {level!r}")
        return resolved
    return level


def _level_from_env() -> int:
    value = os.environ.get(LEVEL_ENV_VAR)
    if not value:
        return logging.WARNING
    try:
        return _resolve_level(value)
    except ValueError:
        return logging.WARNING


_level = _level_from_env()
_stream: Optional[IO[str]] = None
_formatter = logging.Formatter(_DEFAULT_FORMAT)


def _install_handler(logger: logging.Logger) -> None:
    for old in logger.handlers[:]:
        logger.removeHandler(old)
    handler = logging.StreamHandler(_stream if _stream is not None else sys.stderr)
    handler.setLevel(_level)
    handler.setFormatter(_formatter)
    logger.addHandler(handler)
    logger.setLevel(_level)


def _qualified(name: Optional[str]) -> str:
    if name is None or name == "probopt":
        return "probopt"
    if name.startswith("probopt."):
        return name
    return f"probopt.{name}"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the cached ``probopt`` logger for ``name``.

    Names outside the package are prefixed with ``probopt.``; ``None``
    gives the package logger.

    Example:
        >>> from probopt.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Starting BFGS run")
    """
    logger_name = _qualified(name)
    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        _install_handler(logger)
        logger.propagate = False
    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every probopt logger, current and future.

    Args:
        level: A ``logging`` constant or its name (``"DEBUG"``, ``"info"``...).

    Raises:
        ValueError: if ``level`` is a name ``logging`` does not know.
    """
    global _level
    _level = _resolve_level(level)
    for logger in _loggers.values():
        logger.setLevel(_level)
        for handler in logger.handlers:
            handler.setLevel(_level)


def get_log_level() -> int:
    """Level applied to probopt loggers."""
    return _level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """Route every probopt logger to ``stream`` at ``level``.

    Existing handlers are replaced, and loggers created later pick up the
    same stream, level and format. Call it once at startup, e.g.
    ``configure_logging(level="DEBUG")`` to trace every optimizer iteration.

    Args:
        level: Logging level (default: WARNING).
        format_string: ``logging.Formatter`` format. Defaults to
            ``[LEVEL] name: message``.
        stream: Output stream (default: ``sys.stderr``).
    """
    global _level, _stream, _formatter
    _level = _resolve_level(level)
    _stream = stream
    _formatter = logging.Formatter(format_string or _DEFAULT_FORMAT)
    for logger in _loggers.values():
        _install_handler(logger)


@contextmanager
def log_level(level: int | str) -> Iterator[None]:
    """Temporarily set the probopt log level, restoring it on exit.

    Example:
        >>> from probopt.logging import log_level
        >>> with log_level("DEBUG"):
        ...     pass  # run one optimizer with per-iteration tracing
    """
    previous = _level
    set_log_level(level)
    try:
        yield
    finally:
        set_log_level(previous)


def format_vector(x: np.ndarray, precision: int = 6) -> str:
    """Compact one-line rendering of a point or gradient for log messages."""
    return np.array2string(
        np.asarray(x, dtype=float),
        precision=precision,
        separator=", ",
        max_line_width=10_000,
        threshold=16,
        edgeitems=3,
    )


__all__ = [
    "LEVEL_ENV_VAR",
    "configure_logging",
    "format_vector",
    "get_log_level",
    "get_logger",
    "log_level",
    "set_log_level",
]
