"""Structured logging setup shared by the CLI and the extraction service."""

from __future__ import annotations

import gzip
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
import shutil
from typing import Any, Iterable

from rich.console import Console
from rich.logging import RichHandler
import structlog

Logger = structlog.stdlib.BoundLogger

_CONSOLE_RENDERER = structlog.dev.ConsoleRenderer(colors=False)
_JSON_RENDERER = structlog.processors.JSONRenderer(sort_keys=True)
_TIMESTAMPER = structlog.processors.TimeStamper(fmt="iso", utc=True)

_BACKUP_COUNT = 7
DEFAULT_LOG_FILENAME = "componentize.log"


def _level_number(level: str) -> int:
    """Translate a level name such as ``"debug"`` into its numeric value.

    Raises:
        ValueError: If the level name is not recognized.
    """

    name = level.strip().upper()
    value = logging.getLevelName(name)
    if isinstance(value, str):  # unknown names are echoed back as strings
        raise ValueError(f"Unsupported log level: {level!r}")
    return value


def _foreign_pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        _TIMESTAMPER,
    ]


def _install_handlers(
    root: logging.Logger,
    handlers: Iterable[logging.Handler],
) -> None:
    """Swap the root logger handlers for ``handlers``."""

    for handler in list(root.handlers):
        root.removeHandler(handler)
        try:
            handler.close()
        except Exception:  # pragma: no cover
            pass
    for handler in handlers:
        root.addHandler(handler)


def _configure_structlog() -> None:
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            _TIMESTAMPER,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _gzip_rotator(source: str, dest: str) -> None:
    """Compress the rotated log ``source`` into ``dest``."""

    with open(source, "rb") as src, gzip.open(dest, "wb") as target:
        shutil.copyfileobj(src, target)
    Path(source).unlink(missing_ok=True)


def _file_handler(log_file: Path, level: int) -> TimedRotatingFileHandler:
    handler = TimedRotatingFileHandler(
        log_file,
        when="midnight",
        backupCount=_BACKUP_COUNT,
        utc=True,
        encoding="utf-8",
        delay=True,
    )
    handler.setLevel(level)
    handler.suffix = "%Y-%m-%d"
    handler.namer = lambda name: f"{name}.gz"
    handler.rotator = _gzip_rotator
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_JSON_RENDERER,
            foreign_pre_chain=_foreign_pre_chain(),
        )
    )
    return handler


def _console_handler(level: int, console: Console | None = None) -> RichHandler:
    handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
        enable_link_path=False,
        log_time_format="%Y-%m-%d %H:%M:%S",
    )
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_CONSOLE_RENDERER,
            foreign_pre_chain=_foreign_pre_chain(),
        )
    )
    return handler


def configure_logging(
    *,
    level: str = "WARNING",
    log_dir: str | Path | None = None,
    console: Console | None = None,
) -> None:
    """Configure structlog on top of stdlib logging.

    Console output goes through Rich on stderr so it never mixes with
    command output. When ``log_dir`` is given, JSON lines are also written to
    ``<log_dir>/componentize.log`` with daily gzip rotation.

    Args:
        level: Root log level name (case-insensitive).
        log_dir: Optional directory receiving the JSON log file.
        console: Optional Rich console override, mostly for tests.

    Raises:
        ValueError: If ``level`` is not a known level name.
    """

    numeric_level = _level_number(level)

    root = logging.getLogger()
    root.setLevel(numeric_level)

    _configure_structlog()

    handlers: list[logging.Handler] = [
        _console_handler(numeric_level, console=console)
    ]
    if log_dir is not None:
        directory = Path(log_dir).expanduser().resolve(strict=False)
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _file_handler(directory / DEFAULT_LOG_FILENAME, numeric_level)
        )

    _install_handlers(root, handlers)
    logging.captureWarnings(True)


def get_logger(name: str | None = None, **initial_context: Any) -> Logger:
    """Return a structured logger bound to ``initial_context``.

    Example:
        >>> logger = get_logger(__name__, stage="scope")
        >>> isinstance(logger, structlog.stdlib.BoundLogger)
        True
    """

    return structlog.get_logger(name).bind(**initial_context)


__all__ = ["DEFAULT_LOG_FILENAME", "Logger", "configure_logging", "get_logger"]
