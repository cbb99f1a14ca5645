"""Tests for :mod:`componentize.core.logging`."""

from __future__ import annotations

import gzip
import io
import json
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import pytest
from rich.console import Console
from rich.logging import RichHandler

from componentize.core.logging import configure_logging, get_logger


def _clear_root_handlers() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        try:
            handler.close()
        except Exception:  # pragma: no cover
            pass


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Ensure each test runs with a clean logging configuration."""

    _clear_root_handlers()
    yield
    _clear_root_handlers()


def _build_console() -> Console:
    """Return a console that writes to an in-memory buffer for tests."""

    buffer = io.StringIO()
    return Console(file=buffer, width=120, record=True)


def test_configure_logging_writes_json_lines(tmp_path: Path) -> None:
    log_dir = tmp_path / "logs"

    configure_logging(level="debug", log_dir=log_dir, console=_build_console())

    root = logging.getLogger()
    rich_handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
    file_handlers = [h for h in root.handlers if isinstance(h, TimedRotatingFileHandler)]

    assert len(rich_handlers) == 1, "Expected a single Rich console handler"
    assert len(file_handlers) == 1, "Expected a file handler for the log directory"

    log_file = Path(file_handlers[0].baseFilename)
    assert log_file == (log_dir / "componentize.log").resolve()

    logger = get_logger(__name__, component="extraction")
    logger.info("scope-resolved", bindings=3)

    for handler in root.handlers:
        handler.flush()

    payload = json.loads(log_file.read_text(encoding="utf-8").strip())

    assert payload["event"] == "scope-resolved"
    assert payload["component"] == "extraction"
    assert payload["bindings"] == 3
    assert payload["level"] == "info"


def test_configure_logging_without_log_dir_omits_file_handler() -> None:
    configure_logging(level="info", console=_build_console())

    root = logging.getLogger()
    assert root.level == logging.INFO
    assert any(isinstance(h, RichHandler) for h in root.handlers)
    assert all(
        not isinstance(h, TimedRotatingFileHandler) for h in root.handlers
    ), "No file handler should be registered without a log directory"


def test_configure_logging_rejects_unknown_level(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        configure_logging(
            level="invalid",
            log_dir=tmp_path / "logs",
            console=_build_console(),
        )


def test_configure_logging_rotates_with_compression(tmp_path: Path) -> None:
    log_dir = tmp_path / "logs"

    configure_logging(level="warning", log_dir=log_dir, console=_build_console())
    root = logging.getLogger()
    file_handler = next(
        h for h in root.handlers if isinstance(h, TimedRotatingFileHandler)
    )

    logger = get_logger("rotate", task="rotation")
    logger.warning("pre-rotation", sample=True)

    for handler in root.handlers:
        handler.flush()

    file_handler.doRollover()

    gz_files = sorted(log_dir.glob("componentize.log.*.gz"))
    assert gz_files, "Expected a compressed log archive after rollover"

    with gzip.open(gz_files[-1], "rt", encoding="utf-8") as fh:
        archived = fh.read()

    assert "pre-rotation" in archived
    assert "task" in archived
