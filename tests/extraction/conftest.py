"""Shared fixtures for extraction tests."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

import pytest

from componentize.extraction.fragment import JsxFragment
from componentize.extraction.identifiers import extract_identifiers
from componentize.extraction.models import (
    DocumentSnapshot,
    ExtractedIdentifier,
    ScopeTable,
    SourceSpan,
    TextEdit,
    apply_text_edits,
)
from componentize.extraction.scope import resolve_scope
from componentize.extraction.syntax import SyntaxTree


def _position(text: str, offset: int) -> tuple[int, int]:
    line = text.count("\n", 0, offset)
    column = offset - (text.rfind("\n", 0, offset) + 1)
    return line, column


def span_for(text: str, snippet: str) -> SourceSpan:
    """Selection covering the first occurrence of ``snippet`` in ``text``."""

    start = text.index(snippet)
    end = start + len(snippet)
    return SourceSpan(*_position(text, start), *_position(text, end))


@dataclass(slots=True)
class Analysis:
    tree: SyntaxTree
    scope: ScopeTable
    identifiers: tuple[ExtractedIdentifier, ...]


@pytest.fixture
def select() -> Callable[[str, str], SourceSpan]:
    return span_for


@pytest.fixture
def analyse() -> Callable[[str, str], Analysis]:
    """Parse ``text``, resolve the scope around ``snippet`` and extract."""

    def _analyse(text: str, snippet: str) -> Analysis:
        tree = SyntaxTree.parse(text)
        start = text.index(snippet)
        scope = resolve_scope(tree, start, start + len(snippet))
        fragment = JsxFragment(tree=tree, node=scope.original_element)
        return Analysis(
            tree=tree,
            scope=scope,
            identifiers=extract_identifiers(fragment),
        )

    return _analyse


@dataclass
class MemoryFileSystem:
    """In-memory :class:`ModuleFileSystem` recording writes."""

    existing: set[Path] = field(default_factory=set)
    written: dict[Path, str] = field(default_factory=dict)
    fail_with: Exception | None = None

    def exists(self, path: Path) -> bool:
        return path in self.existing or path in self.written

    def write_text(self, path: Path, text: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.written[path] = text


@dataclass
class MemoryDocumentHost:
    """In-memory :class:`DocumentHost` keeping patched texts."""

    patched: dict[Path, str] = field(default_factory=dict)
    fail_with: Exception | None = None

    def apply_edits(
        self,
        document: DocumentSnapshot,
        edits: Sequence[TextEdit],
    ) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.patched[document.path] = apply_text_edits(document.text, edits)


@dataclass
class RecordingLogger:
    """Collect ``(level, event, fields)`` tuples instead of logging."""

    records: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    def _record(self, level: str, event: str, **fields: Any) -> None:
        self.records.append((level, event, fields))

    def debug(self, event: str, **fields: Any) -> None:
        self._record("debug", event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self._record("info", event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._record("warning", event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self._record("error", event, **fields)

    @property
    def events(self) -> list[str]:
        return [event for _, event, _ in self.records]


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    return MemoryFileSystem()


@pytest.fixture
def memory_host() -> MemoryDocumentHost:
    return MemoryDocumentHost()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()
