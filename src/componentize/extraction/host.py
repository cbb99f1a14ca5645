"""Boundary between the extraction pipeline and its editing host.

The pipeline never asks "what is selected right now"; callers read the host
once through :func:`read_invocation` and pass explicit values along.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from .errors import DocumentPatchError, NoSelectionError
from .models import DocumentSnapshot, SourceSpan, TextEdit, apply_text_edits

__all__ = [
    "DocumentHost",
    "EditorHost",
    "FileDocumentHost",
    "FileEditorHost",
    "LocalFileSystem",
    "ModuleFileSystem",
    "read_invocation",
]


@runtime_checkable
class EditorHost(Protocol):
    """Supplies the active document and its selection."""

    def active_document(self) -> DocumentSnapshot | None: ...

    def selection(self) -> SourceSpan | None: ...


@runtime_checkable
class DocumentHost(Protocol):
    """Applies text edits to an open document."""

    def apply_edits(
        self,
        document: DocumentSnapshot,
        edits: Sequence[TextEdit],
    ) -> None: ...


@runtime_checkable
class ModuleFileSystem(Protocol):
    """File system used to check names and write the new module."""

    def exists(self, path: Path) -> bool: ...

    def write_text(self, path: Path, text: str) -> None: ...


def read_invocation(host: EditorHost) -> tuple[DocumentSnapshot, SourceSpan]:
    """Read the document and selection from ``host`` exactly once.

    Raises:
        NoSelectionError: Without an active document or with an empty
            selection.
    """

    document = host.active_document()
    selection = host.selection()
    if document is None or selection is None or selection.is_empty:
        raise NoSelectionError()
    return document, selection


@dataclass(frozen=True, slots=True)
class FileEditorHost:
    """Editor host backed by a file on disk and a fixed selection."""

    path: Path
    span: SourceSpan | None
    encoding: str = "utf-8"

    def active_document(self) -> DocumentSnapshot | None:
        if not self.path.is_file():
            return None
        return DocumentSnapshot(
            path=self.path,
            text=self.path.read_text(encoding=self.encoding),
        )

    def selection(self) -> SourceSpan | None:
        return self.span


@dataclass(frozen=True, slots=True)
class FileDocumentHost:
    """Apply edits by rewriting the document file in place."""

    encoding: str = "utf-8"

    def apply_edits(
        self,
        document: DocumentSnapshot,
        edits: Sequence[TextEdit],
    ) -> None:
        current = document.path.read_text(encoding=self.encoding)
        if current != document.text:
            raise DocumentPatchError(
                f"{document.path} changed on disk since it was read"
            )
        document.path.write_text(
            apply_text_edits(document.text, edits),
            encoding=self.encoding,
        )


@dataclass(frozen=True, slots=True)
class LocalFileSystem:
    """Write new modules to the local disk, never overwriting a file."""

    encoding: str = "utf-8"

    def exists(self, path: Path) -> bool:
        return path.exists()

    def write_text(self, path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("x", encoding=self.encoding) as handle:
            handle.write(text)
