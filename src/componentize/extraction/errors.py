"""Domain-specific exceptions for component extraction."""

from __future__ import annotations


class ExtractionError(RuntimeError):
    """Base error for extraction failures; ``str(exc)`` is user-facing."""


class NoSelectionError(ExtractionError):
    """Raised when there is no active document or the selection is empty."""

    def __init__(self, message: str = "No jsx is selected.") -> None:
        super().__init__(message)


class InvalidFragmentError(ExtractionError):
    """Raised when the selection is not exactly one JSX element."""

    def __init__(
        self,
        message: str = "Could not extract a component from the selection",
    ) -> None:
        super().__init__(message)


class ScopeResolutionError(ExtractionError):
    """Raised when the selected element cannot be located in its document."""


class ModuleNameExhaustedError(ExtractionError):
    """Raised when every candidate module file name is already taken."""


class ModuleWriteError(ExtractionError):
    """Raised when writing the new component module fails."""


class DocumentPatchError(ExtractionError):
    """Raised when the host fails to apply edits to the active document."""


class ParserUnavailableError(ExtractionError):
    """Raised when the tree-sitter TSX grammar cannot be loaded."""


__all__ = [
    "DocumentPatchError",
    "ExtractionError",
    "InvalidFragmentError",
    "ModuleNameExhaustedError",
    "ModuleWriteError",
    "NoSelectionError",
    "ParserUnavailableError",
    "ScopeResolutionError",
]
