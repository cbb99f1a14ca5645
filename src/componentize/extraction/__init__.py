"""Extract a selected JSX element into its own React component module."""

from __future__ import annotations

from .classifier import classify, sort_imports
from .emitter import emit_module
from .errors import (
    DocumentPatchError,
    ExtractionError,
    InvalidFragmentError,
    ModuleNameExhaustedError,
    ModuleWriteError,
    NoSelectionError,
    ParserUnavailableError,
    ScopeResolutionError,
)
from .fragment import JsxFragment, is_extractable, parse_jsx
from .host import (
    DocumentHost,
    EditorHost,
    FileDocumentHost,
    FileEditorHost,
    LocalFileSystem,
    ModuleFileSystem,
    read_invocation,
)
from .identifiers import extract_identifiers
from .models import (
    DocumentSnapshot,
    JsxProp,
    NewModuleDescriptor,
    RequiredImportDeclaration,
    ScopeTable,
    SourceSpan,
    TextEdit,
    apply_text_edits,
)
from .naming import module_descriptor
from .scope import resolve_scope
from .service import (
    ExtractionPlan,
    ExtractionResult,
    ExtractionService,
    ExtractionStage,
)

__all__ = [
    "DocumentHost",
    "DocumentPatchError",
    "DocumentSnapshot",
    "EditorHost",
    "ExtractionError",
    "ExtractionPlan",
    "ExtractionResult",
    "ExtractionService",
    "ExtractionStage",
    "FileDocumentHost",
    "FileEditorHost",
    "InvalidFragmentError",
    "JsxFragment",
    "JsxProp",
    "LocalFileSystem",
    "ModuleFileSystem",
    "ModuleNameExhaustedError",
    "ModuleWriteError",
    "NewModuleDescriptor",
    "NoSelectionError",
    "ParserUnavailableError",
    "RequiredImportDeclaration",
    "ScopeResolutionError",
    "ScopeTable",
    "SourceSpan",
    "TextEdit",
    "apply_text_edits",
    "classify",
    "emit_module",
    "extract_identifiers",
    "is_extractable",
    "module_descriptor",
    "parse_jsx",
    "read_invocation",
    "resolve_scope",
    "sort_imports",
]
