"""Extraction service tying the pipeline stages together.

``plan`` is pure: it validates the selection, resolves scope, classifies
props and renders both outputs without touching the disk (other than
probing file names). ``execute`` performs the two side effects concurrently
and wraps their failures; nothing is rolled back.
"""

from __future__ import annotations

import concurrent.futures
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from componentize.core.config import ExtractSettings
from componentize.core.logging import Logger, get_logger

from .classifier import classify
from .emitter import emit_module
from .errors import (
    DocumentPatchError,
    ExtractionError,
    InvalidFragmentError,
    ModuleWriteError,
    NoSelectionError,
)
from .fragment import JsxFragment, parse_jsx
from .host import DocumentHost, EditorHost, ModuleFileSystem, read_invocation
from .identifiers import extract_identifiers
from .models import (
    DocumentSnapshot,
    ExtractedIdentifier,
    JsxProp,
    NewModuleDescriptor,
    RequiredImportDeclaration,
    SourceSpan,
    TextEdit,
    apply_text_edits,
)
from .naming import module_descriptor
from .patcher import document_edits
from .rewriter import FragmentRewriter
from .scope import resolve_scope
from .syntax import SyntaxTree

__all__ = [
    "ExtractionPlan",
    "ExtractionResult",
    "ExtractionService",
    "ExtractionStage",
]


class ExtractionStage(StrEnum):
    """Stages a single extraction moves through, in order."""

    IDLE = "idle"
    FRAGMENT_VALIDATED = "fragment-validated"
    SCOPE_RESOLVED = "scope-resolved"
    PROPS_CLASSIFIED = "props-classified"
    MODULE_EMITTED = "module-emitted"
    DOCUMENT_PATCHED = "document-patched"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class ExtractionPlan:
    """Everything an extraction will write, computed before any write."""

    document: DocumentSnapshot
    descriptor: NewModuleDescriptor
    module_text: str
    edits: tuple[TextEdit, ...]
    props: tuple[JsxProp, ...]
    required_imports: tuple[RequiredImportDeclaration, ...]
    dropped: tuple[ExtractedIdentifier, ...] = ()

    @property
    def patched_text(self) -> str:
        return apply_text_edits(self.document.text, self.edits)


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    plan: ExtractionPlan
    stage: ExtractionStage

    @property
    def component_name(self) -> str:
        return self.plan.descriptor.component_name

    @property
    def module_path(self) -> Path:
        return self.plan.descriptor.path

    @property
    def message(self) -> str:
        return f"Extracted {self.component_name}"


class ExtractionService:
    """Run extractions with fixed settings.

    Example:
        >>> service = ExtractionService()
        >>> service.stage
        <ExtractionStage.IDLE: 'idle'>
    """

    def __init__(
        self,
        settings: ExtractSettings | None = None,
        *,
        logger: Logger | None = None,
    ) -> None:
        self._settings = settings or ExtractSettings()
        self._logger = logger or get_logger(__name__, component="extraction")
        self.stage = ExtractionStage.IDLE

    @property
    def settings(self) -> ExtractSettings:
        return self._settings

    def _advance(self, stage: ExtractionStage, **context: object) -> None:
        self.stage = stage
        self._logger.info(stage.value, **context)

    def plan(
        self,
        document: DocumentSnapshot,
        selection: SourceSpan,
        *,
        filesystem: ModuleFileSystem,
    ) -> ExtractionPlan:
        """Compute the new module and the document edits.

        Raises:
            NoSelectionError: If ``selection`` is empty.
            InvalidFragmentError: If the selection is not one JSX element.
            ScopeResolutionError: If the element cannot be located.
            ModuleNameExhaustedError: If no free file name is found.
        """

        self.stage = ExtractionStage.IDLE
        if selection.is_empty:
            raise NoSelectionError()
        try:
            start, end = selection.to_offsets(document.text)
        except ValueError as exc:
            raise InvalidFragmentError(str(exc)) from exc

        if parse_jsx(document.text[start:end]) is None:
            raise InvalidFragmentError()
        self._advance(
            ExtractionStage.FRAGMENT_VALIDATED,
            document=str(document.path),
            start=start,
            end=end,
        )

        tree = SyntaxTree.parse(document.text)
        scope = resolve_scope(tree, start, end)
        element = JsxFragment(tree=tree, node=scope.original_element)
        identifiers = extract_identifiers(element)
        self._advance(
            ExtractionStage.SCOPE_RESOLVED,
            bindings=len(scope.bindings),
            imports=len(scope.imports),
            identifiers=len(identifiers),
        )

        classification = classify(identifiers, scope)
        self._advance(
            ExtractionStage.PROPS_CLASSIFIED,
            props=[prop.prop_name for prop in classification.props],
            required_imports=[
                declaration.module_specifier
                for declaration in classification.required_imports
            ],
            dropped=len(classification.dropped),
        )

        descriptor = module_descriptor(document.path, self._settings, filesystem.exists)
        indent_unit = " " * self._settings.indent_width
        jsx = FragmentRewriter.for_props(tree, classification.props).rewrite(
            element.node
        )
        module_text = emit_module(
            component_name=descriptor.component_name,
            jsx=jsx,
            props=classification.props,
            required_imports=classification.required_imports,
            settings=self._settings,
            typescript=document.is_typescript,
            base_indent=tree.line_indent(element.node),
        )
        edits = document_edits(
            tree,
            scope,
            descriptor,
            classification.props,
            indent_unit=indent_unit,
        )
        return ExtractionPlan(
            document=document,
            descriptor=descriptor,
            module_text=module_text,
            edits=edits,
            props=classification.props,
            required_imports=classification.required_imports,
            dropped=classification.dropped,
        )

    def execute(
        self,
        plan: ExtractionPlan,
        *,
        host: DocumentHost,
        filesystem: ModuleFileSystem,
    ) -> ExtractionResult:
        """Write the module and patch the document concurrently.

        Raises:
            ModuleWriteError: If the module could not be written.
            DocumentPatchError: If the host rejected the edits.
        """

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=2,
            thread_name_prefix="componentize",
        ) as executor:
            write = executor.submit(
                filesystem.write_text,
                plan.descriptor.path,
                plan.module_text,
            )
            patch = executor.submit(host.apply_edits, plan.document, plan.edits)
            concurrent.futures.wait((write, patch))

        try:
            write.result()
        except ExtractionError:
            raise
        except Exception as exc:
            self._logger.error(
                "module-write-failed",
                path=str(plan.descriptor.path),
                error=str(exc),
            )
            raise ModuleWriteError(
                f"Could not write {plan.descriptor.path}: {exc}"
            ) from exc
        self._advance(
            ExtractionStage.MODULE_EMITTED,
            path=str(plan.descriptor.path),
        )

        try:
            patch.result()
        except DocumentPatchError:
            raise
        except Exception as exc:
            self._logger.error(
                "document-patch-failed",
                document=str(plan.document.path),
                error=str(exc),
            )
            raise DocumentPatchError(
                f"Could not update {plan.document.path}: {exc}"
            ) from exc
        self._advance(
            ExtractionStage.DOCUMENT_PATCHED,
            document=str(plan.document.path),
            edits=len(plan.edits),
        )

        self._advance(ExtractionStage.DONE, component=plan.descriptor.component_name)
        return ExtractionResult(plan=plan, stage=self.stage)

    def extract(
        self,
        document: DocumentSnapshot,
        selection: SourceSpan,
        *,
        host: DocumentHost,
        filesystem: ModuleFileSystem,
    ) -> ExtractionResult:
        plan = self.plan(document, selection, filesystem=filesystem)
        return self.execute(plan, host=host, filesystem=filesystem)

    def extract_from(
        self,
        editor: EditorHost,
        *,
        host: DocumentHost,
        filesystem: ModuleFileSystem,
    ) -> ExtractionResult:
        """Read the invocation from ``editor`` once, then extract."""

        document, selection = read_invocation(editor)
        return self.extract(document, selection, host=host, filesystem=filesystem)
