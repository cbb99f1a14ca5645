"""Immutable records flowing through the extraction pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, ClassVar, Iterable, Mapping, Sequence

__all__ = [
    "ANY_TYPE",
    "AttributeSource",
    "Classification",
    "DerivedInitialiser",
    "DocumentSnapshot",
    "ElementContext",
    "ExtractedIdentifier",
    "ImportBinding",
    "ImportSpecifier",
    "InferredType",
    "Initialiser",
    "JsxProp",
    "NewModuleDescriptor",
    "ReferenceInitialiser",
    "RequiredImportDeclaration",
    "ScopeBinding",
    "ScopeTable",
    "SourceSpan",
    "TextEdit",
    "apply_text_edits",
    "line_start_offsets",
]

_TYPESCRIPT_SUFFIXES = frozenset({".ts", ".tsx", ".mts", ".cts"})


def line_start_offsets(text: str) -> list[int]:
    """Return the character offset at which every line of ``text`` starts."""

    offsets = [0]
    for index, char in enumerate(text):
        if char == "\n":
            offsets.append(index + 1)
    return offsets


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Zero-based selection ``(start_line, start_column, end_line, end_column)``.

    Columns count characters. Reversed selections (anchor after the cursor)
    are normalized when translated into offsets.
    """

    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @property
    def is_empty(self) -> bool:
        return (self.start_line, self.start_column) == (
            self.end_line,
            self.end_column,
        )

    def to_offsets(self, text: str) -> tuple[int, int]:
        """Translate the span into absolute character offsets of ``text``.

        Raises:
            ValueError: If a position lies outside ``text``.
        """

        starts = line_start_offsets(text)
        first = _position_offset(text, starts, self.start_line, self.start_column)
        second = _position_offset(text, starts, self.end_line, self.end_column)
        return (first, second) if first <= second else (second, first)


def _position_offset(
    text: str,
    starts: Sequence[int],
    line: int,
    column: int,
) -> int:
    if line < 0 or line >= len(starts):
        raise ValueError(f"Line {line} is outside the document")
    line_end = starts[line + 1] - 1 if line + 1 < len(starts) else len(text)
    if column < 0 or starts[line] + column > line_end:
        raise ValueError(f"Column {column} is outside line {line}")
    return starts[line] + column


@dataclass(frozen=True, slots=True)
class DocumentSnapshot:
    """Text of the active document captured when extraction starts."""

    path: Path
    text: str

    @property
    def extension(self) -> str:
        return self.path.suffix

    @property
    def is_typescript(self) -> bool:
        return self.path.suffix.lower() in _TYPESCRIPT_SUFFIXES


@dataclass(frozen=True, slots=True)
class ElementContext:
    """Owning JSX element tag and attribute threaded through tree walks."""

    element_tag: str | None = None
    attribute_name: str | None = None

    def with_element(self, tag: str | None) -> "ElementContext":
        return ElementContext(element_tag=tag, attribute_name=None)

    def with_attribute(self, name: str | None) -> "ElementContext":
        return replace(self, attribute_name=name)

    def attribute_source(self) -> "AttributeSource | None":
        if self.attribute_name is None:
            return None
        return AttributeSource(
            element_tag=self.element_tag,
            attribute_name=self.attribute_name,
        )


@dataclass(frozen=True, slots=True)
class AttributeSource:
    """JSX attribute an identifier was found in."""

    element_tag: str | None
    attribute_name: str


@dataclass(frozen=True, slots=True)
class ReferenceInitialiser:
    """A plain dotted access chain such as ``this.count`` or ``user.name``.

    ``attribute`` is set when the reference is the whole value of that JSX
    attribute; ``expression`` keeps the original text when it differs from
    ``path`` (optional chaining).
    """

    kind: ClassVar[str] = "reference"

    path: str
    attribute: str | None = None
    expression: str | None = None

    @property
    def root(self) -> str:
        return self.path.split(".", 1)[0]

    @property
    def substitution_key(self) -> tuple[str, str | None]:
        return (self.path, self.attribute)

    @property
    def call_site_text(self) -> str:
        return self.expression or self.path


@dataclass(frozen=True, slots=True)
class DerivedInitialiser:
    """A value computed by a call or an inline function.

    ``path`` is the source text of the call or function and doubles as the
    identity of the derived value. Calls carry their dotted ``callee``;
    inline functions are ``hoisted`` into a handler declaration.
    """

    kind: ClassVar[str] = "derived"

    path: str
    args: tuple[str, ...] = ()
    from_attribute: str | None = None
    expression: str | None = None
    callee: str | None = None
    nested: tuple["ExtractedIdentifier", ...] = ()
    hoisted: bool = False

    @property
    def substitution_key(self) -> tuple[str, str | None]:
        return (self.path, None)

    @property
    def root(self) -> str | None:
        if self.callee is None:
            return None
        return self.callee.split(".", 1)[0]


Initialiser = ReferenceInitialiser | DerivedInitialiser


@dataclass(frozen=True, slots=True)
class ExtractedIdentifier:
    """Externally referenced symbol found inside the fragment."""

    prop_name: str
    initialiser: Initialiser
    source_attribute: AttributeSource | None = None

    @property
    def path(self) -> str:
        return self.initialiser.path

    @property
    def key(self) -> tuple[str, str]:
        return (self.prop_name, self.initialiser.path)


@dataclass(frozen=True, slots=True)
class InferredType:
    """Best-effort static type: printable text plus known structure."""

    text: str
    members: Mapping[str, "InferredType"] = field(default_factory=dict)
    elements: tuple["InferredType", ...] = ()
    returns: "InferredType | None" = None

    @property
    def is_any(self) -> bool:
        return self.text == "any"


ANY_TYPE = InferredType("any")


@dataclass(frozen=True, slots=True)
class ScopeBinding:
    """Locally declared variable, parameter or ``this`` member."""

    name: str
    type: InferredType | None = None


@dataclass(frozen=True, slots=True)
class ImportSpecifier:
    """Single named import, ``imported as local``."""

    imported: str
    local: str

    @property
    def text(self) -> str:
        if self.imported == self.local:
            return self.local
        return f"{self.imported} as {self.local}"


@dataclass(frozen=True, slots=True)
class ImportBinding:
    """Import declaration found at the top of the active document."""

    module_specifier: str
    default_import: str | None = None
    namespace_import: str | None = None
    named_imports: tuple[ImportSpecifier, ...] = ()

    def named(self, local: str) -> ImportSpecifier | None:
        for specifier in self.named_imports:
            if specifier.local == local:
                return specifier
        return None

    def binds(self, local: str) -> bool:
        return (
            local in (self.default_import, self.namespace_import)
            or self.named(local) is not None
        )


@dataclass(frozen=True, slots=True)
class ScopeTable:
    """Names visible at the selection plus the nodes the patch needs.

    ``bindings`` preserves declaration order with inner scopes shadowing
    outer ones. Node fields hold tree-sitter nodes of the document tree.
    """

    bindings: Mapping[str, ScopeBinding]
    imports: tuple[ImportBinding, ...] = ()
    declared_types: Mapping[str, InferredType] = field(default_factory=dict)
    jsx_defined_in: Any | None = None
    original_element: Any | None = None
    insertion_block: Any | None = None
    insertion_statement: Any | None = None

    def lookup(self, path: str) -> tuple[ScopeBinding, tuple[str, ...]] | None:
        """Return the binding for ``path`` or its longest bound prefix.

        The second element lists the member segments left after the prefix.

        Example:
            >>> table = ScopeTable(bindings={"user": ScopeBinding("user")})
            >>> table.lookup("user.address.city")[1]
            ('address', 'city')
        """

        segments = path.split(".")
        for size in range(len(segments), 0, -1):
            binding = self.bindings.get(".".join(segments[:size]))
            if binding is not None:
                return binding, tuple(segments[size:])
        return None

    def import_for(self, name: str) -> ImportBinding | None:
        for binding in self.imports:
            if binding.binds(name):
                return binding
        return None


@dataclass(frozen=True, slots=True)
class JsxProp:
    """Prop of the generated component, resolved by the classifier."""

    prop_name: str
    type: InferredType
    initialiser: Initialiser
    source_attribute: AttributeSource | None = None

    @property
    def is_hoisted(self) -> bool:
        return isinstance(self.initialiser, DerivedInitialiser) and (
            self.initialiser.hoisted
        )

    @property
    def call_site_expression(self) -> str:
        """Expression passed for this prop where the component is used."""

        initialiser = self.initialiser
        if isinstance(initialiser, ReferenceInitialiser):
            return initialiser.call_site_text
        if initialiser.hoisted:
            return self.prop_name
        return initialiser.expression or initialiser.path


@dataclass(frozen=True, slots=True)
class RequiredImportDeclaration:
    """Import the new module must carry, merged per module specifier."""

    module_specifier: str
    default_import: str | None = None
    namespace_import: str | None = None
    named_imports: tuple[str, ...] = ()

    @property
    def is_relative(self) -> bool:
        return self.module_specifier[:1] in (".", "/")

    def with_default(self, name: str) -> "RequiredImportDeclaration":
        return replace(self, default_import=name)

    def with_namespace(self, name: str) -> "RequiredImportDeclaration":
        return replace(self, namespace_import=name)

    def with_named(self, text: str) -> "RequiredImportDeclaration":
        if text in self.named_imports:
            return self
        return replace(self, named_imports=self.named_imports + (text,))


@dataclass(frozen=True, slots=True)
class Classification:
    """Outcome of joining extracted identifiers with the scope table."""

    props: tuple[JsxProp, ...] = ()
    required_imports: tuple[RequiredImportDeclaration, ...] = ()
    dropped: tuple[ExtractedIdentifier, ...] = ()


@dataclass(frozen=True, slots=True)
class NewModuleDescriptor:
    """Name and location chosen for the generated component module."""

    component_name: str
    file_name: str
    path: Path
    index: int

    @property
    def import_path(self) -> str:
        return f"./{Path(self.file_name).stem}"


@dataclass(frozen=True, slots=True)
class TextEdit:
    """Replace ``[start, end)`` (character offsets) with ``text``."""

    start: int
    end: int
    text: str

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end


def apply_text_edits(text: str, edits: Iterable[TextEdit]) -> str:
    """Apply non-overlapping ``edits`` computed against ``text``.

    Insertions sharing an offset keep their given order and land before a
    replacement starting at the same offset.

    Raises:
        ValueError: If two replacements overlap or an edit is out of range.

    Example:
        >>> apply_text_edits("abc", [TextEdit(1, 2, "X"), TextEdit(0, 0, ">")])
        '>aXc'
    """

    ordered = sorted(
        enumerate(edits),
        key=lambda item: (item[1].start, not item[1].is_insertion, item[0]),
    )
    parts: list[str] = []
    cursor = 0
    for _, edit in ordered:
        if edit.start < cursor or edit.end > len(text) or edit.start > edit.end:
            raise ValueError(f"Invalid or overlapping edit: {edit!r}")
        parts.append(text[cursor : edit.start])
        parts.append(edit.text)
        cursor = edit.end
    parts.append(text[cursor:])
    return "".join(parts)
