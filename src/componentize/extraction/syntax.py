"""TSX syntax trees backed by tree-sitter.

Every stage of the pipeline reads the same kind of immutable parse: a
:class:`SyntaxTree` holds the text, its UTF-8 bytes and the tree-sitter root
node. The helpers below answer the recurring structural questions (dotted
member paths, JSX tag and attribute names, span containment) so the
extractor, resolver and rewriter agree on them.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Sequence

from .errors import ParserUnavailableError

__all__ = [
    "CLASS_NODES",
    "FUNCTION_NODES",
    "JSX_ELEMENT_NODES",
    "ParserCache",
    "SyntaxTree",
    "attribute_name",
    "attribute_value",
    "contains",
    "is_intrinsic_tag",
    "iter_nodes",
    "load_parser",
    "member_path",
    "tag_name",
    "tag_name_node",
]

JSX_ELEMENT_NODES = frozenset({"jsx_element", "jsx_self_closing_element"})
FUNCTION_NODES = frozenset(
    {
        "arrow_function",
        "function_expression",
        "function",
        "function_declaration",
        "generator_function",
        "generator_function_declaration",
        "method_definition",
    }
)
CLASS_NODES = frozenset(
    {"class_declaration", "abstract_class_declaration", "class"}
)
_TAG_NAME_NODES = frozenset(
    {"identifier", "member_expression", "nested_identifier", "jsx_namespace_name"}
)
_PATH_LEAVES = frozenset(
    {"identifier", "property_identifier", "private_property_identifier"}
)


@dataclass(slots=True)
class _ParserResources:
    """Container for tree-sitter parser resources."""

    parser: Any
    language: str


@dataclass(slots=True)
class ParserCache:
    """Process-wide cache of constructed tree-sitter parsers."""

    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, factory: Callable[[], Any]) -> Any:
        """Return a cached value for ``key`` creating it via ``factory``."""

        if key not in self.data:
            self.data[key] = factory()
        return self.data[key]

    def clear(self) -> None:
        self.data.clear()


_CACHE = ParserCache()


def load_parser(language: str = "tsx") -> Any:
    """Return a tree-sitter parser for ``language`` (``tsx`` or ``typescript``).

    Raises:
        ParserUnavailableError: If the grammar packages are not installed.
    """

    def _factory() -> _ParserResources:
        try:
            from tree_sitter import Language, Parser
            import tree_sitter_typescript
        except ImportError as exc:
            raise ParserUnavailableError(
                "componentize requires the 'tree-sitter' and "
                "'tree-sitter-typescript' packages."
            ) from exc

        if language == "typescript":
            grammar = tree_sitter_typescript.language_typescript()
        else:
            grammar = tree_sitter_typescript.language_tsx()
        try:
            parser = Parser(Language(grammar))
        except Exception as exc:  # pragma: no cover - ABI mismatch
            raise ParserUnavailableError(
                f"tree-sitter parser for {language!r} is unavailable: {exc}"
            ) from exc
        return _ParserResources(parser=parser, language=language)

    resources = _CACHE.get(f"parser::{language}", _factory)
    return resources.parser


def _byte_offsets(text: str) -> Sequence[int]:
    offsets = [0]
    total = 0
    for char in text:
        total += len(char.encode("utf-8"))
        offsets.append(total)
    return offsets


class SyntaxTree:
    """Immutable parse of a text buffer.

    Nodes are never edited; rewrites build new text from node byte ranges.
    """

    __slots__ = ("text", "source_bytes", "tree", "_offsets")

    def __init__(self, text: str, tree: Any) -> None:
        self.text = text
        self.source_bytes = text.encode("utf-8")
        self.tree = tree
        self._offsets = _byte_offsets(text)

    @classmethod
    def parse(cls, text: str) -> "SyntaxTree":
        parser = load_parser("tsx")
        return cls(text, parser.parse(text.encode("utf-8")))

    @property
    def root(self) -> Any:
        return self.tree.root_node

    @property
    def has_error(self) -> bool:
        return bool(self.root.has_error)

    def node_text(self, node: Any) -> str:
        return self.slice(node.start_byte, node.end_byte)

    def slice(self, start: int, end: int) -> str:
        return self.source_bytes[start:end].decode("utf-8", errors="ignore")

    def char_index(self, byte_offset: int) -> int:
        """Character offset matching ``byte_offset``."""

        return max(0, bisect_right(self._offsets, byte_offset) - 1)

    def byte_offset(self, char_index: int) -> int:
        """Byte offset matching ``char_index``."""

        return self._offsets[min(max(char_index, 0), len(self._offsets) - 1)]

    def line_indent(self, node: Any) -> str:
        """Leading whitespace of the line ``node`` starts on."""

        start = self.char_index(node.start_byte)
        line_start = self.text.rfind("\n", 0, start) + 1
        line = self.text[line_start:start]
        return line[: len(line) - len(line.lstrip())]


def iter_nodes(node: Any) -> Iterator[Any]:
    """Yield ``node`` and all of its descendants depth-first."""

    yield node
    for child in node.children:
        yield from iter_nodes(child)


def contains(node: Any, start: int, end: int) -> bool:
    """Return ``True`` when ``node`` spans the byte range ``[start, end]``."""

    return node.start_byte <= start and node.end_byte >= end


def member_path(node: Any, tree: SyntaxTree) -> str | None:
    """Dotted access chain rooted at ``this`` or an identifier.

    Returns ``None`` for anything else (calls, subscripts, literals), so
    callers can fall back to recursing into the node.
    """

    if node.type == "this":
        return "this"
    if node.type in _PATH_LEAVES:
        return tree.node_text(node)
    if node.type in ("member_expression", "nested_identifier"):
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        named = node.named_children
        if obj is None and named:
            obj = named[0]
        if prop is None and len(named) > 1:
            prop = named[-1]
        if obj is None or prop is None or prop.type not in _PATH_LEAVES:
            return None
        base = member_path(obj, tree)
        if base is None:
            return None
        return f"{base}.{tree.node_text(prop)}"
    return None


def tag_name_node(element: Any) -> Any | None:
    """Name node of a JSX element, self-closing element or tag."""

    tag = element
    if element.type == "jsx_element":
        tag = element.child_by_field_name("open_tag")
        if tag is None:
            tag = next(
                (c for c in element.children if c.type == "jsx_opening_element"),
                None,
            )
        if tag is None:
            return None
    name = tag.child_by_field_name("name")
    if name is not None:
        return name
    for child in tag.named_children:
        if child.type in _TAG_NAME_NODES:
            return child
    return None


def tag_name(element: Any, tree: SyntaxTree) -> str | None:
    node = tag_name_node(element)
    if node is None:
        return None
    return tree.node_text(node).strip() or None


def is_intrinsic_tag(name: str) -> bool:
    """Lowercase, dashed or namespaced tags are host elements, not components.

    Example:
        >>> is_intrinsic_tag("div"), is_intrinsic_tag("Card"), is_intrinsic_tag("ui.Card")
        (True, False, False)
    """

    if "." in name:
        return False
    return name[:1].islower() or "-" in name or ":" in name


def attribute_name(attribute: Any, tree: SyntaxTree) -> str | None:
    named = attribute.named_children
    if not named:
        return None
    return tree.node_text(named[0])


def attribute_value(attribute: Any) -> Any | None:
    named = attribute.named_children
    if len(named) < 2:
        return None
    return named[-1]
