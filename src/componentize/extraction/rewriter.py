"""Single parametrized rewrite pass over a JSX fragment."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Sequence

from .identifiers import reference_identifier
from .models import ElementContext, JsxProp, ReferenceInitialiser
from .syntax import FUNCTION_NODES, SyntaxTree, is_intrinsic_tag

__all__ = [
    "DerivedResolver",
    "FragmentRewriter",
    "SubstitutionKey",
    "derived_resolver",
]

SubstitutionKey = tuple[str, "str | None"]
DerivedResolver = Callable[[Any, SyntaxTree], "str | None"]

_REFERENCE_NODES = frozenset(
    {"identifier", "member_expression", "nested_identifier", "this"}
)
_TAG_OWNERS = frozenset(
    {"jsx_opening_element", "jsx_closing_element", "jsx_self_closing_element"}
)
_CALL_NODES = frozenset({"call_expression"})


def derived_resolver(
    node_types: Iterable[str],
    names: Mapping[str, str],
) -> DerivedResolver:
    """Resolve nodes of ``node_types`` whose source text is in ``names``."""

    kinds = frozenset(node_types)

    def resolve(node: Any, tree: SyntaxTree) -> str | None:
        if node.type not in kinds:
            return None
        return names.get(tree.node_text(node))

    return resolve


class FragmentRewriter:
    """Replace substituted references and derived values with prop names.

    ``substitutions`` maps a reference key ``(path, attribute)`` to the prop
    name standing in for it. ``resolvers`` name derived values (calls and
    inline functions) found while walking. Text is rebuilt from byte ranges
    of the untouched tree.
    """

    def __init__(
        self,
        tree: SyntaxTree,
        substitutions: Mapping[SubstitutionKey, str],
        resolvers: Sequence[DerivedResolver] = (),
    ) -> None:
        self._tree = tree
        self._substitutions = dict(substitutions)
        self._resolvers = tuple(resolvers)

    @classmethod
    def for_props(cls, tree: SyntaxTree, props: Iterable[JsxProp]) -> "FragmentRewriter":
        references: dict[SubstitutionKey, str] = {}
        calls: dict[str, str] = {}
        functions: dict[str, str] = {}
        for prop in props:
            initialiser = prop.initialiser
            if isinstance(initialiser, ReferenceInitialiser):
                references[initialiser.substitution_key] = prop.prop_name
            elif initialiser.hoisted:
                functions[initialiser.path] = prop.prop_name
            else:
                calls[initialiser.path] = prop.prop_name
        return cls(
            tree,
            references,
            (
                derived_resolver(_CALL_NODES, calls),
                derived_resolver(FUNCTION_NODES, functions),
            ),
        )

    def rewrite(self, node: Any) -> str:
        """Text of ``node`` with every substitution applied."""

        replacements: list[tuple[int, int, str]] = []
        self._collect(node, replacements)

        parts: list[str] = []
        cursor = node.start_byte
        for start, end, text in replacements:
            parts.append(self._tree.slice(cursor, start))
            parts.append(text)
            cursor = end
        parts.append(self._tree.slice(cursor, node.end_byte))
        return "".join(parts)

    def _collect(self, node: Any, replacements: list[tuple[int, int, str]]) -> None:
        for resolve in self._resolvers:
            name = resolve(node, self._tree)
            if name is not None:
                replacements.append((node.start_byte, node.end_byte, name))
                return

        if node.type in _REFERENCE_NODES and not self._is_intrinsic_tag(node):
            name = self._reference_name(node)
            if name is not None:
                replacements.append((node.start_byte, node.end_byte, name))
                return

        for child in node.children:
            self._collect(child, replacements)

    def _reference_name(self, node: Any) -> str | None:
        identifier = reference_identifier(node, self._tree, ElementContext())
        if identifier is None:
            return None
        return self._substitutions.get(identifier.initialiser.substitution_key)

    def _is_intrinsic_tag(self, node: Any) -> bool:
        parent = node.parent
        if parent is None or parent.type not in _TAG_OWNERS:
            return False
        return is_intrinsic_tag(self._tree.node_text(node))
