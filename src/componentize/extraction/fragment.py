"""Recognize a selection that holds exactly one JSX element."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .syntax import SyntaxTree, tag_name

__all__ = ["JsxFragment", "is_extractable", "parse_jsx"]


@dataclass(frozen=True, slots=True)
class JsxFragment:
    """Validated root of a selection parsed in isolation."""

    tree: SyntaxTree
    node: Any

    @property
    def text(self) -> str:
        return self.tree.node_text(self.node)

    @property
    def tag_name(self) -> str:
        return tag_name(self.node, self.tree) or ""

    @property
    def is_self_closing(self) -> bool:
        return self.node.type == "jsx_self_closing_element"


def _closing_name(element: Any, tree: SyntaxTree) -> str | None:
    closing = element.child_by_field_name("close_tag")
    if closing is None:
        closing = next(
            (c for c in element.children if c.type == "jsx_closing_element"),
            None,
        )
    if closing is None:
        return None
    name = closing.child_by_field_name("name")
    if name is None:
        name = next(iter(closing.named_children), None)
    if name is None:
        return None
    return tree.node_text(name).strip() or None


def _validated_element(expression: Any, tree: SyntaxTree) -> Any | None:
    if expression.type == "jsx_self_closing_element":
        return expression if tag_name(expression, tree) else None
    if expression.type == "jsx_element":
        opening = tag_name(expression, tree)
        closing = _closing_name(expression, tree)
        if opening and closing and opening == closing:
            return expression
    return None


def parse_jsx(text: str) -> JsxFragment | None:
    """Parse ``text`` and return it as a fragment when it is one JSX element.

    Anything else (parse errors, several statements, non-JSX expressions,
    ``<>...</>`` shorthand, mismatched tags) yields ``None`` so callers can
    decide silently whether to offer the extraction at all.
    """

    if not text.strip():
        return None

    tree = SyntaxTree.parse(text)
    if tree.has_error:
        return None

    statements = [
        child for child in tree.root.named_children if child.type != "comment"
    ]
    if len(statements) != 1 or statements[0].type != "expression_statement":
        return None

    expressions = statements[0].named_children
    if len(expressions) != 1:
        return None

    element = _validated_element(expressions[0], tree)
    if element is None:
        return None
    return JsxFragment(tree=tree, node=element)


def is_extractable(text: str) -> bool:
    """Return ``True`` when ``text`` could be extracted into a component."""

    return parse_jsx(text) is not None
