"""Collect the externally referenced symbols of a JSX fragment.

The extractor is a visitor over a closed table of tree-sitter node types.
Node types without an entry fall through to :data:`PASS_THROUGH`, which
yields nothing: spread attributes, subscripts, object and array literals and
functions outside attributes are deliberately not analysed.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable

from .fragment import JsxFragment
from .models import (
    DerivedInitialiser,
    ElementContext,
    ExtractedIdentifier,
    ReferenceInitialiser,
)
from .syntax import (
    FUNCTION_NODES,
    SyntaxTree,
    attribute_name,
    attribute_value,
    is_intrinsic_tag,
    member_path,
    tag_name_node,
)

__all__ = [
    "IdentifierExtractor",
    "PASS_THROUGH",
    "camel_words",
    "dedupe_identifiers",
    "derived_name",
    "direct_attribute",
    "extract_identifiers",
    "pascal_words",
    "reference_identifier",
]

Visitor = Callable[[Any, ElementContext], list[ExtractedIdentifier]]

PASS_THROUGH: tuple[ExtractedIdentifier, ...] = ()

_WORD_SPLIT = re.compile(r"[^0-9A-Za-z_$]+")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][0-9A-Za-z_$]*$")
_RESERVED_PROP_NAMES = frozenset(
    {
        "key",
        "ref",
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "export",
        "extends",
        "finally",
        "for",
        "function",
        "if",
        "import",
        "in",
        "instanceof",
        "new",
        "return",
        "super",
        "switch",
        "this",
        "throw",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
    }
)
_SKIPPED_TAG_CHILDREN = frozenset(
    {
        "identifier",
        "member_expression",
        "nested_identifier",
        "jsx_namespace_name",
        "type_arguments",
    }
)
_PATH_NODES = frozenset({"identifier", "member_expression", "this"})


def _words(text: str) -> list[str]:
    return [word for word in _WORD_SPLIT.split(text) if word]


def camel_words(text: str) -> str:
    """Join the words of ``text`` in camelCase, for handler names.

    Unlike :func:`componentize.extraction.naming.to_camel_case`, every
    non-identifier character splits a word.

    Example:
    >>> camel_words("Foo.Bar"), camel_words("my-button")
    ('fooBar', 'myButton')
    """

    words = _words(text)
    if not words:
        return ""
    head = words[0][:1].lower() + words[0][1:]
    return head + "".join(word[:1].upper() + word[1:] for word in words[1:])


def pascal_words(text: str) -> str:
    """PascalCase counterpart of :func:`camel_words`."""

    return "".join(word[:1].upper() + word[1:] for word in _words(text))


def derived_name(context: ElementContext) -> str:
    """Deterministic name for a value computed inside an element.

    Example:
        >>> derived_name(ElementContext("button", "onClick"))
        'buttonOnClick'
    """

    suffix = pascal_words(context.attribute_name or "") or "Handler"
    tag = camel_words(context.element_tag or "")
    if not tag:
        return camel_words(suffix)
    return tag + suffix


def _usable_prop_name(name: str | None) -> bool:
    return (
        name is not None
        and _IDENTIFIER.match(name) is not None
        and name not in _RESERVED_PROP_NAMES
    )


def direct_attribute(node: Any, tree: SyntaxTree) -> str | None:
    """Attribute name when ``node`` is the whole value of a JSX attribute."""

    container = node.parent
    if container is None or container.type != "jsx_expression":
        return None
    attribute = container.parent
    if attribute is None or attribute.type != "jsx_attribute":
        return None
    return attribute_name(attribute, tree)


def reference_identifier(
    node: Any,
    tree: SyntaxTree,
    context: ElementContext,
) -> ExtractedIdentifier | None:
    """Reference identifier for a path node, or ``None`` when not a path.

    The prop name is the last path segment, unless the reference is the
    entire value of an attribute usable as a prop name.
    """

    path = member_path(node, tree)
    if path is None or path == "this":
        return None

    attribute = direct_attribute(node, tree)
    if not _usable_prop_name(attribute):
        attribute = None
    prop_name = attribute or path.rsplit(".", 1)[-1]

    text = tree.node_text(node)
    return ExtractedIdentifier(
        prop_name=prop_name,
        initialiser=ReferenceInitialiser(
            path=path,
            attribute=attribute,
            expression=text if text != path else None,
        ),
        source_attribute=context.attribute_source(),
    )


def dedupe_identifiers(
    identifiers: Iterable[ExtractedIdentifier],
) -> tuple[ExtractedIdentifier, ...]:
    """Drop repeated ``(prop_name, path)`` pairs, first occurrence wins."""

    seen: set[tuple[str, str]] = set()
    unique: list[ExtractedIdentifier] = []
    for identifier in identifiers:
        if identifier.key in seen:
            continue
        seen.add(identifier.key)
        unique.append(identifier)
    return tuple(unique)


def _parameter_names(function: Any, tree: SyntaxTree) -> set[str]:
    names: set[str] = set()
    for field_name in ("parameter", "parameters"):
        params = function.child_by_field_name(field_name)
        if params is None:
            continue
        stack = [params]
        while stack:
            current = stack.pop()
            if current.type in (
                "identifier",
                "shorthand_property_identifier_pattern",
            ):
                names.add(tree.node_text(current))
            elif current.type not in ("type_annotation", "default_value"):
                stack.extend(current.named_children)
    return names


class IdentifierExtractor:
    """Recursive descent over a fragment tree."""

    def __init__(self, tree: SyntaxTree) -> None:
        self._tree = tree
        self._visitors: dict[str, Visitor] = {
            "jsx_element": self._visit_element,
            "jsx_self_closing_element": self._visit_element,
            "jsx_attribute": self._visit_attribute,
            "jsx_expression": self._visit_operands,
            "identifier": self._visit_reference,
            "member_expression": self._visit_reference,
            "call_expression": self._visit_call,
            "arrow_function": self._visit_function,
            "function_expression": self._visit_function,
            "function": self._visit_function,
            "ternary_expression": self._visit_operands,
            "binary_expression": self._visit_operands,
            "unary_expression": self._visit_operands,
            "parenthesized_expression": self._visit_operands,
            "template_string": self._visit_operands,
            "template_substitution": self._visit_operands,
            "non_null_expression": self._visit_operands,
            "as_expression": self._visit_first_operand,
            "satisfies_expression": self._visit_first_operand,
        }

    @property
    def supported_node_types(self) -> frozenset[str]:
        return frozenset(self._visitors)

    def extract(self, node: Any) -> tuple[ExtractedIdentifier, ...]:
        return dedupe_identifiers(self.visit(node, ElementContext()))

    def visit(self, node: Any, context: ElementContext) -> list[ExtractedIdentifier]:
        visitor = self._visitors.get(node.type)
        if visitor is None:
            return list(PASS_THROUGH)
        return visitor(node, context)

    # ------------------------------------------------------------------
    # Visitors
    # ------------------------------------------------------------------
    def _visit_element(
        self, node: Any, context: ElementContext
    ) -> list[ExtractedIdentifier]:
        name_node = tag_name_node(node)
        if name_node is None:
            # <>...</> shorthand
            return list(PASS_THROUGH)

        found: list[ExtractedIdentifier] = []
        tag = self._tree.node_text(name_node)
        if tag and not is_intrinsic_tag(tag):
            found.extend(self._visit_reference(name_node, ElementContext(tag)))

        inner = context.with_element(tag)
        opening = node
        if node.type == "jsx_element":
            opening = node.child_by_field_name("open_tag")
            if opening is None:
                opening = node.named_children[0]
        for attribute in opening.named_children:
            if attribute.type in _SKIPPED_TAG_CHILDREN:
                continue
            found.extend(self.visit(attribute, inner))

        if node.type == "jsx_element":
            for child in node.named_children:
                if child.type in ("jsx_opening_element", "jsx_closing_element"):
                    continue
                found.extend(self.visit(child, inner))
        return found

    def _visit_attribute(
        self, node: Any, context: ElementContext
    ) -> list[ExtractedIdentifier]:
        value = attribute_value(node)
        if value is None:
            return []
        name = attribute_name(node, self._tree)
        return self.visit(value, context.with_attribute(name))

    def _visit_reference(
        self, node: Any, context: ElementContext
    ) -> list[ExtractedIdentifier]:
        identifier = reference_identifier(node, self._tree, context)
        if identifier is not None:
            return [identifier]
        if node.type == "member_expression":
            # `getUser().name`: the object is not a path, look inside it
            obj = node.child_by_field_name("object")
            if obj is not None:
                return self.visit(obj, context)
        return []

    def _visit_call(
        self, node: Any, context: ElementContext
    ) -> list[ExtractedIdentifier]:
        callee_node = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")

        nested: list[ExtractedIdentifier] = []
        callee: str | None = None
        if callee_node is not None:
            callee = member_path(callee_node, self._tree)
            nested.extend(self.visit(callee_node, context))

        argument_identifiers: list[ExtractedIdentifier] = []
        if arguments is not None and arguments.type == "arguments":
            for argument in arguments.named_children:
                argument_identifiers.extend(self.visit(argument, context))
        nested.extend(argument_identifiers)

        if context.attribute_name is not None:
            prop_name = derived_name(context)
        elif callee is not None and callee != "this":
            prop_name = callee.rsplit(".", 1)[-1]
        else:
            prop_name = "value"

        text = self._tree.node_text(node)
        initialiser = DerivedInitialiser(
            path=text,
            args=tuple(dict.fromkeys(_reference_paths(argument_identifiers))),
            from_attribute=context.attribute_name,
            expression=text,
            callee=callee,
            nested=dedupe_identifiers(nested),
        )
        return [
            ExtractedIdentifier(
                prop_name=prop_name,
                initialiser=initialiser,
                source_attribute=context.attribute_source(),
            )
        ]

    def _visit_function(
        self, node: Any, context: ElementContext
    ) -> list[ExtractedIdentifier]:
        if context.attribute_name is None:
            return []
        bound = _parameter_names(node, self._tree)
        body = node.child_by_field_name("body")
        args: list[str] = []
        if body is not None:
            self._argument_paths(body, bound, inside_arguments=False, found=args)
        text = self._tree.node_text(node)
        initialiser = DerivedInitialiser(
            path=text,
            args=tuple(dict.fromkeys(args)),
            from_attribute=context.attribute_name,
            expression=text,
            hoisted=True,
        )
        return [
            ExtractedIdentifier(
                prop_name=derived_name(context),
                initialiser=initialiser,
                source_attribute=context.attribute_source(),
            )
        ]

    def _visit_operands(
        self, node: Any, context: ElementContext
    ) -> list[ExtractedIdentifier]:
        found: list[ExtractedIdentifier] = []
        for child in node.named_children:
            found.extend(self.visit(child, context))
        return found

    def _visit_first_operand(
        self, node: Any, context: ElementContext
    ) -> list[ExtractedIdentifier]:
        named = node.named_children
        if not named:
            return []
        return self.visit(named[0], context)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _argument_paths(
        self,
        node: Any,
        bound: set[str],
        *,
        inside_arguments: bool,
        found: list[str],
    ) -> None:
        """Collect free reference paths passed as call arguments."""

        if node.type == "call_expression":
            callee = node.child_by_field_name("function")
            if callee is not None and callee.type not in _PATH_NODES:
                self._argument_paths(
                    callee, bound, inside_arguments=inside_arguments, found=found
                )
            arguments = node.child_by_field_name("arguments")
            if arguments is not None:
                for argument in arguments.named_children:
                    self._argument_paths(
                        argument, bound, inside_arguments=True, found=found
                    )
            return

        if inside_arguments and node.type in _PATH_NODES:
            path = member_path(node, self._tree)
            if path is not None:
                if path != "this" and path.split(".", 1)[0] not in bound:
                    found.append(path)
                return

        if node.type in FUNCTION_NODES:
            bound = bound | _parameter_names(node, self._tree)
        for child in node.named_children:
            self._argument_paths(
                child, bound, inside_arguments=inside_arguments, found=found
            )


def _reference_paths(identifiers: Iterable[ExtractedIdentifier]) -> list[str]:
    paths: list[str] = []
    for identifier in identifiers:
        initialiser = identifier.initialiser
        if isinstance(initialiser, ReferenceInitialiser):
            paths.append(initialiser.path)
        else:
            paths.extend(initialiser.args)
    return paths


def extract_identifiers(fragment: JsxFragment) -> tuple[ExtractedIdentifier, ...]:
    """Ordered, de-duplicated identifiers referenced by ``fragment``."""

    return IdentifierExtractor(fragment.tree).extract(fragment.node)
