"""Text edits that rewire the active document to the new component."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from .errors import ScopeResolutionError
from .models import (
    JsxProp,
    NewModuleDescriptor,
    ScopeTable,
    TextEdit,
    line_start_offsets,
)
from .syntax import SyntaxTree

__all__ = [
    "component_invocation",
    "document_edits",
    "hoisted_declarations",
    "import_edit",
    "import_line_index",
]


def component_invocation(component_name: str, props: Iterable[JsxProp]) -> str:
    """Self-closing tag passing every prop at the call site.

    Example:
        >>> component_invocation("Card1", ())
        '<Card1 />'
    """

    attributes = [
        f"{prop.prop_name}={{{prop.call_site_expression}}}" for prop in props
    ]
    return " ".join([f"<{component_name}", *attributes, "/>"])


def import_line_index(tree: SyntaxTree) -> int:
    """Line after the last line starting with ``import``; ``0`` without any.

    When that line opens a multi-line import statement the index moves past
    the end of the statement.
    """

    lines = tree.text.split("\n")
    last = max(
        (index for index, line in enumerate(lines) if line.strip().startswith("import")),
        default=None,
    )
    if last is None:
        return 0
    for statement in tree.root.named_children:
        if statement.type != "import_statement":
            continue
        start_row = statement.start_point[0]
        end_row = statement.end_point[0]
        if start_row <= last <= end_row:
            return end_row + 1
    return last + 1


def import_edit(tree: SyntaxTree, descriptor: NewModuleDescriptor) -> TextEdit:
    statement = f'import {descriptor.component_name} from "{descriptor.import_path}";'
    index = import_line_index(tree)
    starts = line_start_offsets(tree.text)
    if index < len(starts):
        offset = starts[index]
        return TextEdit(offset, offset, f"{statement}\n")
    end = len(tree.text)
    return TextEdit(end, end, f"\n{statement}\n")


def _char_range(tree: SyntaxTree, node: Any) -> tuple[int, int]:
    return tree.char_index(node.start_byte), tree.char_index(node.end_byte)


def hoisted_declarations(
    tree: SyntaxTree,
    scope: ScopeTable,
    props: Sequence[JsxProp],
    *,
    indent_unit: str = "    ",
) -> list[TextEdit]:
    """Declare hoisted handlers right before the JSX-producing statement.

    An arrow function returning its body directly is converted into a block
    so the declarations have somewhere to live.
    """

    declarations = [
        f"const {prop.prop_name} = {prop.initialiser.expression or prop.initialiser.path};"
        for prop in props
        if prop.is_hoisted
    ]
    if not declarations:
        return []

    function = scope.jsx_defined_in
    body = function.child_by_field_name("body") if function is not None else None
    if body is not None and body.type != "statement_block":
        base = tree.line_indent(function)
        inner = base + indent_unit
        start, end = _char_range(tree, body)
        opening = "{\n" + "".join(f"{inner}{line}\n" for line in declarations)
        return [
            TextEdit(start, start, f"{opening}{inner}return "),
            TextEdit(end, end, f";\n{base}}}"),
        ]

    statement = scope.insertion_statement
    if statement is None:
        raise ScopeResolutionError(
            "Could not find a statement to declare the extracted handlers before"
        )
    indent = tree.line_indent(statement)
    offset = tree.char_index(statement.start_byte)
    text = "".join(f"{line}\n{indent}" for line in declarations)
    return [TextEdit(offset, offset, text)]


def document_edits(
    tree: SyntaxTree,
    scope: ScopeTable,
    descriptor: NewModuleDescriptor,
    props: Sequence[JsxProp],
    *,
    indent_unit: str = "    ",
) -> tuple[TextEdit, ...]:
    """All edits patching the active document, in pre-edit offsets."""

    element = scope.original_element
    if element is None:
        raise ScopeResolutionError("No element to replace in the document")

    start, end = _char_range(tree, element)
    return (
        import_edit(tree, descriptor),
        *hoisted_declarations(tree, scope, props, indent_unit=indent_unit),
        TextEdit(start, end, component_invocation(descriptor.component_name, props)),
    )
