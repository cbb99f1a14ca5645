"""Render the source of the generated component module."""

from __future__ import annotations

from typing import Iterable, Sequence

from componentize.core.config import ExtractSettings
from .models import JsxProp, RequiredImportDeclaration

__all__ = [
    "component_props_name",
    "dedent_fragment",
    "emit_module",
    "import_lines",
]

_REACT = "react"
_REACT_DEFAULT = "React"


def component_props_name(component_name: str) -> str:
    return f"{component_name}Props"


def import_lines(declaration: RequiredImportDeclaration) -> list[str]:
    """Import statements for one merged declaration.

    Example:
        >>> import_lines(RequiredImportDeclaration("x", "D", None, ("a", "b as c")))
        ['import D, { a, b as c } from "x";']
    """

    source = f'"{declaration.module_specifier}"'
    lines: list[str] = []
    named = (
        f"{{ {', '.join(declaration.named_imports)} }}"
        if declaration.named_imports
        else None
    )
    head = [declaration.default_import] if declaration.default_import else []

    if declaration.namespace_import:
        clause = ", ".join(head + [f"* as {declaration.namespace_import}"])
        lines.append(f"import {clause} from {source};")
        if named:
            lines.append(f"import {named} from {source};")
        return lines

    clause = ", ".join(head + ([named] if named else []))
    if clause:
        lines.append(f"import {clause} from {source};")
    return lines


def _header_lines(imports: Sequence[RequiredImportDeclaration]) -> list[str]:
    react = RequiredImportDeclaration(_REACT, default_import=_REACT_DEFAULT)
    others: list[RequiredImportDeclaration] = []
    for declaration in imports:
        if declaration.module_specifier != _REACT:
            others.append(declaration)
            continue
        if declaration.namespace_import:
            others.append(declaration)
            continue
        for name in declaration.named_imports:
            react = react.with_named(name)

    lines = import_lines(react)
    for declaration in others:
        lines.extend(import_lines(declaration))
    return lines


def dedent_fragment(text: str, base_indent: str) -> list[str]:
    """Split ``text`` into lines, removing ``base_indent`` from continuations.

    The first line starts at the element itself and carries no indentation.
    """

    lines = text.split("\n")
    result = [lines[0].rstrip()]
    for line in lines[1:]:
        width = len(line) - len(line.lstrip())
        cut = min(width, len(base_indent))
        result.append(line[cut:].rstrip())
    return result


def _props_block(
    name: str,
    props: Sequence[JsxProp],
    settings: ExtractSettings,
    indent: str,
) -> str:
    members = [f"{indent}{prop.prop_name}: {prop.type.text};" for prop in props]
    if settings.uses_interface:
        return "\n".join([f"interface {name} {{", *members, "}"])
    return "\n".join([f"type {name} = {{", *members, "};"])


def _return_statement(jsx_lines: Sequence[str], indent: str) -> list[str]:
    if len(jsx_lines) == 1:
        return [f"{indent}return {jsx_lines[0]};"]
    body = [f"{indent * 2}{line}" if line else "" for line in jsx_lines]
    return [f"{indent}return (", *body, f"{indent});"]


def _component_block(
    component_name: str,
    parameter: str,
    jsx_lines: Sequence[str],
    settings: ExtractSettings,
    indent: str,
) -> str:
    statements = _return_statement(jsx_lines, indent)
    if settings.uses_arrow_function:
        return "\n".join(
            [f"const {component_name} = ({parameter}) => {{", *statements, "};"]
        )
    return "\n".join([f"function {component_name}({parameter}) {{", *statements, "}"])


def emit_module(
    *,
    component_name: str,
    jsx: str,
    props: Iterable[JsxProp],
    required_imports: Sequence[RequiredImportDeclaration],
    settings: ExtractSettings,
    typescript: bool = True,
    base_indent: str = "",
) -> str:
    """Source text of the new module, blank-line separated, newline-terminated."""

    props = tuple(props)
    indent = " " * settings.indent_width
    props_name = component_props_name(component_name)

    groups: list[str] = ["\n".join(_header_lines(required_imports))]
    parameter = ""
    if props:
        parameter = "{ " + ", ".join(prop.prop_name for prop in props) + " }"
        if typescript:
            groups.append(_props_block(props_name, props, settings, indent))
            parameter = f"{parameter}: {props_name}"

    groups.append(
        _component_block(
            component_name,
            parameter,
            dedent_fragment(jsx, base_indent),
            settings,
            indent,
        )
    )
    groups.append(f"export default {component_name};")
    return "\n\n".join(groups) + "\n"
