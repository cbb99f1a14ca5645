"""Tests for :mod:`componentize.extraction.emitter`."""

from __future__ import annotations

from componentize.core.config import ExtractSettings
from componentize.extraction.emitter import dedent_fragment, emit_module, import_lines
from componentize.extraction.models import (
    InferredType,
    JsxProp,
    ReferenceInitialiser,
    RequiredImportDeclaration,
)


def _prop(name: str, type_text: str = "any") -> JsxProp:
    return JsxProp(
        prop_name=name,
        type=InferredType(type_text),
        initialiser=ReferenceInitialiser(path=name),
    )


def test_module_without_props_has_no_type_block() -> None:
    module = emit_module(
        component_name="Component1",
        jsx='<div className="box">hello</div>',
        props=(),
        required_imports=(),
        settings=ExtractSettings(),
    )

    assert module == (
        'import React from "react";\n'
        "\n"
        "const Component1 = () => {\n"
        '    return <div className="box">hello</div>;\n'
        "};\n"
        "\n"
        "export default Component1;\n"
    )


def test_type_alias_and_arrow_component() -> None:
    module = emit_module(
        component_name="Card1",
        jsx="<Foo a={a} b={b} />",
        props=(_prop("a", "number"), _prop("b", "string")),
        required_imports=(
            RequiredImportDeclaration("lodash", named_imports=("debounce",)),
            RequiredImportDeclaration("./theme", default_import="theme"),
        ),
        settings=ExtractSettings(),
    )

    assert module == (
        'import React from "react";\n'
        'import { debounce } from "lodash";\n'
        'import theme from "./theme";\n'
        "\n"
        "type Card1Props = {\n"
        "    a: number;\n"
        "    b: string;\n"
        "};\n"
        "\n"
        "const Card1 = ({ a, b }: Card1Props) => {\n"
        "    return <Foo a={a} b={b} />;\n"
        "};\n"
        "\n"
        "export default Card1;\n"
    )


def test_interface_and_function_declaration() -> None:
    settings = ExtractSettings(function_syntax="function", props_syntax="interface")

    module = emit_module(
        component_name="Row2",
        jsx="<li>\n        {label}\n    </li>",
        props=(_prop("label", "string"),),
        required_imports=(),
        settings=settings,
        base_indent="    ",
    )

    assert module == (
        'import React from "react";\n'
        "\n"
        "interface Row2Props {\n"
        "    label: string;\n"
        "}\n"
        "\n"
        "function Row2({ label }: Row2Props) {\n"
        "    return (\n"
        "        <li>\n"
        "            {label}\n"
        "        </li>\n"
        "    );\n"
        "}\n"
        "\n"
        "export default Row2;\n"
    )


def test_plain_javascript_omits_types() -> None:
    module = emit_module(
        component_name="Item1",
        jsx="<b>{text}</b>",
        props=(_prop("text"),),
        required_imports=(),
        settings=ExtractSettings(),
        typescript=False,
    )

    assert "Item1Props" not in module
    assert "const Item1 = ({ text }) => {" in module


def test_react_named_imports_join_the_default_import() -> None:
    module = emit_module(
        component_name="Box1",
        jsx="<React.Fragment />",
        props=(),
        required_imports=(
            RequiredImportDeclaration(
                "react", default_import="React", named_imports=("useMemo",)
            ),
        ),
        settings=ExtractSettings(indent_width=2),
    )

    assert module.splitlines()[0] == 'import React, { useMemo } from "react";'
    assert "  return <React.Fragment />;" in module


def test_import_lines_cover_all_clause_shapes() -> None:
    assert import_lines(RequiredImportDeclaration("x", named_imports=("a",))) == [
        'import { a } from "x";'
    ]
    assert import_lines(
        RequiredImportDeclaration("x", default_import="D", namespace_import="ns")
    ) == ['import D, * as ns from "x";']
    assert import_lines(
        RequiredImportDeclaration("x", namespace_import="ns", named_imports=("a",))
    ) == ['import * as ns from "x";', 'import { a } from "x";']
    assert import_lines(RequiredImportDeclaration("x")) == []


def test_dedent_fragment_keeps_relative_indentation() -> None:
    text = "<ul>\n          <li />\n        </ul>"

    assert dedent_fragment(text, "        ") == ["<ul>", "  <li />", "</ul>"]
