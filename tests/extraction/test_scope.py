"""Tests for :mod:`componentize.extraction.scope`."""

from __future__ import annotations

import textwrap

import pytest

from componentize.extraction.errors import ScopeResolutionError
from componentize.extraction.models import ImportSpecifier
from componentize.extraction.scope import resolve_scope, selection_bytes
from componentize.extraction.syntax import SyntaxTree


def _resolve(source: str, snippet: str):
    text = textwrap.dedent(source)
    tree = SyntaxTree.parse(text)
    start = text.index(snippet)
    return tree, resolve_scope(tree, start, start + len(snippet))


def _type(scope, name: str) -> str:
    binding = scope.bindings[name]
    assert binding.type is not None
    return binding.type.text


def test_imports_become_bindings() -> None:
    _, scope = _resolve(
        """
        import React from "react";
        import D, { a, b as c } from "x";
        import * as ns from "./y";
        import "./side-effect.css";

        export const App = () => <D />;
        """,
        "<D />",
    )

    specifiers = [binding.module_specifier for binding in scope.imports]
    assert specifiers == ["react", "x", "./y"]

    x_import = scope.import_for("c")
    assert x_import is not None
    assert x_import.default_import == "D"
    assert x_import.named_imports == (
        ImportSpecifier("a", "a"),
        ImportSpecifier("b", "c"),
    )
    assert scope.import_for("ns").namespace_import == "ns"
    assert scope.import_for("b") is None


def test_function_parameters_and_locals_are_bound() -> None:
    _, scope = _resolve(
        """
        interface CardProps {
            title: string;
            count: number;
        }

        export function Card({ title, count }: CardProps, extra = 3) {
            const [open, setOpen] = useState(false);
            const label = `${title}`;
            return <Badge title={title} />;
        }
        """,
        "<Badge title={title} />",
    )

    assert _type(scope, "title") == "string"
    assert _type(scope, "count") == "number"
    assert _type(scope, "extra") == "number"
    assert _type(scope, "open") == "boolean"
    assert _type(scope, "setOpen") == "React.Dispatch<React.SetStateAction<boolean>>"
    assert _type(scope, "label") == "string"
    assert "Card" in scope.bindings
    assert scope.jsx_defined_in is not None
    assert scope.jsx_defined_in.type == "function_declaration"


def test_declared_interfaces_resolve_annotations() -> None:
    _, scope = _resolve(
        """
        type User = { name: string; age: number };

        const Profile = () => {
            const user: User = load();
            return <p>{user.name}</p>;
        };
        """,
        "<p>{user.name}</p>",
    )

    user = scope.bindings["user"].type
    assert user is not None
    assert user.text == "User"
    assert user.members["age"].text == "number"


def test_class_members_are_bound_through_this() -> None:
    _, scope = _resolve(
        """
        interface Props {
            title: string;
        }

        interface State {
            open: boolean;
        }

        class Panel extends React.Component<Props, State> {
            y = "label";

            toggle() {}

            render() {
                return <Foo a={this.props.title} b={this.y} />;
            }
        }
        """,
        "<Foo a={this.props.title} b={this.y} />",
    )

    assert _type(scope, "this") == "Panel"
    assert _type(scope, "this.props") == "Props"
    assert scope.bindings["this.props"].type.members["title"].text == "string"
    assert _type(scope, "this.state") == "State"
    assert _type(scope, "this.y") == "string"
    assert _type(scope, "this.toggle") == "() => any"
    assert scope.jsx_defined_in.type == "method_definition"


def test_loop_and_catch_bindings() -> None:
    _, scope = _resolve(
        """
        function List(items) {
            for (const item of items) {
                try {
                    render(<Row item={item} />);
                } catch (error) {
                    report(<Oops error={error} />);
                }
            }
        }
        """,
        "<Oops error={error} />",
    )

    assert {"items", "item", "error"} <= set(scope.bindings)


def test_inner_declarations_shadow_outer_ones() -> None:
    _, scope = _resolve(
        """
        const value = 1;

        function Show() {
            const value = "inner";
            return <b>{value}</b>;
        }
        """,
        "<b>{value}</b>",
    )

    assert _type(scope, "value") == "string"


def test_original_element_and_insertion_point() -> None:
    tree, scope = _resolve(
        """
        function Layout() {
            const title = "x";
            return (
                <main>
                    <Header title={title} />
                </main>
            );
        }
        """,
        "<Header title={title} />",
    )

    assert tree.node_text(scope.original_element) == "<Header title={title} />"
    assert scope.insertion_block.type == "statement_block"
    assert scope.insertion_statement.type == "return_statement"


def test_switch_case_is_the_insertion_block() -> None:
    tree, scope = _resolve(
        """
        function Pick({ k }) {
            switch (k) {
                case 1:
                    const label = "one";
                    return <b>{label}</b>;
                default:
                    return null;
            }
        }
        """,
        "<b>{label}</b>",
    )

    assert scope.insertion_block.type == "switch_case"
    assert scope.insertion_statement.type == "return_statement"
    assert _type(scope, "label") == "string"


def test_selection_is_trimmed_of_blanks_and_semicolon() -> None:
    text = "const el = <Foo />;\n"
    tree = SyntaxTree.parse(text)
    start = text.index(" <Foo")
    end = text.index("\n") + 1

    byte_start, byte_end = selection_bytes(tree, start, end)

    assert tree.slice(byte_start, byte_end) == "<Foo />"


def test_missing_element_raises() -> None:
    text = "const a = 1;\nconst b = <Foo />;\n"
    tree = SyntaxTree.parse(text)

    with pytest.raises(ScopeResolutionError):
        resolve_scope(tree, 0, len("const a = 1"))
