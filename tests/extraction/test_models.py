"""Tests for :mod:`componentize.extraction.models`."""

from __future__ import annotations

from pathlib import Path

import pytest

from componentize.extraction.models import (
    DocumentSnapshot,
    ElementContext,
    RequiredImportDeclaration,
    ScopeBinding,
    ScopeTable,
    SourceSpan,
    TextEdit,
    apply_text_edits,
)


def test_source_span_offsets_and_reversal() -> None:
    text = "ab\ncdef\ng"

    assert SourceSpan(1, 1, 2, 1).to_offsets(text) == (4, 9)
    assert SourceSpan(2, 1, 1, 1).to_offsets(text) == (4, 9)
    assert SourceSpan(0, 0, 0, 0).is_empty


@pytest.mark.parametrize(
    "span",
    [SourceSpan(3, 0, 3, 0), SourceSpan(0, 3, 0, 4), SourceSpan(-1, 0, 0, 0)],
)
def test_source_span_out_of_range(span: SourceSpan) -> None:
    with pytest.raises(ValueError):
        span.to_offsets("ab\ncdef\ng")


def test_apply_text_edits_orders_insertions_before_replacements() -> None:
    text = "<Foo />"
    edits = [
        TextEdit(0, 7, "<Bar />"),
        TextEdit(0, 0, "import Bar;\n"),
        TextEdit(0, 0, "const x = 1;\n"),
    ]

    assert apply_text_edits(text, edits) == "import Bar;\nconst x = 1;\n<Bar />"


def test_apply_text_edits_rejects_overlap() -> None:
    with pytest.raises(ValueError):
        apply_text_edits("abcdef", [TextEdit(0, 3, "x"), TextEdit(2, 4, "y")])


def test_scope_lookup_prefers_longest_prefix() -> None:
    table = ScopeTable(
        bindings={
            "this": ScopeBinding("this"),
            "this.props": ScopeBinding("this.props"),
        }
    )

    binding, rest = table.lookup("this.props.user.name")
    assert binding.name == "this.props"
    assert rest == ("user", "name")
    assert table.lookup("other") is None


def test_required_import_merging_is_idempotent() -> None:
    declaration = RequiredImportDeclaration("x").with_named("a").with_named("a")

    assert declaration.named_imports == ("a",)
    assert declaration.with_default("D").default_import == "D"
    assert RequiredImportDeclaration("../up").is_relative


def test_document_and_context_helpers() -> None:
    assert DocumentSnapshot(Path("a/App.tsx"), "").is_typescript
    assert not DocumentSnapshot(Path("a/App.jsx"), "").is_typescript

    context = ElementContext("Foo").with_attribute("onClick")
    assert context.attribute_source().attribute_name == "onClick"
    assert context.with_element("Bar").attribute_name is None
