"""Tests for :mod:`componentize.extraction.fragment`."""

from __future__ import annotations

import pytest

from componentize.extraction.fragment import is_extractable, parse_jsx


@pytest.mark.parametrize(
    "text",
    [
        "<Foo />",
        "<Foo a={x} b={this.y}/>",
        "<div className=\"box\">hello</div>",
        "  <ui.Card>\n    <span>{title}</span>\n  </ui.Card>  ",
        "<Foo />;",
    ],
)
def test_accepts_single_jsx_element(text: str) -> None:
    fragment = parse_jsx(text)

    assert fragment is not None
    assert fragment.node.type in {"jsx_element", "jsx_self_closing_element"}


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "<></>",
        "<>text</>",
        "<div>",
        "<Foo /><Bar />",
        "<Foo />; <Bar />",
        "const a = <Foo />;",
        "foo()",
        "x + 1",
        "<div></span>",
    ],
)
def test_rejects_anything_else(text: str) -> None:
    assert parse_jsx(text) is None
    assert is_extractable(text) is False


def test_fragment_exposes_tag_and_text() -> None:
    fragment = parse_jsx("<Card title={t}>body</Card>")

    assert fragment is not None
    assert fragment.tag_name == "Card"
    assert fragment.text == "<Card title={t}>body</Card>"
    assert fragment.is_self_closing is False


def test_self_closing_flag() -> None:
    fragment = parse_jsx("<Avatar user={user} />")

    assert fragment is not None
    assert fragment.is_self_closing is True
    assert fragment.tag_name == "Avatar"


@pytest.mark.parametrize(
    "text",
    ["<Foo />", "<div>", "<a>x</a>", "<>y</>", "not jsx", "<A><B /></A>"],
)
def test_recognition_is_idempotent(text: str) -> None:
    assert is_extractable(text) == is_extractable(text)
    first = parse_jsx(text)
    second = parse_jsx(text)
    assert (first is None) == (second is None)
    if first is not None and second is not None:
        assert first.text == second.text
