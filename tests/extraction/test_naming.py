"""Tests for :mod:`componentize.extraction.naming`."""

from __future__ import annotations

from pathlib import Path

import pytest

from componentize.core.config import ExtractSettings
from componentize.extraction.errors import ModuleNameExhaustedError
from componentize.extraction.naming import (
    module_descriptor,
    to_camel_case,
    to_pascal_case,
)


def test_existing_modules_are_skipped(tmp_path: Path) -> None:
    for index in range(1, 4):
        (tmp_path / f"Foo{index}.tsx").write_text("", encoding="utf-8")
    document = tmp_path / "App.tsx"

    descriptor = module_descriptor(
        document,
        ExtractSettings(component_name="Foo"),
        Path.exists,
    )

    assert descriptor.file_name == "Foo4.tsx"
    assert descriptor.path == tmp_path / "Foo4.tsx"
    assert descriptor.component_name == "Foo4"
    assert descriptor.index == 4
    assert descriptor.import_path == "./Foo4"


def test_camel_case_file_names_keep_pascal_component(tmp_path: Path) -> None:
    descriptor = module_descriptor(
        tmp_path / "list.jsx",
        ExtractSettings(component_name="ListItem", filename_casing="camel case"),
        Path.exists,
    )

    assert descriptor.file_name == "listItem1.jsx"
    assert descriptor.component_name == "ListItem1"


def test_name_search_is_bounded(tmp_path: Path) -> None:
    tried: list[Path] = []

    def always_taken(path: Path) -> bool:
        tried.append(path)
        return True

    with pytest.raises(ModuleNameExhaustedError):
        module_descriptor(
            tmp_path / "App.tsx",
            ExtractSettings(max_filename_attempts=3),
            always_taken,
        )

    assert [p.name for p in tried] == [
        "Component1.tsx",
        "Component2.tsx",
        "Component3.tsx",
    ]


@pytest.mark.parametrize(
    ("text", "pascal", "camel"),
    [
        ("card", "Card", "card"),
        ("UserCard", "UserCard", "userCard"),
        ("my card", "Mycard", "mycard"),
        ("forms/Input", "FormsInput", "formsInput"),
        ("", "", ""),
    ],
)
def test_casing_helpers(text: str, pascal: str, camel: str) -> None:
    assert to_pascal_case(text) == pascal
    assert to_camel_case(text) == camel
