"""Tests for :mod:`componentize.resources`."""

from __future__ import annotations

import pytest

from componentize.resources import get_resource


def test_get_resource_missing_file_raises() -> None:
    with pytest.raises(FileNotFoundError):
        get_resource("does-not-exist.toml")


def test_defaults_are_packaged() -> None:
    text = get_resource("componentize.defaults.toml").read_text(encoding="utf-8")

    assert "[extract]" in text
