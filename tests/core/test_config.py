"""Tests for :mod:`componentize.core.config`."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomllib
from pydantic import ValidationError

from componentize.core.config import (
    AppConfig,
    ExtractSettings,
    env_overrides,
    load_config,
    load_packaged_defaults,
    load_user_config,
    render_user_config,
)


def test_packaged_defaults_match_model_defaults() -> None:
    config = load_config(defaults=load_packaged_defaults())

    assert config == AppConfig()
    assert config.extract.uses_arrow_function
    assert config.extract.uses_pascal_case
    assert not config.extract.uses_interface


def test_layers_apply_in_precedence_order() -> None:
    config = load_config(
        defaults=load_packaged_defaults(),
        user_config={
            "log_level": "info",
            "extract": {"component_name": "FromFile", "props_syntax": "interface"},
        },
        env_config={"extract": {"component_name": "FromEnv"}},
        cli_overrides={"log_level": "debug"},
    )

    assert config.log_level == "DEBUG"
    assert config.extract.component_name == "FromEnv"
    assert config.extract.props_syntax == "interface"
    assert config.extract.function_syntax == "arrow function"


def test_env_overrides_reads_prefixed_variables() -> None:
    environ = {
        "COMPONENTIZE_LOG_LEVEL": "error",
        "COMPONENTIZE_FUNCTION_SYNTAX": "function",
        "COMPONENTIZE_FILENAME_CASING": "",
        "UNRELATED": "x",
    }

    assert env_overrides(environ) == {
        "log_level": "error",
        "extract": {"function_syntax": "function"},
    }
    assert env_overrides({}) == {}


def test_choices_are_normalized() -> None:
    settings = ExtractSettings(function_syntax="Function", filename_casing="Camel Case")

    assert not settings.uses_arrow_function
    assert not settings.uses_pascal_case


@pytest.mark.parametrize(
    "payload",
    [
        {"component_name": "   "},
        {"max_filename_attempts": 0},
        {"indent_width": 12},
    ],
)
def test_invalid_settings_are_rejected(payload) -> None:
    with pytest.raises(ValidationError):
        ExtractSettings(**payload)


def test_user_config_missing_file_is_empty(tmp_path: Path) -> None:
    assert load_user_config(tmp_path / "componentize.toml") == {}


def test_rendered_config_round_trips(tmp_path: Path) -> None:
    config = AppConfig(
        log_dir=tmp_path / "logs",
        extract=ExtractSettings(component_name="Card", indent_width=2),
    )

    rendered = render_user_config(config)
    path = tmp_path / "componentize.toml"
    path.write_text(rendered, encoding="utf-8")

    assert rendered.startswith("# Generated by componentize init")
    reloaded = load_config(
        defaults=load_packaged_defaults(),
        user_config=load_user_config(path),
    )
    assert reloaded == config
    assert tomllib.loads(render_user_config(config, include_comments=False)) == (
        tomllib.loads(rendered)
    )
