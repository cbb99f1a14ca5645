"""Configuration models and loaders for :mod:`componentize`."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
import os
from pathlib import Path
from typing import Any, Mapping

import tomllib
import tomlkit
from pydantic import BaseModel, Field, field_validator, model_validator

from componentize.resources import get_resource

ARROW_FUNCTION_SYNTAX = "arrow function"
FUNCTION_DECLARATION_SYNTAX = "function"
PASCAL_CASE = "pascal case"
CAMEL_CASE = "camel case"
INTERFACE_SYNTAX = "interface"
TYPE_ALIAS_SYNTAX = "type"

DEFAULTS_RESOURCE_NAME = "componentize.defaults.toml"
USER_CONFIG_FILENAME = "componentize.toml"
ENV_PREFIX = "COMPONENTIZE_"

_ENV_SETTINGS: tuple[str, ...] = (
    "component_name",
    "function_syntax",
    "filename_casing",
    "props_syntax",
)


class ExtractSettings(BaseModel):
    """User-facing options steering component extraction."""

    component_name: str = Field(
        default="Component",
        description="Seed used to derive the generated component name.",
    )
    function_syntax: str = Field(
        default=ARROW_FUNCTION_SYNTAX,
        description=(
            "'arrow function' emits `const X = () => {}`; any other value "
            "emits `function X() {}`."
        ),
    )
    filename_casing: str = Field(
        default=PASCAL_CASE,
        description="'pascal case' or 'camel case' for the file name stem.",
    )
    props_syntax: str = Field(
        default=TYPE_ALIAS_SYNTAX,
        description="'interface' emits an interface; otherwise a type alias.",
    )
    max_filename_attempts: int = Field(
        default=1000,
        ge=1,
        description="Upper bound on numeric suffixes tried for a file name.",
    )
    indent_width: int = Field(
        default=4,
        ge=1,
        le=8,
        description="Spaces per indentation level in generated modules.",
    )

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }

    @field_validator("component_name")
    @classmethod
    def _validate_component_name(cls, value: str) -> str:
        if not value:
            raise ValueError("component_name cannot be blank.")
        return value

    @field_validator("function_syntax", "filename_casing", "props_syntax")
    @classmethod
    def _normalize_choice(cls, value: str) -> str:
        return value.lower()

    @property
    def uses_arrow_function(self) -> bool:
        return self.function_syntax == ARROW_FUNCTION_SYNTAX

    @property
    def uses_pascal_case(self) -> bool:
        return self.filename_casing == PASCAL_CASE

    @property
    def uses_interface(self) -> bool:
        return self.props_syntax == INTERFACE_SYNTAX


class AppConfig(BaseModel):
    """Root configuration for the :mod:`componentize` tool."""

    log_level: str = Field(
        default="WARNING",
        description="Default logging level for the application runtime.",
    )
    log_dir: Path | None = Field(
        default=None,
        description="Optional directory receiving JSON log files.",
    )
    extract: ExtractSettings = Field(
        default_factory=ExtractSettings,
        description="Component extraction options.",
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @model_validator(mode="after")
    def _post_process(self) -> "AppConfig":
        object.__setattr__(self, "log_level", self.log_level.upper())
        if self.log_dir is not None:
            object.__setattr__(self, "log_dir", self.log_dir.expanduser())
        return self


def read_packaged_defaults_text() -> str:
    """Return the raw packaged defaults TOML content."""

    resource = get_resource(DEFAULTS_RESOURCE_NAME)
    return resource.read_text(encoding="utf-8")


def load_packaged_defaults() -> dict[str, Any]:
    """Load the packaged defaults as a plain dictionary.

    Example:
        >>> load_packaged_defaults()["extract"]["component_name"]
        'Component'
    """

    return tomllib.loads(read_packaged_defaults_text())


def load_user_config(path: Path) -> dict[str, Any]:
    """Parse the user TOML file at ``path``; missing files yield ``{}``."""

    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect ``COMPONENTIZE_*`` environment overrides.

    Example:
        >>> env_overrides({"COMPONENTIZE_COMPONENT_NAME": "Card"})
        {'extract': {'component_name': 'Card'}}
    """

    source = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    level = source.get(f"{ENV_PREFIX}LOG_LEVEL")
    if level:
        overrides["log_level"] = level
    extract: dict[str, str] = {}
    for key in _ENV_SETTINGS:
        value = source.get(f"{ENV_PREFIX}{key.upper()}")
        if value:
            extract[key] = value
    if extract:
        overrides["extract"] = extract
    return overrides


def _deep_merge(
    base: Mapping[str, Any],
    overlay: Mapping[str, Any],
) -> dict[str, Any]:
    """Recursively merge ``overlay`` into ``base`` returning a new dict."""

    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        if (
            key in merged
            and isinstance(merged[key], MappingABC)
            and isinstance(value, MappingABC)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    *,
    defaults: Mapping[str, Any],
    user_config: Mapping[str, Any] | None = None,
    env_config: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Load configuration according to the precedence stack.

    Precedence, lowest first: packaged defaults, ``componentize.toml``,
    environment variables, CLI flags.

    Raises:
        pydantic.ValidationError: If the merged payload is invalid.
    """

    stack: dict[str, Any] = dict(defaults)
    for layer in (user_config, env_config, cli_overrides):
        if layer:
            stack = _deep_merge(stack, layer)
    return AppConfig(**stack)


def render_user_config(config: AppConfig, *, include_comments: bool = True) -> str:
    """Render a ``componentize.toml`` template from ``config``."""

    document = tomlkit.document()
    if include_comments:
        document.add(tomlkit.comment("Generated by componentize init"))
        document.add(
            tomlkit.comment(
                "Precedence: CLI flags > env vars > componentize.toml > defaults"
            )
        )
        document.add(tomlkit.nl())

    document["log_level"] = config.log_level
    if config.log_dir is not None:
        document["log_dir"] = str(config.log_dir)

    settings = config.extract
    extract_table = tomlkit.table()
    extract_table["component_name"] = settings.component_name
    extract_table["function_syntax"] = settings.function_syntax
    if include_comments:
        extract_table["function_syntax"].comment(
            f"'{ARROW_FUNCTION_SYNTAX}' or '{FUNCTION_DECLARATION_SYNTAX}'"
        )
    extract_table["filename_casing"] = settings.filename_casing
    if include_comments:
        extract_table["filename_casing"].comment(
            f"'{PASCAL_CASE}' or '{CAMEL_CASE}'"
        )
    extract_table["props_syntax"] = settings.props_syntax
    if include_comments:
        extract_table["props_syntax"].comment(
            f"'{INTERFACE_SYNTAX}' or '{TYPE_ALIAS_SYNTAX}'"
        )
    extract_table["max_filename_attempts"] = settings.max_filename_attempts
    extract_table["indent_width"] = settings.indent_width
    document["extract"] = extract_table

    return tomlkit.dumps(document)


__all__ = [
    "ARROW_FUNCTION_SYNTAX",
    "CAMEL_CASE",
    "DEFAULTS_RESOURCE_NAME",
    "ENV_PREFIX",
    "FUNCTION_DECLARATION_SYNTAX",
    "INTERFACE_SYNTAX",
    "PASCAL_CASE",
    "TYPE_ALIAS_SYNTAX",
    "USER_CONFIG_FILENAME",
    "AppConfig",
    "ExtractSettings",
    "env_overrides",
    "load_config",
    "load_packaged_defaults",
    "load_user_config",
    "read_packaged_defaults_text",
    "render_user_config",
]
