"""Command-line interface primitives for :mod:`componentize`.

This module exposes the Typer application behind the ``componentize``
console script. The CLI plays the editing host: it reads the document from
disk, takes the selection from ``--start``/``--end`` and writes both the new
module and the patched document back.

Example:
    >>> import typer
    >>> from componentize.cli import create_app
    >>> app = create_app()
    >>> isinstance(app, typer.Typer)
    True
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from componentize.core.config import (
    AppConfig,
    DEFAULTS_RESOURCE_NAME,
    USER_CONFIG_FILENAME,
    env_overrides,
    load_config,
    load_packaged_defaults,
    load_user_config,
    render_user_config,
)
from componentize.core.logging import configure_logging, get_logger
from componentize.extraction import (
    ExtractionError,
    ExtractionPlan,
    ExtractionService,
    FileDocumentHost,
    FileEditorHost,
    LocalFileSystem,
    SourceSpan,
    is_extractable,
    read_invocation,
)

_app_help = (
    "Extract a selected JSX element into a standalone React component."
    "\n\n"
    "Use `componentize extract FILE --start L:C --end L:C` with 1-based "
    "line and column positions."
)


def _parse_position(value: str, *, option: str) -> tuple[int, int]:
    """Translate a 1-based ``LINE:COLUMN`` into a zero-based pair.

    Example:
        >>> _parse_position("3:5", option="--start")
        (2, 4)
    """

    line, sep, column = value.strip().partition(":")
    if not sep:
        raise typer.BadParameter(
            f"Expected LINE:COLUMN, got {value!r}", param_hint=option
        )
    try:
        line_number, column_number = int(line), int(column)
    except ValueError as exc:
        raise typer.BadParameter(
            f"Expected LINE:COLUMN, got {value!r}", param_hint=option
        ) from exc
    if line_number < 1 or column_number < 1:
        raise typer.BadParameter(
            "Line and column numbers start at 1", param_hint=option
        )
    return line_number - 1, column_number - 1


def _selection(start: str, end: str) -> SourceSpan:
    start_line, start_column = _parse_position(start, option="--start")
    end_line, end_column = _parse_position(end, option="--end")
    return SourceSpan(start_line, start_column, end_line, end_column)


def _resolve_config(
    config_path: Path | None,
    cli_overrides: dict[str, Any],
) -> AppConfig:
    """Load configuration honouring the precedence stack."""

    user_path = config_path or Path.cwd() / USER_CONFIG_FILENAME
    try:
        return load_config(
            defaults=load_packaged_defaults(),
            user_config=load_user_config(user_path),
            env_config=env_overrides(os.environ),
            cli_overrides=cli_overrides,
        )
    except ValidationError as exc:
        typer.secho(f"Invalid configuration: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


def _build_cli_overrides(
    *,
    log_level: str | None,
    name: str | None,
    function_syntax: str | None,
    filename_casing: str | None,
    props_syntax: str | None,
) -> dict[str, Any]:
    """Translate CLI flags into a config overlay, skipping unset ones."""

    extract = {
        key: value
        for key, value in (
            ("component_name", name),
            ("function_syntax", function_syntax),
            ("filename_casing", filename_casing),
            ("props_syntax", props_syntax),
        )
        if value is not None
    }
    overrides: dict[str, Any] = {}
    if log_level is not None:
        overrides["log_level"] = log_level
    if extract:
        overrides["extract"] = extract
    return overrides


def _emit_dry_run(plan: ExtractionPlan) -> None:
    typer.secho(
        f"Would create {plan.descriptor.path} ({plan.descriptor.component_name})",
        fg=typer.colors.CYAN,
        bold=True,
    )
    typer.echo(plan.module_text)
    typer.secho(f"Would update {plan.document.path}", fg=typer.colors.CYAN, bold=True)
    typer.echo(plan.patched_text)


def create_app() -> "typer.Typer":
    """Return the Typer application powering the ``componentize`` CLI.

    Returns:
        A configured Typer application ready to be invoked by
        ``componentize``.
    """

    app = typer.Typer(
        help=_app_help,
        no_args_is_help=True,
        rich_markup_mode="rich",
        invoke_without_command=False,
        cls=typer.core.TyperGroup,
    )

    @app.callback()
    def main_callback() -> None:
        """Top-level CLI callback ensuring subcommands are dispatched."""

        return None

    @app.command(
        "extract",
        help="Move the selected JSX element into a new component module.",
    )
    def extract_command(  # noqa: PLR0913 - CLI surface area intentionally explicit
        file: Path = typer.Argument(
            ...,
            exists=True,
            dir_okay=False,
            readable=True,
            help="Source file holding the JSX to extract.",
        ),
        start: str = typer.Option(
            ..., "--start", "-s", metavar="LINE:COL", help="Selection start."
        ),
        end: str = typer.Option(
            ..., "--end", "-e", metavar="LINE:COL", help="Selection end."
        ),
        name: str | None = typer.Option(
            None,
            "--name",
            "-n",
            help="Seed for the generated component name (default: Component).",
        ),
        function_syntax: str | None = typer.Option(
            None,
            "--function-syntax",
            help="'arrow function' or 'function'.",
        ),
        filename_casing: str | None = typer.Option(
            None,
            "--filename-casing",
            help="'pascal case' or 'camel case'.",
        ),
        props_syntax: str | None = typer.Option(
            None,
            "--props-syntax",
            help="'interface' or 'type'.",
        ),
        dry_run: bool = typer.Option(
            False,
            "--dry-run",
            help="Print the new module and patched document without writing.",
        ),
        config_path: Path | None = typer.Option(
            None,
            "--config",
            "-c",
            help=f"Path to {USER_CONFIG_FILENAME} (defaults to ./{USER_CONFIG_FILENAME}).",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            "-l",
            help="Override the logging level (DEBUG/INFO/WARNING/ERROR).",
        ),
    ) -> None:
        """Extract the selection of ``file`` into a sibling module."""

        selection = _selection(start, end)
        config = _resolve_config(
            config_path,
            _build_cli_overrides(
                log_level=log_level,
                name=name,
                function_syntax=function_syntax,
                filename_casing=filename_casing,
                props_syntax=props_syntax,
            ),
        )
        configure_logging(level=config.log_level, log_dir=config.log_dir)
        logger = get_logger(__name__, command="extract")

        service = ExtractionService(config.extract, logger=logger)
        filesystem = LocalFileSystem()
        try:
            document, span = read_invocation(FileEditorHost(file, selection))
            plan = service.plan(document, span, filesystem=filesystem)
            if dry_run:
                logger.info("extract-dry-run", module=str(plan.descriptor.path))
                _emit_dry_run(plan)
                return
            result = service.execute(
                plan,
                host=FileDocumentHost(),
                filesystem=filesystem,
            )
        except ExtractionError as exc:
            logger.warning("extract-failed", error=str(exc), stage=service.stage)
            typer.secho(str(exc), fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc

        typer.secho(result.message, fg=typer.colors.GREEN, bold=True)
        typer.echo(f"  module: {result.module_path}")
        typer.echo(f"  props: {', '.join(p.prop_name for p in plan.props) or '-'}")

    @app.command(
        "check",
        help="Report whether the selection can be extracted.",
    )
    def check_command(
        file: Path = typer.Argument(
            ...,
            exists=True,
            dir_okay=False,
            readable=True,
            help="Source file holding the selection.",
        ),
        start: str = typer.Option(
            ..., "--start", "-s", metavar="LINE:COL", help="Selection start."
        ),
        end: str = typer.Option(
            ..., "--end", "-e", metavar="LINE:COL", help="Selection end."
        ),
    ) -> None:
        """Exit with ``0`` when extractable and ``1`` otherwise."""

        selection = _selection(start, end)
        text = file.read_text(encoding="utf-8")
        try:
            first, last = selection.to_offsets(text)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--start/--end") from exc

        if is_extractable(text[first:last]):
            typer.secho("extractable", fg=typer.colors.GREEN)
            return
        typer.secho("not extractable", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)

    @app.command(
        "init",
        help=f"Write a {USER_CONFIG_FILENAME} seeded with the defaults.",
    )
    def init_command(
        path: Path | None = typer.Option(
            None,
            "--path",
            "-p",
            help=f"Target file (defaults to ./{USER_CONFIG_FILENAME}).",
        ),
        force: bool = typer.Option(
            False,
            "--force",
            "-f",
            help="Overwrite an existing configuration file.",
        ),
    ) -> None:
        """Render the effective configuration into a commented TOML file."""

        target = path or Path.cwd() / USER_CONFIG_FILENAME
        if target.exists() and not force:
            typer.secho(
                f"{target} already exists; pass --force to overwrite.",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1)

        config = _resolve_config(None, {})
        configure_logging(level=config.log_level, log_dir=config.log_dir)
        logger = get_logger(__name__, command="init")

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(render_user_config(config), encoding="utf-8")
        logger.info("init-complete", path=str(target))

        typer.secho("Configuration written", fg=typer.colors.GREEN, bold=True)
        typer.echo(f"  config: {target}")
        typer.echo(f"  defaults: packaged resource ({DEFAULTS_RESOURCE_NAME})")

    return app


__all__ = ["create_app"]
