"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
document outcomes, and model catalog listings.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import DocumentOutcome


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_document_outcome(command_name: str, outcome: DocumentOutcome | None) -> None:
    """Print the terminal outcome of one document and exit 1 when it failed."""

    if outcome is None:
        typer.secho(f"{command_name} failed: no document was processed.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    if outcome.succeeded:
        typer.echo(f"Audio: {outcome.output_path}")
        return

    stage = outcome.failed_stage.value if outcome.failed_stage is not None else "unknown"
    typer.secho(
        f"{command_name} failed at stage `{stage}` for `{outcome.source.name}`: "
        f"{outcome.error_type}",
        fg=typer.colors.RED,
        err=True,
    )
    raise typer.Exit(code=1)


def echo_model_catalog(catalog: dict[str, str], selected: str) -> None:
    """Print catalog aliases in sorted order, marking the configured one."""

    for name in sorted(catalog):
        marker = "*" if name == selected else " "
        typer.echo(f"{marker} {name}")
