"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from pintmerge.core.errors import ErrorCode
from pintmerge.output.console import Style

if TYPE_CHECKING:
    from pintmerge.cli.context import CLIContext


def exit_with_error(
    ctx: CLIContext,
    error: object,
    error_code: ErrorCode,
) -> NoReturn:
    """Print an error (and its hint, if any) and exit with ``error_code``.

    Expects error objects to have 'message' and optional 'hint' attributes.
    """
    message: str = getattr(error, "message", str(error))
    hint: str | None = getattr(error, "hint", None)
    ctx.console.error(message)
    if hint:
        ctx.console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(error_code))


def show_version(value: bool) -> None:
    """Eager ``--version`` callback."""
    if value:
        from pintmerge import __version__

        typer.echo(__version__)
        raise typer.Exit(code=0)
