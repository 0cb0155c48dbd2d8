from __future__ import annotations

import typer

from pintmerge.cli.commands.distribute import distribute

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# A single command: its arguments are the top-level arguments.
app.command()(distribute)


def main() -> None:
    app()
