from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from pintmerge.core.config import Config, find_config_path, load_config
from pintmerge.core.errors import ErrorCode
from pintmerge.core.result import Err
from pintmerge.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    config_path: Path
    console: ConsoleProtocol


def build_context(config_path: Path | None = None) -> CLIContext:
    path = find_config_path(config_path)
    config_result = load_config(path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        config=config_result.value,
        config_path=path,
        console=RichConsole(),
    )
