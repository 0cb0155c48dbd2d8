"""Subprocess execution with Result-based error handling.

Wraps subprocess.run so that callers get captured output or a structured
error instead of exceptions.

Usage:
    result = run_output(["git", "rev-parse", "HEAD"], cwd=repo_path)
    match result:
        case Ok(out):
            print(out.stdout)
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from pintmerge.core.result import Err, Ok, Result

__all__ = ["ProcessError", "ProcessOutput", "run_output"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran or timed out).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        # Only the first words: later arguments may carry credentials.
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"

    @property
    def output(self) -> str:
        """Both streams joined, for messages that git splits between them."""
        return "\n".join(s for s in (self.stdout.strip(), self.stderr.strip()) if s)


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    stdout: str
    stderr: str


def run_output(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[ProcessOutput, ProcessError]:
    """Execute a command and return both output streams or an error.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Extra environment variables, layered over the current environment.
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(ProcessOutput) on exit code 0, Err(ProcessError) otherwise.
    """
    full_env = {**os.environ, **env} if env else None
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=full_env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(ProcessOutput(stdout=proc.stdout, stderr=proc.stderr))
