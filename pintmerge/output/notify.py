"""Progress, conflict and error notifications.

The distribution flow and the git gateway report what they are doing
through a NotificationSink. Sinks are fire-and-forget: nothing they do or
return changes how a run proceeds.

- ConsoleSink: renders events on a ConsoleProtocol (production)
- RecordingSink: keeps every event in memory (tests)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Protocol

from pintmerge.output.console import ConsoleProtocol, Style

__all__ = [
    "ConsoleSink",
    "NotificationSink",
    "ProgressEvent",
    "ProgressStage",
    "RecordingSink",
    "progress_interval",
]

ProgressStage = Literal["fetch", "branch", "checkout", "cherry_pick", "push", "cleanup"]


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """One progress report.

    Attributes:
        stage: Which step of the run produced the event
        message: Human readable text (git output lines are passed verbatim)
        current: Completed steps, when the source reports a counter
        total: Total steps, when the source reports a counter
    """

    stage: ProgressStage
    message: str
    current: int | None = None
    total: int | None = None

    @property
    def is_counter(self) -> bool:
        return self.current is not None and self.total is not None


class NotificationSink(Protocol):
    def on_progress(self, event: ProgressEvent) -> None: ...

    def on_conflict_file(self, path: str) -> None: ...

    def on_error(self, message: str) -> None: ...


def progress_interval(total: int) -> int:
    """How many counter updates to skip between two printed ones.

    Checkouts of large trees report thousands of steps; only every 10th
    (more than 100 steps) or every 100th (more than 1000 steps) is shown.
    """
    if total > 1000:
        return 100
    if total > 100:
        return 10
    return 1


class ConsoleSink:
    """Render notifications on the console."""

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console
        self._counter_key: tuple[str, int] | None = None
        self._counter = 0

    def on_progress(self, event: ProgressEvent) -> None:
        current, total = event.current, event.total
        if current is None or total is None:
            self._console.print(event.message, Style.INFO if event.stage == "branch" else Style.DIM)
            return

        key = (event.stage, total)
        if key != self._counter_key:
            self._counter_key = key
            self._counter = 0

        if self._counter == 0 or current == total:
            self._console.print(
                f"{event.stage} progress: {current}/{total} {event.message}".rstrip(),
                Style.DIM,
            )
        self._counter = (self._counter + 1) % progress_interval(total)

    def on_conflict_file(self, path: str) -> None:
        self._console.warning(f"conflicted file: {path}")

    def on_error(self, message: str) -> None:
        self._console.error(message)


def _empty_events() -> list[ProgressEvent]:
    return []


def _empty_strs() -> list[str]:
    return []


@dataclass
class RecordingSink:
    """Sink that keeps every notification, for tests."""

    progress: list[ProgressEvent] = field(default_factory=_empty_events)
    conflict_files: list[str] = field(default_factory=_empty_strs)
    errors: list[str] = field(default_factory=_empty_strs)

    def on_progress(self, event: ProgressEvent) -> None:
        self.progress.append(event)

    def on_conflict_file(self, path: str) -> None:
        self.conflict_files.append(path)

    def on_error(self, message: str) -> None:
        self.errors.append(message)

    def messages(self, stage: ProgressStage | None = None) -> list[str]:
        return [e.message for e in self.progress if stage is None or e.stage == stage]
