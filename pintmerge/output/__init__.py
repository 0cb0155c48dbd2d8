"""Console output and run notifications."""

from .console import ConsoleProtocol, MockConsole, OutputRecord, RichConsole, Style
from .notify import ConsoleSink, NotificationSink, ProgressEvent, RecordingSink

__all__ = [
    "ConsoleProtocol",
    "ConsoleSink",
    "MockConsole",
    "NotificationSink",
    "OutputRecord",
    "ProgressEvent",
    "RecordingSink",
    "RichConsole",
    "Style",
]
