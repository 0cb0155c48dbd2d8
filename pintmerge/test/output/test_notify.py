"""Tests for pintmerge.output.notify module."""

from __future__ import annotations

from pintmerge.output.console import MockConsole, Style
from pintmerge.output.notify import ConsoleSink, ProgressEvent, RecordingSink, progress_interval


class TestProgressEvent:
    def test_counter(self) -> None:
        assert ProgressEvent("checkout", "x", current=1, total=2).is_counter is True
        assert ProgressEvent("checkout", "x").is_counter is False


class TestProgressInterval:
    def test_small_totals_report_every_step(self) -> None:
        assert progress_interval(1) == 1
        assert progress_interval(100) == 1

    def test_medium_totals(self) -> None:
        assert progress_interval(101) == 10
        assert progress_interval(1000) == 10

    def test_large_totals(self) -> None:
        assert progress_interval(1001) == 100


class TestConsoleSink:
    def test_plain_progress(self) -> None:
        console = MockConsole()
        sink = ConsoleSink(console)

        sink.on_progress(ProgressEvent("fetch", "Fetching state of upstream"))
        sink.on_progress(ProgressEvent("branch", "Found branch upstream/master in upstream"))

        assert console.outputs[0].style == Style.DIM
        assert console.outputs[1].style == Style.INFO
        assert console.messages[1] == "Found branch upstream/master in upstream"

    def test_counter_every_step_for_small_totals(self) -> None:
        console = MockConsole()
        sink = ConsoleSink(console)

        for i in range(1, 6):
            sink.on_progress(ProgressEvent("checkout", "Updating files", current=i, total=5))

        assert len(console.outputs) == 5
        assert console.messages[0] == "checkout progress: 1/5 Updating files"

    def test_counter_throttled_for_large_totals(self) -> None:
        console = MockConsole()
        sink = ConsoleSink(console)

        for i in range(1, 201):
            sink.on_progress(ProgressEvent("checkout", "", current=i, total=200))

        # every 10th update, plus the final one
        assert len(console.outputs) == 21
        assert console.messages[-1] == "checkout progress: 200/200"

    def test_counter_resets_for_new_total(self) -> None:
        console = MockConsole()
        sink = ConsoleSink(console)

        sink.on_progress(ProgressEvent("checkout", "", current=1, total=500))
        sink.on_progress(ProgressEvent("checkout", "", current=2, total=500))
        sink.on_progress(ProgressEvent("push", "", current=1, total=3))

        assert console.messages == [
            "checkout progress: 1/500",
            "push progress: 1/3",
        ]

    def test_conflict_and_error(self) -> None:
        console = MockConsole()
        sink = ConsoleSink(console)

        sink.on_conflict_file("docs/index.rst")
        sink.on_error("push rejected")

        assert console.messages == ["warning: conflicted file: docs/index.rst", "error: push rejected"]


class TestRecordingSink:
    def test_records_everything(self) -> None:
        sink = RecordingSink()
        sink.on_progress(ProgressEvent("fetch", "a"))
        sink.on_progress(ProgressEvent("push", "b"))
        sink.on_conflict_file("f")
        sink.on_error("e")

        assert sink.messages() == ["a", "b"]
        assert sink.messages("push") == ["b"]
        assert sink.conflict_files == ["f"]
        assert sink.errors == ["e"]
