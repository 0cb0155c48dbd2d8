"""End-to-end distribution against real git repositories in tmp_path."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from pintmerge.core.result import Ok
from pintmerge.git.gateway import Credentials, Signer
from pintmerge.git.repository import GitCliGateway
from pintmerge.output.notify import RecordingSink
from pintmerge.services.distribution import (
    DistributionOrchestrator,
    DistributionReport,
    DistributionRequest,
    OutcomeStatus,
)

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")

_IDENTITY = ["-c", "user.name=Author", "-c", "user.email=author@example.com", "-c", "commit.gpgsign=false"]


def git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *_IDENTITY, *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str) -> str:
    (repo / name).write_text(content, encoding="utf-8")
    git(repo, "add", name)
    git(repo, "commit", "-q", "-m", message)
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture
def repos(tmp_path: Path) -> tuple[Path, Path, str]:
    """Bare remote with master, a, b and c, plus a clone with remote "upstream".

    - a: plain copy of the base, the fix applies
    - b: already carries the fix
    - c: edits the same line as the fix
    Returns (remote, clone, fix sha).
    """
    seed = tmp_path / "seed"
    seed.mkdir()
    git(seed, "init", "-q", "-b", "master")
    commit_file(seed, "guide.txt", "Install with pip.\n", "Add guide")
    git(seed, "branch", "a")
    git(seed, "branch", "c")

    fix = commit_file(seed, "guide.txt", "Install with pip install pintmerge.\n", "Fix install line")
    git(seed, "branch", "b")

    git(seed, "checkout", "-q", "c")
    commit_file(seed, "guide.txt", "Install from source.\n", "Rewrite install line")
    git(seed, "checkout", "-q", "master")

    remote = tmp_path / "remote.git"
    subprocess.run(["git", "init", "-q", "--bare", str(remote)], check=True)
    git(seed, "push", "-q", str(remote), "master", "a", "b", "c")

    clone = tmp_path / "clone"
    subprocess.run(
        ["git", "clone", "-q", "-o", "upstream", "-b", "master", str(remote), str(clone)],
        check=True,
    )
    git(clone, "config", "user.name", "Clone User")
    git(clone, "config", "user.email", "clone@example.com")
    return remote, clone, fix


def _request(fix: str, targets: tuple[str, ...], *, delete: bool = False) -> DistributionRequest:
    return DistributionRequest(
        source_branch="master",
        commit_id=fix,
        target_branches=targets,
        local_branch_base_name="docs-1",
        signer=Signer(name="Docs Bot", email="bot@example.com"),
        delete_local_branches_after_success=delete,
    )


def _run(clone: Path, request: DistributionRequest) -> tuple[RecordingSink, DistributionReport]:
    sink = RecordingSink()
    gateway = GitCliGateway(clone, credentials=Credentials(login="jim", token="s3cret"))
    result = DistributionOrchestrator(gateway=gateway, sink=sink).run(request)
    assert isinstance(result, Ok), result
    return sink, result.value


def test_applies_and_pushes(repos: tuple[Path, Path, str]) -> None:
    remote, clone, fix = repos

    sink, report = _run(clone, _request(fix, ("a",)))

    assert [o.status for o in report.outcomes] == [OutcomeStatus.APPLIED]
    assert git(remote, "show", "a:guide.txt") == "Install with pip install pintmerge."
    assert git(remote, "log", "-1", "--format=%cn <%ce>", "a") == "Docs Bot <bot@example.com>"
    assert git(remote, "log", "-1", "--format=%an", "a") == "Author"
    assert sink.errors == []
    # kept: delete flag is off
    assert git(clone, "branch", "--list", "docs-1-a") != ""


def test_noop_and_conflict(repos: tuple[Path, Path, str]) -> None:
    remote, clone, fix = repos
    before_c = git(remote, "rev-parse", "c")

    sink, report = _run(clone, _request(fix, ("b", "c", "a")))

    assert [(o.target_branch, o.status) for o in report.outcomes] == [
        ("b", OutcomeStatus.SKIPPED_NO_CHANGE),
        ("c", OutcomeStatus.CONFLICT),
    ]
    assert report.aborted is True
    assert sink.conflict_files == ["guide.txt"]
    # nothing pushed to c, a never attempted
    assert git(remote, "rev-parse", "c") == before_c
    assert git(clone, "branch", "--list", "docs-1-a") == ""
    # the conflicted pick was rolled back
    assert git(clone, "status", "--porcelain") == ""


def test_rerun_with_cleanup(repos: tuple[Path, Path, str]) -> None:
    _, clone, fix = repos
    _run(clone, _request(fix, ("a",)))

    sink, report = _run(clone, _request(fix, ("a", "b"), delete=True))

    # first run already pushed the fix to a
    assert [o.status for o in report.outcomes] == [
        OutcomeStatus.SKIPPED_NO_CHANGE,
        OutcomeStatus.SKIPPED_NO_CHANGE,
    ]
    assert "Deleting existing local branch docs-1-a" in sink.messages("branch")
    assert git(clone, "branch", "--list", "docs-1-*") == ""
    assert sink.errors == []


def test_noop_detected_under_translated_locale(
    repos: tuple[Path, Path, str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _, clone, fix = repos
    monkeypatch.setenv("LANG", "C.UTF-8")
    monkeypatch.setenv("LANGUAGE", "de")

    sink, report = _run(clone, _request(fix, ("b",), delete=True))

    assert [o.status for o in report.outcomes] == [OutcomeStatus.SKIPPED_NO_CHANGE]
    assert sink.errors == []
    assert git(clone, "branch", "--list", "docs-1-b") == ""


def test_forced_checkout_reports_local_changes(repos: tuple[Path, Path, str]) -> None:
    _, clone, fix = repos
    (clone / "guide.txt").write_text("Local edit.\n", encoding="utf-8")
    (clone / "notes.txt").write_text("scratch\n", encoding="utf-8")

    sink, report = _run(clone, _request(fix, ("a",)))

    assert [o.status for o in report.outcomes] == [OutcomeStatus.APPLIED]
    messages = sink.messages("checkout")
    assert "dirty file at: guide.txt" in messages
    assert "untracked file at: notes.txt" in messages
    assert sink.conflict_files == []
