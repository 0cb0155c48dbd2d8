"""VcsGateway backed by the git command line.

Usage:
    gateway = GitCliGateway(Path("~/src/docs").expanduser(), credentials=creds)

    match gateway.fetch("upstream"):
        case Ok(_):
            branch = gateway.find_branch("0.8.1-ksqldb", remote="upstream")
        case Err(e):
            print(f"fetch failed: {e.message}")
"""

from __future__ import annotations

import base64
import re
from pathlib import Path

from pintmerge.core.result import Err, Ok, Result
from pintmerge.git.gateway import (
    BranchRef,
    CommitRef,
    Credentials,
    GitError,
    PickApplied,
    PickConflict,
    PickFailed,
    PickNoOp,
    PickOutcome,
    Signer,
)
from pintmerge.output.notify import NotificationSink, ProgressEvent, ProgressStage
from pintmerge.platform.process import ProcessError, ProcessOutput
from pintmerge.platform.process import run_output as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_WORKTREE_TIMEOUT_SECONDS = 2 * 60.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

_NETWORK_COMMANDS = {"fetch", "push"}
_WORKTREE_COMMANDS = {"checkout", "cherry-pick"}

# "Updating files:  45% (450/1000)" / "Writing objects: 100% (3/3), 290 bytes"
_COUNTER_RE = re.compile(r"\((\d+)/(\d+)\)")
_EMPTY_PICK_RE = re.compile(r"is now empty|nothing to commit|nothing added to commit")

__all__ = ["GitCliGateway"]


def _split_lines(text: str) -> list[str]:
    """Split git output on newlines and carriage returns (progress redraws)."""
    return [ln.strip() for ln in re.split(r"[\r\n]+", text) if ln.strip()]


def _progress_events(stage: ProgressStage, text: str) -> list[ProgressEvent]:
    events: list[ProgressEvent] = []
    for line in _split_lines(text):
        match = _COUNTER_RE.search(line)
        if match:
            events.append(
                ProgressEvent(
                    stage=stage,
                    message=line,
                    current=int(match.group(1)),
                    total=int(match.group(2)),
                )
            )
        else:
            events.append(ProgressEvent(stage=stage, message=line))
    return events


def _git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=error.stderr.strip() or error.stdout.strip() or fallback,
        returncode=error.returncode,
    )


class GitCliGateway:
    """Run repository operations through ``git -C <path>``.

    Attributes:
        path: Path to the local clone
    """

    def __init__(self, path: Path, *, credentials: Credentials | None = None) -> None:
        self.path = path
        self._credentials = credentials

    def exists(self) -> bool:
        """Check if the path is a git working tree."""
        return (self.path / ".git").exists()

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def find_branch(self, name: str, *, remote: str | None = None) -> BranchRef | None:
        ref = f"refs/remotes/{remote}/{name}" if remote else f"refs/heads/{name}"
        sha = self._rev_parse(f"{ref}^{{commit}}")
        if sha is None:
            return None

        if remote:
            return BranchRef(name=f"{remote}/{name}", ref=ref, sha=sha, remote=remote, upstream=name)

        tracked_remote = self._config_value(f"branch.{name}.remote")
        merge = self._config_value(f"branch.{name}.merge")
        upstream = merge.removeprefix("refs/heads/") if merge else None
        return BranchRef(name=name, ref=ref, sha=sha, remote=tracked_remote, upstream=upstream)

    def find_commit(self, branch: BranchRef, commit_id: str) -> CommitRef | None:
        sha = self._rev_parse(f"{commit_id}^{{commit}}")
        if sha is None:
            return None

        if isinstance(self._run(["merge-base", "--is-ancestor", sha, branch.ref]), Err):
            return None

        match self._run(["log", "-1", "--format=%s", sha]):
            case Ok(out):
                summary = out.stdout.strip()
            case Err(_):
                summary = ""
        return CommitRef(sha=sha, summary=summary)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def fetch(self, remote: str) -> Result[None, GitError]:
        match self._run(["fetch", "--prune", remote]):
            case Err(e):
                return Err(_git_error("fetch", e, "fetch failed"))
            case Ok(_):
                return Ok(None)

    def create_tracking_branch(self, local_name: str, tracked: BranchRef) -> Result[BranchRef, GitError]:
        match self._run(["branch", "--track", local_name, tracked.ref]):
            case Err(e):
                return Err(_git_error("branch --track", e, f"could not create branch {local_name}"))
            case Ok(_):
                return Ok(
                    BranchRef(
                        name=local_name,
                        ref=f"refs/heads/{local_name}",
                        sha=tracked.sha,
                        remote=tracked.remote,
                        upstream=tracked.upstream,
                    )
                )

    def checkout(
        self,
        branch: BranchRef,
        sink: NotificationSink,
        *,
        force: bool = True,
    ) -> Result[None, GitError]:
        args = ["checkout", "--progress"]
        if force:
            self._report_worktree_changes(sink)
            args.append("--force")
        args.extend([branch.name, "--"])

        match self._run(args):
            case Err(e):
                return Err(_git_error("checkout", e, f"could not check out {branch.name}"))
            case Ok(out):
                for event in _progress_events("checkout", out.stderr + "\n" + out.stdout):
                    sink.on_progress(event)
                return Ok(None)

    def cherry_pick(self, commit: CommitRef, signer: Signer, sink: NotificationSink) -> PickOutcome:
        env = {
            "GIT_COMMITTER_NAME": signer.name,
            "GIT_COMMITTER_EMAIL": signer.email,
        }
        result = self._run(
            ["cherry-pick", "--strategy-option=ignore-space-change", commit.sha],
            env=env,
        )

        if isinstance(result, Ok):
            for event in _progress_events("cherry_pick", result.value.stdout):
                sink.on_progress(event)
            head = self._rev_parse("HEAD")
            return PickApplied(sha=head or "")

        error = result.error
        conflicted = self._conflicted_paths()
        if conflicted:
            self._abort_cherry_pick(sink)
            return PickConflict(paths=tuple(conflicted))

        # A pick that stopped with nothing staged and nothing unmerged left
        # the branch unchanged.
        detail = error.output or str(error)
        in_progress = self._rev_parse("CHERRY_PICK_HEAD") is not None
        if (in_progress and self._index_matches_head()) or _EMPTY_PICK_RE.search(detail):
            self._abort_cherry_pick(sink)
            return PickNoOp(detail=detail)

        self._abort_cherry_pick(sink)
        return PickFailed(detail=detail)

    def push(self, branch: BranchRef, sink: NotificationSink) -> None:
        if branch.remote is None or branch.upstream is None:
            sink.on_error(f"{branch.name} has no upstream branch, not pushed")
            return

        refspec = f"refs/heads/{branch.name}:refs/heads/{branch.upstream}"
        result = self._run(
            ["push", "--porcelain", "--progress", branch.remote, refspec],
            env=self._credential_env(),
        )

        match result:
            case Ok(out):
                for event in _progress_events("push", out.stderr):
                    sink.on_progress(event)
                self._report_push_status(out.stdout, sink)
            case Err(e):
                rejected = self._report_push_status(e.stdout, sink)
                if not rejected:
                    sink.on_error(f"push of {branch.name} failed: {e.stderr.strip() or e}")

    def delete_branch(self, name: str) -> Result[None, GitError]:
        match self._run(["branch", "-D", name]):
            case Err(e):
                return Err(_git_error("branch -D", e, f"could not delete branch {name}"))
            case Ok(_):
                return Ok(None)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _run(
        self,
        args: list[str],
        *,
        env: dict[str, str] | None = None,
    ) -> Result[ProcessOutput, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        if command in _NETWORK_COMMANDS:
            timeout = _GIT_NETWORK_TIMEOUT_SECONDS
        elif command in _WORKTREE_COMMANDS:
            timeout = _GIT_WORKTREE_TIMEOUT_SECONDS
        else:
            timeout = _GIT_TIMEOUT_SECONDS

        # Never wait on an interactive credential prompt. Messages stay in
        # English whatever the user's locale (LC_ALL=C also overrides LANGUAGE).
        full_env = {"GIT_TERMINAL_PROMPT": "0", "LC_ALL": "C", **(env or {})}
        return run_process(
            ["git", "-C", str(self.path), *args],
            cwd=self.path,
            env=full_env,
            timeout=timeout,
        )

    def _credential_env(self) -> dict[str, str]:
        """Pass HTTP basic credentials as a one-shot config entry.

        Uses GIT_CONFIG_COUNT/KEY/VALUE so the token never appears on the
        command line.
        """
        if self._credentials is None:
            return {}
        raw = f"{self._credentials.login}:{self._credentials.token}".encode("utf-8")
        token = base64.b64encode(raw).decode("ascii")
        return {
            "GIT_CONFIG_COUNT": "1",
            "GIT_CONFIG_KEY_0": "http.extraHeader",
            "GIT_CONFIG_VALUE_0": f"Authorization: Basic {token}",
        }

    def _rev_parse(self, rev: str) -> str | None:
        match self._run(["rev-parse", "--verify", "--quiet", rev]):
            case Ok(out):
                value = out.stdout.strip()
                return value or None
            case Err(_):
                return None

    def _config_value(self, key: str) -> str | None:
        match self._run(["config", "--get", key]):
            case Ok(out):
                value = out.stdout.strip()
                return value or None
            case Err(_):
                return None

    def _conflicted_paths(self) -> list[str]:
        match self._run(["diff", "--name-only", "--diff-filter=U"]):
            case Ok(out):
                return [ln.strip() for ln in out.stdout.splitlines() if ln.strip()]
            case Err(_):
                return []

    def _report_worktree_changes(self, sink: NotificationSink) -> None:
        """Report the paths a forced checkout is about to discard or step over.

        Unmerged paths go to ``on_conflict_file``; modified and untracked
        paths become ``checkout`` progress events.
        """
        status = self._run(["status", "--porcelain=v1", "-z"])
        if isinstance(status, Err):
            return

        skip_next = False
        for entry in status.value.stdout.split("\0"):
            if skip_next:
                # source path of a rename or copy
                skip_next = False
                continue
            if len(entry) < 4:
                continue
            code, path = entry[:2], entry[3:]
            if "U" in code or code in ("AA", "DD"):
                sink.on_conflict_file(path)
            elif code == "??":
                sink.on_progress(ProgressEvent(stage="checkout", message=f"untracked file at: {path}"))
            else:
                sink.on_progress(ProgressEvent(stage="checkout", message=f"dirty file at: {path}"))
            skip_next = code[0] in "RC"

    def _index_matches_head(self) -> bool:
        return isinstance(self._run(["diff", "--cached", "--quiet"]), Ok)

    def _abort_cherry_pick(self, sink: NotificationSink) -> None:
        """Roll back an interrupted cherry-pick, if one is in progress."""
        if self._rev_parse("CHERRY_PICK_HEAD") is None:
            return
        result = self._run(["cherry-pick", "--abort"])
        if isinstance(result, Err):
            sink.on_error(f"could not abort cherry-pick: {result.error.output or result.error}")

    def _report_push_status(self, porcelain: str, sink: NotificationSink) -> bool:
        """Forward ``git push --porcelain`` ref lines; return True if a ref was rejected.

        Ref lines look like ``<flag>\\t<from>:<to>\\t<summary>``; flag ``!``
        means rejected.
        """
        rejected = False
        for line in porcelain.splitlines():
            if "\t" not in line:
                if line.startswith("To "):
                    sink.on_progress(ProgressEvent(stage="push", message=line.strip()))
                continue

            flag, _, rest = line.partition("\t")
            refs, _, summary = rest.partition("\t")
            if flag.strip() == "!":
                rejected = True
                sink.on_error(f"push rejected {refs}: {summary.strip()}")
            else:
                sink.on_progress(ProgressEvent(stage="push", message=f"{refs} {summary.strip()}".strip()))
        return rejected
