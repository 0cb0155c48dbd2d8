"""Version-control gateway contract.

The distribution flow never runs git itself; it talks to a VcsGateway.
GitCliGateway (pintmerge.git.repository) is the production implementation,
tests substitute scripted fakes.

Lookups return None when the thing does not exist. Operations that change
the repository return Result. A cherry-pick returns one of four tagged
outcomes (PickOutcome) so callers can tell a conflict from a no-op from an
unexplained failure without inspecting error text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from pintmerge.core.result import Result
from pintmerge.output.notify import NotificationSink

__all__ = [
    "BranchRef",
    "CommitRef",
    "Credentials",
    "GitError",
    "PickApplied",
    "PickConflict",
    "PickFailed",
    "PickNoOp",
    "PickOutcome",
    "Signer",
    "VcsGateway",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (never includes credentials)
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class BranchRef:
    """A resolved branch.

    Attributes:
        name: Short name ("docs-2358-0.8.1-ksqldb" or "upstream/0.8.1-ksqldb")
        ref: Full ref name ("refs/heads/..." or "refs/remotes/...")
        sha: Commit the branch points at
        remote: Remote the branch lives on (remote branches) or tracks (local branches)
        upstream: Branch name on ``remote``, without the remote prefix
    """

    name: str
    ref: str
    sha: str
    remote: str | None = None
    upstream: str | None = None


@dataclass(frozen=True, slots=True)
class CommitRef:
    sha: str
    summary: str = ""

    @property
    def short_sha(self) -> str:
        return self.sha[:10]


@dataclass(frozen=True, slots=True)
class Signer:
    """Identity recorded as committer of cherry-picked commits."""

    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass(frozen=True, slots=True)
class Credentials:
    """Login and password/token for authenticating to the remote."""

    login: str
    token: str

    def __repr__(self) -> str:
        return f"Credentials(login={self.login!r}, token='***')"


@dataclass(frozen=True, slots=True)
class PickApplied:
    """The commit was applied and committed; ``sha`` is the new commit."""

    sha: str


@dataclass(frozen=True, slots=True)
class PickNoOp:
    """The change is already on the branch; nothing was committed."""

    detail: str = ""


@dataclass(frozen=True, slots=True)
class PickConflict:
    """The change does not apply cleanly; the pick was rolled back."""

    paths: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PickFailed:
    detail: str


type PickOutcome = PickApplied | PickNoOp | PickConflict | PickFailed


class VcsGateway(Protocol):
    """Primitive repository operations used by the distribution flow."""

    def fetch(self, remote: str) -> Result[None, GitError]: ...

    def find_branch(self, name: str, *, remote: str | None = None) -> BranchRef | None:
        """Resolve a local branch, or ``name`` on ``remote`` when given."""
        ...

    def find_commit(self, branch: BranchRef, commit_id: str) -> CommitRef | None:
        """Resolve ``commit_id`` if it is reachable from ``branch``."""
        ...

    def create_tracking_branch(self, local_name: str, tracked: BranchRef) -> Result[BranchRef, GitError]: ...

    def checkout(
        self,
        branch: BranchRef,
        sink: NotificationSink,
        *,
        force: bool = True,
    ) -> Result[None, GitError]: ...

    def cherry_pick(self, commit: CommitRef, signer: Signer, sink: NotificationSink) -> PickOutcome: ...

    def push(self, branch: BranchRef, sink: NotificationSink) -> None:
        """Push ``branch`` to its upstream. Failures are reported to ``sink``, never raised."""
        ...

    def delete_branch(self, name: str) -> Result[None, GitError]: ...
