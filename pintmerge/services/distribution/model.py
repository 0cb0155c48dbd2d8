"""Data model for one distribution run.

- DistributionRequest: immutable input (what to pick, where to put it)
- BranchAttempt: mutable working record for the branch being processed
- BranchOutcome: immutable result for one target branch
- DistributionReport: immutable result of the whole run
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from pintmerge.git.gateway import BranchRef, Signer

__all__ = [
    "AttemptState",
    "BranchAttempt",
    "BranchOutcome",
    "DistributionReport",
    "DistributionRequest",
    "OutcomeStatus",
    "local_branch_name",
]


def local_branch_name(base_name: str, target_branch: str) -> str:
    """Name of the local branch used to carry the commit to ``target_branch``.

    >>> local_branch_name("docs-2358", "0.8.1-ksqldb")
    'docs-2358-0.8.1-ksqldb'
    """
    return f"{base_name}-{target_branch}"


@dataclass(frozen=True, slots=True)
class DistributionRequest:
    """Everything one run needs, fixed before the run starts.

    Attributes:
        source_branch: Branch the commit is picked from
        commit_id: Full hash of the commit to propagate
        target_branches: Branches that receive the commit, in processing order
        local_branch_base_name: Prefix for the per-target local branches
        signer: Committer identity for the cherry-picked commits
        delete_local_branches_after_success: Remove local branches after an
            applied or no-op pick
        remote_name: Remote holding the source and target branches
        default_branch: Branch checked out before a local branch is deleted
    """

    source_branch: str
    commit_id: str
    target_branches: tuple[str, ...]
    local_branch_base_name: str
    signer: Signer
    delete_local_branches_after_success: bool = False
    remote_name: str = "upstream"
    default_branch: str = "master"

    @property
    def unique_targets(self) -> tuple[str, ...]:
        """Target branches with duplicates dropped, first occurrence wins."""
        return tuple(dict.fromkeys(self.target_branches))

    def local_branch_for(self, target_branch: str) -> str:
        return local_branch_name(self.local_branch_base_name, target_branch)


class AttemptState(Enum):
    """Per-branch state machine states.

    INIT -> PREPARED -> CHECKED_OUT -> PICKED -> PUSHED -> DONE, with early
    exits EMPTY_COMMIT_SKIP, CONFLICT_ABORT and ERRORED.
    """

    INIT = "init"
    PREPARED = "prepared"
    CHECKED_OUT = "checked_out"
    PICKED = "picked"
    PUSHED = "pushed"
    DONE = "done"
    EMPTY_COMMIT_SKIP = "empty_commit_skip"
    CONFLICT_ABORT = "conflict_abort"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {
        AttemptState.DONE,
        AttemptState.EMPTY_COMMIT_SKIP,
        AttemptState.CONFLICT_ABORT,
        AttemptState.ERRORED,
    }
)


class OutcomeStatus(Enum):
    APPLIED = "applied"
    SKIPPED_NO_CHANGE = "skipped_no_change"
    CONFLICT = "conflict"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value.replace("_", " ")


_STATUS_BY_STATE = {
    AttemptState.DONE: OutcomeStatus.APPLIED,
    AttemptState.EMPTY_COMMIT_SKIP: OutcomeStatus.SKIPPED_NO_CHANGE,
    AttemptState.CONFLICT_ABORT: OutcomeStatus.CONFLICT,
    AttemptState.ERRORED: OutcomeStatus.FAILED,
}


@dataclass(frozen=True, slots=True)
class BranchOutcome:
    """Final result for one target branch.

    Attributes:
        target_branch: The target branch
        status: What happened
        message: Error or conflict detail, when there is one
        local_branch: Local branch used for the attempt
    """

    target_branch: str
    status: OutcomeStatus
    message: str | None = None
    local_branch: str | None = None


@dataclass(slots=True)
class BranchAttempt:
    """Working record for the branch currently being processed.

    Owned by the orchestrator until it reaches a terminal state, then
    converted into a BranchOutcome and dropped.
    """

    target_branch: str
    local_branch_name: str
    tracked: BranchRef
    state: AttemptState = AttemptState.INIT
    local: BranchRef | None = None
    error_detail: str | None = None

    def to_outcome(self) -> BranchOutcome:
        status = _STATUS_BY_STATE.get(self.state)
        if status is None:
            raise ValueError(f"attempt for {self.target_branch} is not finished ({self.state.value})")
        return BranchOutcome(
            target_branch=self.target_branch,
            status=status,
            message=self.error_detail,
            local_branch=self.local_branch_name,
        )


def _empty_outcomes() -> tuple[BranchOutcome, ...]:
    return ()


@dataclass(frozen=True, slots=True)
class DistributionReport:
    """Outcomes in processing order, and whether a conflict stopped the run."""

    outcomes: tuple[BranchOutcome, ...] = field(default_factory=_empty_outcomes)
    aborted: bool = False

    def with_outcome(self, outcome: BranchOutcome, *, aborted: bool = False) -> DistributionReport:
        """Return a copy with ``outcome`` appended."""
        return replace(self, outcomes=(*self.outcomes, outcome), aborted=self.aborted or aborted)

    def outcome_for(self, target_branch: str) -> BranchOutcome | None:
        for outcome in self.outcomes:
            if outcome.target_branch == target_branch:
                return outcome
        return None

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def applied(self) -> int:
        return self.count(OutcomeStatus.APPLIED)

    @property
    def skipped(self) -> int:
        return self.count(OutcomeStatus.SKIPPED_NO_CHANGE)

    @property
    def conflicts(self) -> int:
        return self.count(OutcomeStatus.CONFLICT)

    @property
    def failed(self) -> int:
        return self.count(OutcomeStatus.FAILED)
