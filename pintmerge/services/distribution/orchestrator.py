"""Distribute one commit onto many branches.

For every target branch the orchestrator drives a BranchAttempt through:

    INIT -> PREPARED -> CHECKED_OUT -> PICKED -> PUSHED -> DONE
                                   \\-> EMPTY_COMMIT_SKIP   (change already there)
                                   \\-> CONFLICT_ABORT      (stops the whole run)
    (any step before PICKED)       \\-> ERRORED             (branch kept, run continues)

Policy:
- A conflict is the only per-branch condition that stops the run. Branches
  after it are never touched; outcomes already recorded are kept.
- No-op picks and failed picks are recorded and the run moves on. Local
  branches are deleted after applied and no-op picks when the request asks
  for it, but never after a failure or conflict so they can be inspected.
- Push is best effort: push problems reach the sink only and never change
  the recorded outcome.
- Branches are processed one at a time; they all share one working tree.

Usage:
    orchestrator = DistributionOrchestrator(gateway=gateway, sink=sink)
    match orchestrator.run(request):
        case Ok(report):
            ...
        case Err(error):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass

from pintmerge.core.result import Err, Ok, Result
from pintmerge.git.gateway import (
    BranchRef,
    CommitRef,
    GitError,
    PickApplied,
    PickConflict,
    PickFailed,
    PickNoOp,
    VcsGateway,
)
from pintmerge.output.notify import NotificationSink, ProgressEvent, ProgressStage
from pintmerge.services.distribution.errors import DistributionError
from pintmerge.services.distribution.fsm import (
    FINISH,
    StepHandler,
    StepOutcome,
    advance,
    run_state_machine,
)
from pintmerge.services.distribution.model import (
    AttemptState,
    BranchAttempt,
    DistributionReport,
    DistributionRequest,
)
from pintmerge.services.distribution.request import validate_request

__all__ = ["DistributionOrchestrator"]


@dataclass(frozen=True, slots=True)
class _Resolved:
    """Everything looked up before the first branch is touched."""

    source: BranchRef
    commit: CommitRef
    tracked: dict[str, BranchRef]


class DistributionOrchestrator:
    """Cherry-pick one commit onto every target branch and push the results."""

    def __init__(self, *, gateway: VcsGateway, sink: NotificationSink) -> None:
        self._gateway = gateway
        self._sink = sink

    def run(self, request: DistributionRequest) -> Result[DistributionReport, DistributionError]:
        """Process every target branch of ``request``.

        Returns:
            Ok(DistributionReport) once all targets are processed or a
            conflict stopped the run; Err(DistributionError) if the request
            is malformed or the source branch, commit or a target's remote
            branch cannot be found (in which case nothing was changed).
        """
        valid = validate_request(request)
        if isinstance(valid, Err):
            return valid

        resolved = self._resolve(request)
        if isinstance(resolved, Err):
            return resolved

        steps = _AttemptSteps(
            gateway=self._gateway,
            sink=self._sink,
            request=request,
            commit=resolved.value.commit,
        )
        handlers = steps.handlers()

        self._progress(
            "branch",
            f"Cherry-picking from {resolved.value.source.name} to {len(request.unique_targets)} branch(es)",
        )

        report = DistributionReport()
        for target in request.unique_targets:
            attempt = BranchAttempt(
                target_branch=target,
                local_branch_name=request.local_branch_for(target),
                tracked=resolved.value.tracked[target],
            )
            finished = run_state_machine(
                initial_state=attempt,
                get_step=lambda a: a.state.value,
                handlers=handlers,
            )
            if isinstance(finished, Err):
                return finished

            final = finished.value
            aborted = final.state is AttemptState.CONFLICT_ABORT
            report = report.with_outcome(final.to_outcome(), aborted=aborted)
            if aborted:
                break

        return Ok(report)

    def _resolve(self, request: DistributionRequest) -> Result[_Resolved, DistributionError]:
        remote = request.remote_name

        self._progress("fetch", f"Fetching state of {remote}")
        fetched = self._gateway.fetch(remote)
        if isinstance(fetched, Err):
            return Err(
                DistributionError(
                    kind="fetch_failed",
                    message=f"could not fetch {remote}: {fetched.error.message}",
                    hint="Check the remote name and your network access",
                )
            )

        source = self._gateway.find_branch(request.source_branch, remote=remote)
        if source is None:
            source = self._gateway.find_branch(request.source_branch)
        if source is None:
            return Err(
                DistributionError(
                    kind="source_branch_not_found",
                    message=f"Source branch {request.source_branch} not found in {remote}, exiting.",
                )
            )
        self._progress("branch", f"Found branch {source.name} in {remote}")

        commit = self._gateway.find_commit(source, request.commit_id)
        if commit is None:
            return Err(
                DistributionError(
                    kind="commit_not_found",
                    message=f"Commit {request.commit_id} not found in {source.name}, no action taken, exiting.",
                )
            )

        tracked: dict[str, BranchRef] = {}
        missing: list[str] = []
        for target in request.unique_targets:
            branch = self._gateway.find_branch(target, remote=remote)
            if branch is None:
                missing.append(target)
            else:
                tracked[target] = branch
        if missing:
            return Err(
                DistributionError(
                    kind="target_branch_not_found",
                    message=f"Target branch(es) not found in {remote}: {', '.join(missing)}",
                    hint="Remove them from the configured branches or push them to the remote",
                )
            )

        return Ok(_Resolved(source=source, commit=commit, tracked=tracked))

    def _progress(self, stage: ProgressStage, message: str) -> None:
        self._sink.on_progress(ProgressEvent(stage=stage, message=message))


class _AttemptSteps:
    """State handlers for the attempts of one run."""

    def __init__(
        self,
        *,
        gateway: VcsGateway,
        sink: NotificationSink,
        request: DistributionRequest,
        commit: CommitRef,
    ) -> None:
        self._gateway = gateway
        self._sink = sink
        self._request = request
        self._commit = commit

    def handlers(self) -> dict[str, StepHandler[BranchAttempt]]:
        return {
            AttemptState.INIT.value: self.prepare,
            AttemptState.PREPARED.value: self.checkout,
            AttemptState.CHECKED_OUT.value: self.cherry_pick,
            AttemptState.PICKED.value: self.push,
            AttemptState.PUSHED.value: self.finish,
            AttemptState.DONE.value: self.stop,
            AttemptState.EMPTY_COMMIT_SKIP.value: self.stop,
            AttemptState.CONFLICT_ABORT.value: self.stop,
            AttemptState.ERRORED.value: self.stop,
        }

    # INIT -> PREPARED
    def prepare(self, attempt: BranchAttempt) -> StepOutcome[BranchAttempt]:
        name = attempt.local_branch_name

        # Left over from an earlier run.
        if self._gateway.find_branch(name) is not None:
            self._progress("branch", f"Deleting existing local branch {name}")
            removed = self._remove_local_branch(name)
            if isinstance(removed, Err):
                return self._fail(attempt, f"could not delete existing local branch {name}: {removed.error.message}")

        self._progress(
            "branch",
            f"Checking out local branch {name} tracking remote branch {attempt.tracked.name}",
        )
        created = self._gateway.create_tracking_branch(name, attempt.tracked)
        if isinstance(created, Err):
            return self._fail(attempt, f"could not create local branch {name}: {created.error.message}")

        attempt.local = created.value
        attempt.state = AttemptState.PREPARED
        return advance(attempt)

    # PREPARED -> CHECKED_OUT
    def checkout(self, attempt: BranchAttempt) -> StepOutcome[BranchAttempt]:
        local = self._local(attempt)
        checked_out = self._gateway.checkout(local, self._sink, force=True)
        if isinstance(checked_out, Err):
            return self._fail(attempt, f"could not check out {local.name}: {checked_out.error.message}")

        attempt.state = AttemptState.CHECKED_OUT
        return advance(attempt)

    # CHECKED_OUT -> PICKED | EMPTY_COMMIT_SKIP | CONFLICT_ABORT | ERRORED
    def cherry_pick(self, attempt: BranchAttempt) -> StepOutcome[BranchAttempt]:
        local = self._local(attempt)
        self._progress(
            "cherry_pick",
            f"Cherry-picking commit {self._commit.short_sha} to local branch {local.name}",
        )

        match self._gateway.cherry_pick(self._commit, self._request.signer, self._sink):
            case PickApplied():
                attempt.state = AttemptState.PICKED
            case PickNoOp():
                self._progress(
                    "cherry_pick",
                    f"No changes detected, no action taken in local branch {local.name}, continuing.",
                )
                if self._request.delete_local_branches_after_success:
                    self._cleanup(local.name)
                attempt.state = AttemptState.EMPTY_COMMIT_SKIP
            case PickConflict(paths=paths):
                for path in paths:
                    self._sink.on_conflict_file(path)
                attempt.error_detail = (
                    f"conflict in {len(paths)} file(s): {', '.join(paths)}" if paths else "conflict"
                )
                self._sink.on_error(f"CONFLICT in local branch {local.name}, stopping.")
                attempt.state = AttemptState.CONFLICT_ABORT
            case PickFailed(detail=detail):
                # The local branch is kept for inspection.
                return self._fail(
                    attempt,
                    f"cherry-pick failed in local branch {local.name}, continuing: {detail}",
                )

        return advance(attempt)

    # PICKED -> PUSHED
    def push(self, attempt: BranchAttempt) -> StepOutcome[BranchAttempt]:
        local = self._local(attempt)
        self._progress("push", f"Pushing local branch {local.name} to remote {attempt.tracked.name}")
        self._gateway.push(local, self._sink)
        attempt.state = AttemptState.PUSHED
        return advance(attempt)

    # PUSHED -> DONE
    def finish(self, attempt: BranchAttempt) -> StepOutcome[BranchAttempt]:
        if self._request.delete_local_branches_after_success:
            self._cleanup(attempt.local_branch_name)
        attempt.state = AttemptState.DONE
        return advance(attempt)

    def stop(self, attempt: BranchAttempt) -> StepOutcome[BranchAttempt]:
        return FINISH

    # -------------------------------------------------------------------------

    def _fail(self, attempt: BranchAttempt, message: str) -> StepOutcome[BranchAttempt]:
        self._sink.on_error(message)
        attempt.error_detail = message
        attempt.state = AttemptState.ERRORED
        return advance(attempt)

    def _local(self, attempt: BranchAttempt) -> BranchRef:
        if attempt.local is None:
            raise ValueError(f"no local branch for {attempt.target_branch} in state {attempt.state.value}")
        return attempt.local

    def _cleanup(self, name: str) -> None:
        """Delete a local branch after use; failures are reported, never fatal."""
        self._progress("cleanup", f"Deleting local branch {name}")
        removed = self._remove_local_branch(name)
        if isinstance(removed, Err):
            self._sink.on_error(f"could not delete local branch {name}: {removed.error.message}")

    def _remove_local_branch(self, name: str) -> Result[None, GitError]:
        """Check out the default branch (discarding local changes), then delete ``name``."""
        default = self._gateway.find_branch(self._request.default_branch)
        if default is None:
            default = self._gateway.find_branch(self._request.default_branch, remote=self._request.remote_name)
        if default is None:
            return Err(
                GitError(
                    command="checkout",
                    message=f"default branch {self._request.default_branch} not found",
                )
            )

        checked_out = self._gateway.checkout(default, self._sink, force=True)
        if isinstance(checked_out, Err):
            return checked_out
        return self._gateway.delete_branch(name)

    def _progress(self, stage: ProgressStage, message: str) -> None:
        self._sink.on_progress(ProgressEvent(stage=stage, message=message))
