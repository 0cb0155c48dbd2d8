from __future__ import annotations

import pytest

from pintmerge.git.gateway import BranchRef, Signer
from pintmerge.services.distribution.model import (
    AttemptState,
    BranchAttempt,
    BranchOutcome,
    DistributionReport,
    DistributionRequest,
    OutcomeStatus,
    local_branch_name,
)

_TRACKED = BranchRef(
    name="upstream/0.8.1-ksqldb",
    ref="refs/remotes/upstream/0.8.1-ksqldb",
    sha="a" * 40,
    remote="upstream",
    upstream="0.8.1-ksqldb",
)


def test_local_branch_name_joins_base_and_target() -> None:
    assert local_branch_name("docs-2358", "0.8.1-ksqldb") == "docs-2358-0.8.1-ksqldb"


def test_request_unique_targets_keeps_first_occurrence() -> None:
    request = DistributionRequest(
        source_branch="master",
        commit_id="a" * 40,
        target_branches=("b", "a", "b", "c", "a"),
        local_branch_base_name="docs-1",
        signer=Signer(name="n", email="e"),
    )

    assert request.unique_targets == ("b", "a", "c")
    assert request.local_branch_for("c") == "docs-1-c"
    assert request.remote_name == "upstream"
    assert request.default_branch == "master"
    assert request.delete_local_branches_after_success is False


@pytest.mark.parametrize(
    ("state", "status"),
    [
        (AttemptState.DONE, OutcomeStatus.APPLIED),
        (AttemptState.EMPTY_COMMIT_SKIP, OutcomeStatus.SKIPPED_NO_CHANGE),
        (AttemptState.CONFLICT_ABORT, OutcomeStatus.CONFLICT),
        (AttemptState.ERRORED, OutcomeStatus.FAILED),
    ],
)
def test_attempt_to_outcome(state: AttemptState, status: OutcomeStatus) -> None:
    attempt = BranchAttempt(
        target_branch="0.8.1-ksqldb",
        local_branch_name="docs-2358-0.8.1-ksqldb",
        tracked=_TRACKED,
        state=state,
        error_detail="detail" if status is OutcomeStatus.FAILED else None,
    )

    outcome = attempt.to_outcome()

    assert outcome.status is status
    assert outcome.target_branch == "0.8.1-ksqldb"
    assert outcome.local_branch == "docs-2358-0.8.1-ksqldb"
    assert state.is_terminal


@pytest.mark.parametrize(
    "state",
    [AttemptState.INIT, AttemptState.PREPARED, AttemptState.CHECKED_OUT, AttemptState.PICKED, AttemptState.PUSHED],
)
def test_unfinished_attempt_has_no_outcome(state: AttemptState) -> None:
    attempt = BranchAttempt(target_branch="x", local_branch_name="b-x", tracked=_TRACKED, state=state)

    assert not state.is_terminal
    with pytest.raises(ValueError, match="not finished"):
        attempt.to_outcome()


def test_outcome_status_str() -> None:
    assert str(OutcomeStatus.SKIPPED_NO_CHANGE) == "skipped no change"
    assert str(OutcomeStatus.APPLIED) == "applied"


def test_report_accumulates_in_order() -> None:
    report = DistributionReport()
    report = report.with_outcome(BranchOutcome("a", OutcomeStatus.APPLIED))
    report = report.with_outcome(BranchOutcome("b", OutcomeStatus.SKIPPED_NO_CHANGE))
    report = report.with_outcome(BranchOutcome("c", OutcomeStatus.FAILED, message="boom"))
    report = report.with_outcome(BranchOutcome("d", OutcomeStatus.CONFLICT), aborted=True)

    assert [o.target_branch for o in report.outcomes] == ["a", "b", "c", "d"]
    assert report.aborted is True
    assert (report.applied, report.skipped, report.failed, report.conflicts) == (1, 1, 1, 1)
    outcome = report.outcome_for("c")
    assert outcome is not None and outcome.message == "boom"
    assert report.outcome_for("e") is None


def test_report_aborted_is_sticky() -> None:
    report = DistributionReport().with_outcome(BranchOutcome("a", OutcomeStatus.CONFLICT), aborted=True)
    report = report.with_outcome(BranchOutcome("b", OutcomeStatus.APPLIED))

    assert report.aborted is True


def test_report_is_immutable() -> None:
    report = DistributionReport()
    report.with_outcome(BranchOutcome("a", OutcomeStatus.APPLIED))

    assert report.outcomes == ()
    with pytest.raises(AttributeError):
        report.aborted = True  # type: ignore[misc]
