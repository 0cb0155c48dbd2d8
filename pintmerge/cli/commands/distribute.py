"""Distribute command - cherry-pick a commit onto every configured branch."""

from __future__ import annotations

from pathlib import Path

import typer

from pintmerge.cli.commands._helpers import exit_with_error, show_version
from pintmerge.cli.context import CLIContext, build_context
from pintmerge.core.errors import ErrorCode
from pintmerge.core.result import Err, Ok
from pintmerge.git.repository import GitCliGateway
from pintmerge.output.console import Style
from pintmerge.output.notify import ConsoleSink
from pintmerge.services.distribution import (
    DistributeArgs,
    DistributionError,
    DistributionOrchestrator,
    DistributionReport,
    OutcomeStatus,
    build_request,
)

_EXIT_CODE_BY_KIND: dict[str, ErrorCode] = {
    "invalid_request": ErrorCode.USER_ERROR,
    "fetch_failed": ErrorCode.ENV_ERROR,
    "source_branch_not_found": ErrorCode.NOT_FOUND,
    "commit_not_found": ErrorCode.NOT_FOUND,
    "target_branch_not_found": ErrorCode.NOT_FOUND,
    "invalid_state": ErrorCode.ENV_ERROR,
}

_STYLE_BY_STATUS = {
    OutcomeStatus.APPLIED: Style.SUCCESS,
    OutcomeStatus.SKIPPED_NO_CHANGE: Style.DIM,
    OutcomeStatus.CONFLICT: Style.ERROR,
    OutcomeStatus.FAILED: Style.WARNING,
}


def exit_code_for_error(error: DistributionError) -> ErrorCode:
    return _EXIT_CODE_BY_KIND.get(error.kind, ErrorCode.ENV_ERROR)


def exit_code_for_report(report: DistributionReport) -> ErrorCode:
    """Only an aborted run fails; individual failed branches are listed in the summary."""
    return ErrorCode.CONFLICT if report.aborted else ErrorCode.OK


def distribute(
    local_branch_base: str = typer.Argument(..., help="Base name for local branches, e.g. docs-2358"),
    source_branch: str = typer.Argument(..., help="Branch that contains the commit"),
    commit: str = typer.Argument(..., help="Full hash of the commit to cherry-pick"),
    login: str = typer.Argument(..., help="Login for the remote repository"),
    token: str = typer.Argument(..., help="Password or access token for the remote repository"),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: $PINTMERGE_CONFIG or ./pintmerge.toml)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Cherry-pick COMMIT from SOURCE_BRANCH onto every other configured branch and push."""
    ctx = build_context(config)

    args = DistributeArgs(
        local_branch_base=local_branch_base,
        source_branch=source_branch,
        commit_id=commit,
        login=login,
        token=token,
    )
    request_result = build_request(args, ctx.config)
    if isinstance(request_result, Err):
        exit_with_error(ctx, request_result.error, ErrorCode.USER_ERROR)
    request = request_result.value

    gateway = GitCliGateway(ctx.config.repository.path, credentials=args.credentials)
    if not gateway.exists():
        exit_with_error(
            ctx,
            f"not a git repository: {gateway.path} (set repository.path in {ctx.config_path})",
            ErrorCode.ENV_ERROR,
        )

    orchestrator = DistributionOrchestrator(gateway=gateway, sink=ConsoleSink(ctx.console))
    match orchestrator.run(request):
        case Err(error):
            exit_with_error(ctx, error, exit_code_for_error(error))
        case Ok(report):
            print_summary(ctx, report)
            code = exit_code_for_report(report)
            if code.is_error:
                raise typer.Exit(code=int(code))


def print_summary(ctx: CLIContext, report: DistributionReport) -> None:
    console = ctx.console
    console.header("Summary")
    for outcome in report.outcomes:
        console.print(f"{outcome.target_branch}: {outcome.status}", _STYLE_BY_STATUS[outcome.status])
        if outcome.message and outcome.status is not OutcomeStatus.FAILED:
            console.print(f"  {outcome.message}", Style.DIM)
        elif outcome.status is OutcomeStatus.FAILED and outcome.local_branch:
            console.print(f"  local branch {outcome.local_branch} kept for inspection", Style.DIM)

    console.kv(
        "branches",
        f"{report.applied} applied, {report.skipped} unchanged, "
        f"{report.failed} failed, {report.conflicts} conflicted",
    )
    if report.aborted:
        console.error("stopped on a conflict; remaining branches were not attempted")
