# SPDX-License-Identifier: MIT
"""Commit distribution: cherry-pick one commit onto a set of branches.

Usage:
    from pintmerge.services.distribution import DistributionOrchestrator, build_request

    request = build_request(args, config)
    report = DistributionOrchestrator(gateway=gateway, sink=sink).run(request.unwrap())
"""

from pintmerge.services.distribution.errors import DistributionError
from pintmerge.services.distribution.model import (
    AttemptState,
    BranchAttempt,
    BranchOutcome,
    DistributionReport,
    DistributionRequest,
    OutcomeStatus,
    local_branch_name,
)
from pintmerge.services.distribution.orchestrator import DistributionOrchestrator
from pintmerge.services.distribution.request import DistributeArgs, build_request, validate_request

__all__ = [
    # Errors
    "DistributionError",
    # Model
    "AttemptState",
    "BranchAttempt",
    "BranchOutcome",
    "DistributionReport",
    "DistributionRequest",
    "OutcomeStatus",
    "local_branch_name",
    # Request
    "DistributeArgs",
    "build_request",
    "validate_request",
    # Orchestrator
    "DistributionOrchestrator",
]
