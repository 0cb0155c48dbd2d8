# SPDX-License-Identifier: MIT
"""Application services for pintmerge.

Services implement the decision logic of the tool, coordinating between
the domain layer (core/) and infrastructure (git/, output/).
"""

from pintmerge.services.distribution import (
    BranchOutcome,
    DistributionError,
    DistributionOrchestrator,
    DistributionReport,
    DistributionRequest,
    OutcomeStatus,
)

__all__ = [
    "BranchOutcome",
    "DistributionError",
    "DistributionOrchestrator",
    "DistributionReport",
    "DistributionRequest",
    "OutcomeStatus",
]
