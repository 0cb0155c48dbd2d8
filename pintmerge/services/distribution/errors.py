from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

DistributionErrorKind = Literal[
    "invalid_request",
    "fetch_failed",
    "source_branch_not_found",
    "commit_not_found",
    "target_branch_not_found",
    "invalid_state",
]


@dataclass(frozen=True, slots=True)
class DistributionError:
    """A run-level failure: nothing was distributed.

    Per-branch problems (conflicts, no-op picks, failed picks) are never
    reported this way; they become entries of the DistributionReport.
    """

    kind: DistributionErrorKind
    message: str
    hint: str | None = None
