"""Git access.

- gateway: the VcsGateway contract and its value types
- repository: GitCliGateway, the implementation that runs the git CLI

Usage:
    from pintmerge.git import GitCliGateway, PickConflict

    gateway = GitCliGateway(repo_path)
    outcome = gateway.cherry_pick(commit, signer, sink)
    if isinstance(outcome, PickConflict):
        print(outcome.paths)
"""

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
    VcsGateway,
)
from pintmerge.git.repository import GitCliGateway

__all__ = [
    # Contract
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
    # Implementation
    "GitCliGateway",
]
