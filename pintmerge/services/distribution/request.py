"""Building and validating distribution requests.

build_request() turns command-line arguments plus configuration into a
DistributionRequest; validate_request() checks the structural invariants of
any request, however it was built.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from pintmerge.core.config import COMMIT_SHA_LENGTHS, Config
from pintmerge.core.result import Err, Ok, Result
from pintmerge.git.gateway import Credentials, Signer
from pintmerge.services.distribution.errors import DistributionError
from pintmerge.services.distribution.model import DistributionRequest

__all__ = ["DistributeArgs", "build_request", "validate_request"]

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


@dataclass(frozen=True, slots=True)
class DistributeArgs:
    """The five positional command-line arguments."""

    local_branch_base: str
    source_branch: str
    commit_id: str
    login: str
    token: str

    @property
    def credentials(self) -> Credentials:
        return Credentials(login=self.login, token=self.token)

    def __repr__(self) -> str:
        return (
            f"DistributeArgs(local_branch_base={self.local_branch_base!r}, "
            f"source_branch={self.source_branch!r}, commit_id={self.commit_id!r}, "
            f"login={self.login!r}, token='***')"
        )


def _invalid(message: str, hint: str | None = None) -> Err[DistributionError]:
    return Err(DistributionError(kind="invalid_request", message=message, hint=hint))


def build_request(args: DistributeArgs, config: Config) -> Result[DistributionRequest, DistributionError]:
    """Validate arguments against the configuration and assemble a request.

    Target branches are the configured branches minus the source branch,
    in configuration order.
    """
    named = {
        "local branch base name": args.local_branch_base,
        "source branch": args.source_branch,
        "commit": args.commit_id,
        "login": args.login,
        "token": args.token,
    }
    missing = [name for name, value in named.items() if not value.strip()]
    if missing:
        return _invalid(f"missing argument(s): {', '.join(missing)}")

    sha_length = config.validation.commit_sha_length
    commit_id = args.commit_id.strip()
    if len(commit_id) != sha_length or not _HEX_RE.match(commit_id):
        return _invalid(
            f"commit must be a {sha_length}-character hexadecimal hash: {commit_id}",
            hint="Use the full hash, e.g. from `git log --format=%H`",
        )

    source = args.source_branch.strip()
    branches = config.repository.branches
    if source not in branches:
        return _invalid(
            f"source branch {source} is not one of the configured branches",
            hint=f"Configured branches: {', '.join(branches)}",
        )

    targets = tuple(b for b in dict.fromkeys(branches) if b != source)
    request = DistributionRequest(
        source_branch=source,
        commit_id=commit_id.lower(),
        target_branches=targets,
        local_branch_base_name=args.local_branch_base.strip(),
        signer=Signer(name=config.repository.signer_name, email=config.repository.signer_email),
        delete_local_branches_after_success=config.app.delete_local_branches,
        remote_name=config.repository.remote,
        default_branch=config.app.default_branch,
    )
    return validate_request(request)


def validate_request(request: DistributionRequest) -> Result[DistributionRequest, DistributionError]:
    """Check request invariants.

    - source, base name, remote and default branch are non-empty
    - commit id is a full SHA-1 or SHA-256 hex hash
    - targets are non-empty and exclude the source branch
    - signer has a name and an email
    """
    if not request.source_branch:
        return _invalid("source branch is empty")
    if not request.local_branch_base_name:
        return _invalid("local branch base name is empty")
    if not request.remote_name:
        return _invalid("remote name is empty")
    if not request.default_branch:
        return _invalid("default branch is empty")

    if len(request.commit_id) not in COMMIT_SHA_LENGTHS or not _HEX_RE.match(request.commit_id):
        return _invalid(f"malformed commit id: {request.commit_id}")

    if not request.target_branches:
        return _invalid(
            "no target branches",
            hint="Configure at least one branch besides the source branch",
        )
    if any(not target for target in request.target_branches):
        return _invalid("target branch names must not be empty")
    if request.source_branch in request.target_branches:
        return _invalid(f"source branch {request.source_branch} is also a target branch")

    if not request.signer.name or not request.signer.email:
        return _invalid("signer name and email are required")

    return Ok(request)
