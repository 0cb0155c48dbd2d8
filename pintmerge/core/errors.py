"""Process exit codes.

The values are part of the command-line contract: scripts that wrap
pintmerge branch on them, so they must stay stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the pintmerge command.

    - 0: Run completed without a conflict (individual branches may still
      have failed; see the printed summary)
    - 1: User error (bad arguments, malformed request)
    - 2: Environment error (config unreadable, repository unusable, fetch failed)
    - 3: Not found (source branch, commit or a target's remote branch)
    - 4: Conflict (run aborted; later target branches were not attempted)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NOT_FOUND = 3
    CONFLICT = 4

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
