"""Process exit codes for sbot commands.

Workflows branch on these values, so they must stay stable:
- 0: Success
- 1: User error (bad arguments, unknown PR)
- 2: Environment error (not a git checkout, missing token, bad sbot.toml)
- 3: Lint error (at least one lint step failed)
- 4: Network error (GitHub API unreachable or rejected the request)
- 5: I/O error (unreadable body file, unwritable hook directory)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    LINT_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
