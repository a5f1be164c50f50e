"""Exit codes for the relup commands.

Values map directly to process exit status, so a failed step is visible to
the calling pipeline without parsing output.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for relup commands.

    - 0: Success
    - 1: User error (malformed input)
    - 2: Environment error (missing token, repository or commit)
    - 4: Network error (any failed API call)
    - 6: Internal error (anything unexpected)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    INTERNAL_ERROR = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
