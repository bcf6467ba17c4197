"""Exit codes for the publish-release command.

The numeric values are process exit codes and should remain stable:
- 0: Success (including "already published, nothing to do")
- 1: User error (missing options, invalid config file)
- 4: Network error (hosting service unreachable)
- 5: I/O error (asset missing or unreadable)
- 6: Service error (hosting service rejected a request)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1
    NETWORK_ERROR = 4
    IO_ERROR = 5
    SERVICE_ERROR = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
