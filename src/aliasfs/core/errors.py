"""Error taxonomy for filesystem tools."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    UNKNOWN_ALIAS = "unknown_alias"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    EDIT_NOT_FOUND = "edit_not_found"
    IO_FAILURE = "io_failure"


class AliasFsError(Exception):
    """Base class for every error a tool reports back to the caller."""

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgument(AliasFsError):
    kind = ErrorKind.INVALID_ARGUMENT


class UnknownAlias(AliasFsError):
    kind = ErrorKind.UNKNOWN_ALIAS

    def __init__(self, alias: str) -> None:
        super().__init__(f"Unknown alias: {alias}")
        self.alias = alias


class AccessDenied(AliasFsError):
    kind = ErrorKind.ACCESS_DENIED


class NotFound(AliasFsError):
    kind = ErrorKind.NOT_FOUND


class EditNotFound(AliasFsError):
    kind = ErrorKind.EDIT_NOT_FOUND

    def __init__(self, index: int, old_text: str) -> None:
        super().__init__(
            f"Could not find exact match for edit #{index}:\n{old_text}"
        )
        self.index = index
        self.old_text = old_text


class IOFailure(AliasFsError):
    kind = ErrorKind.IO_FAILURE

    @classmethod
    def from_os_error(cls, action: str, exc: OSError) -> IOFailure:
        reason = exc.strerror or str(exc)
        return cls(f"Failed to {action}: {reason}")
