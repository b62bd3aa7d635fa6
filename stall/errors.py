"""Stall exception hierarchy + error taxonomy.

Every failure surfaced to callers derives from `StallError`. The CLI and the
`CommandFailed` event report a short taxonomy code produced by
`map_exception`; codes are checked against `_ALLOWED_ERROR_TYPES` so a typo
cannot leak into reports.
"""
from __future__ import annotations

from pathlib import Path

_ALLOWED_ERROR_TYPES = {
    # registry
    "invalid-path",
    "format-error",
    # file io
    "io-error",
    "missing-file",
    "file-exists",
    "invalid-file",
    # config / command layer
    "config-error",
    "usage-error",
    "internal",
}


class StallError(Exception):
    """Base stall exception."""


class InvalidStallPath(StallError, ValueError):
    """Raised when a path has no usable file name (e.g. ``/`` or ``a/..``).

    Inserting such a path programmatically is a caller bug, not a data
    problem.
    """

    def __init__(self, path: Path | str, role: str = "path") -> None:
        self.path = Path(path)
        self.role = role
        super().__init__(f"invalid stall {role} (no file name): {path}")


class StallFormatError(StallError):
    """Raised when a stall file cannot be parsed in any known format."""

    def __init__(
        self,
        message: str,
        line: int | None = None,
        reason: str = "syntax",
    ) -> None:
        self.line = line
        self.reason = reason  # syntax|schema|path|empty|decode
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class StallIOError(StallError):
    """Raised on open/read/write failures; wraps the original OSError."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        if path is not None:
            message = f"{message}: {path}"
        super().__init__(message)


class MissingFile(StallIOError):
    """The specified file was missing."""

    def __init__(self, path: Path | str) -> None:
        super().__init__("missing file", path)


class StallFileExists(StallError):
    """Raised when a create-only write would overwrite an existing file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"stall file already exists: {path}")


class InvalidFile(StallError):
    """The specified file was invalid."""

    def __init__(self, path: Path | str, reason: str = "invalid file") -> None:
        self.path = Path(path)
        super().__init__(f"{reason}: {path}")


class UsageError(StallError):
    """Raised on contradictory command options."""


def validate_error_type(code: str) -> str:
    assert (
        code in _ALLOWED_ERROR_TYPES
    ), f"Unknown error_type '{code}' (not in taxonomy)"
    return code


def map_exception(e: BaseException) -> str:
    from stall.config.loader import ConfigError  # local import (cycle)

    # Order matters: MissingFile is a StallIOError.
    if isinstance(e, InvalidStallPath):
        code = "invalid-path"
    elif isinstance(e, StallFormatError):
        code = "format-error"
    elif isinstance(e, MissingFile):
        code = "missing-file"
    elif isinstance(e, StallFileExists):
        code = "file-exists"
    elif isinstance(e, InvalidFile):
        code = "invalid-file"
    elif isinstance(e, UsageError):
        code = "usage-error"
    elif isinstance(e, (StallIOError, OSError)):
        code = "io-error"
    elif isinstance(e, ConfigError):
        code = "config-error"
    else:
        code = "internal"
    return validate_error_type(code)


__all__ = [
    "StallError",
    "InvalidStallPath",
    "StallFormatError",
    "StallIOError",
    "MissingFile",
    "StallFileExists",
    "InvalidFile",
    "UsageError",
    "validate_error_type",
    "map_exception",
]
