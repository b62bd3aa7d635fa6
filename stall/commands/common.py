"""Options and result types shared by the stall commands."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from stall.errors import InvalidFile, UsageError
from stall.registry import Stall

log = logging.getLogger(__name__)


@dataclass(slots=True)
class CommonOptions:
    short_names: bool = False  # print file names without path prefixes
    promote_warnings_to_errors: bool = False
    verbose: bool = False
    quiet: bool = False
    trace: bool = False


@dataclass(slots=True)
class CommandResult:
    lines: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    copied: int = 0
    skipped: int = 0
    missing: int = 0

    def say(self, line: str) -> None:
        self.lines.append(line)


def warn(
    result: CommandResult,
    common: CommonOptions,
    path: Path,
    reason: str,
) -> None:
    """Record a warning, or raise `InvalidFile` when warnings are errors."""
    if common.promote_warnings_to_errors:
        raise InvalidFile(path, reason)
    log.warning("%s: %s", reason, path)
    result.warnings.append(f"{reason}: {path}")


def display(path: Path, common: CommonOptions) -> str:
    if common.short_names and path.name:
        return path.name
    return str(path)


def stall_dir(stall: Stall) -> Path:
    """Directory holding the stalled copies (the stall file's parent)."""
    load_path = stall.load_path()
    if load_path is None:
        return Path.cwd()
    return load_path.parent


def local_key(path: str | os.PathLike[str]) -> Path:
    """A stall-relative local path; absolute or `..` paths are refused."""
    local = Path(path)
    if local.is_absolute() or ".." in local.parts:
        raise UsageError(f"local path must stay inside the stall: {local}")
    return local


def absolute(path: str | os.PathLike[str]) -> Path:
    """Absolute, ``..``-collapsed path without resolving symlinks."""
    return Path(os.path.abspath(os.path.expanduser(os.fspath(path))))


__all__ = [
    "CommonOptions",
    "CommandResult",
    "warn",
    "display",
    "stall_dir",
    "absolute",
    "local_key",
]
