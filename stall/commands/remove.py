"""`stall rm`: stop tracking files, optionally deleting the stalled copy."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

from stall.errors import StallIOError
from stall.registry import Stall

from .common import (
    CommandResult,
    CommonOptions,
    absolute,
    display,
    stall_dir,
    warn,
)


def remove(
    stall: Stall,
    files: Sequence[str | os.PathLike[str]],
    common: CommonOptions,
    delete: bool = False,
    remote_naming: bool = False,
    dry_run: bool = False,
) -> CommandResult:
    """Remove entries by local path (or remote path with ``remote_naming``)."""
    result = CommandResult()
    root = stall_dir(stall)
    for f in files:
        if remote_naming:
            entry = stall.entry_remote(absolute(f))
        else:
            entry = stall.entry_local(Path(f))
        if entry is None:
            warn(result, common, Path(f), "not in stall")
            continue
        if dry_run:
            result.say(
                f"would remove {entry.local} -> {display(entry.remote, common)}"
            )
            continue
        stall.remove_local(entry.local)
        result.say(f"removed {entry.local} -> {display(entry.remote, common)}")
        if delete:
            copy = root / entry.local
            if not copy.exists():
                warn(result, common, copy, "stalled copy not found")
                continue
            try:
                copy.unlink()
            except OSError as e:
                raise StallIOError("Failed to delete stalled copy", copy) from e
            result.say(f"deleted {copy}")
    return result
