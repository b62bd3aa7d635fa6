"""`stall add`: track remote files, optionally collecting them at once."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

from stall.errors import UsageError
from stall.registry import Stall

from .common import (
    CommandResult,
    CommonOptions,
    absolute,
    display,
    local_key,
    stall_dir,
    warn,
)
from .transfer import COPIED, transfer


def add(
    stall: Stall,
    files: Sequence[str | os.PathLike[str]],
    common: CommonOptions,
    rename: str | os.PathLike[str] | None = None,
    into: str | os.PathLike[str] | None = None,
    collect: bool = False,
    dry_run: bool = False,
) -> CommandResult:
    """Add ``files`` (remote paths) to the stall.

    The local name is ``rename`` or the remote file name, placed under
    ``into`` when given. ``rename`` only makes sense for a single file.
    """
    if rename is not None and len(files) > 1:
        raise UsageError("--rename cannot be used when adding multiple files")
    result = CommandResult()
    root = stall_dir(stall)
    for f in files:
        remote = absolute(f)
        if not remote.exists():
            warn(result, common, remote, "remote file not found")
            continue
        if not remote.is_file():
            warn(result, common, remote, "not a regular file")
            continue
        local = Path(rename) if rename is not None else Path(remote.name)
        if into is not None:
            local = Path(into) / local
        local = local_key(local)
        if dry_run:
            result.say(f"would add {local} -> {display(remote, common)}")
            continue
        evicted = stall.insert(local, remote)
        result.say(f"added {local} -> {display(remote, common)}")
        for old_local, old_remote in evicted:
            result.say(
                f"replaced {old_local} -> {display(old_remote, common)}"
            )
        if collect:
            outcome = transfer(remote, root / local, "collect")
            if outcome == COPIED:
                result.copied += 1
    return result
