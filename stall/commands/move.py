"""`stall mv`: rename a file inside the stall."""
from __future__ import annotations

import os
import shutil
from pathlib import Path

from stall.errors import InvalidFile, StallIOError
from stall.registry import Stall

from .common import (
    CommandResult,
    CommonOptions,
    display,
    local_key,
    stall_dir,
)


def move(
    stall: Stall,
    source: str | os.PathLike[str],
    target: str | os.PathLike[str],
    common: CommonOptions,
    move_file: bool = False,
    force: bool = False,
    dry_run: bool = False,
) -> CommandResult:
    """Re-key an entry's local path; ``move_file`` also moves the copy.

    Future collect/distribute runs use the new name. Refuses to clobber an
    existing entry or file unless ``force``.
    """
    result = CommandResult()
    source, target = Path(source), local_key(target)
    entry = stall.entry_local(source)
    if entry is None:
        raise InvalidFile(source, "not in stall")
    if not force and stall.entry_local(target) is not None:
        raise InvalidFile(target, "already in stall (use --force)")
    root = stall_dir(stall)
    src_file, dst_file = root / source, root / target
    if move_file and not force and dst_file.exists():
        raise InvalidFile(dst_file, "file exists (use --force)")
    if dry_run:
        result.say(f"would move {source} -> {target}")
        return result
    stall.remove_local(source)
    stall.insert(target, entry.remote)
    result.say(f"moved {source} -> {target} ({display(entry.remote, common)})")
    if move_file and src_file.exists():
        try:
            dst_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(src_file), str(dst_file))
        except OSError as e:
            raise StallIOError(f"Failed to move {src_file} to", dst_file) from e
        result.say(f"moved file {src_file} -> {dst_file}")
    return result
