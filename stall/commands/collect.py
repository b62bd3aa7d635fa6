"""`stall collect` / `stall distribute`: copy files between stall and remotes."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Sequence

from stall.registry import Entry, Stall

from .common import CommandResult, CommonOptions, display, stall_dir, warn
from .transfer import COPIED, DRY_RUN, MISSING, SKIPPED, transfer


def _select(
    stall: Stall,
    files: Sequence[str | os.PathLike[str]],
    common: CommonOptions,
    result: CommandResult,
) -> List[Entry]:
    if not files:
        return list(stall.entries())
    selected: List[Entry] = []
    for f in files:
        entry = stall.entry_local(Path(f))
        if entry is None:
            warn(result, common, Path(f), "not in stall")
            continue
        selected.append(entry)
    return selected


def _run(
    pairs: Iterable[tuple[Path, Path]],
    direction: str,
    common: CommonOptions,
    result: CommandResult,
    force: bool,
    dry_run: bool,
) -> CommandResult:
    for source, target in pairs:
        outcome = transfer(source, target, direction, force, dry_run)
        shown = f"{display(source, common)} -> {display(target, common)}"
        if outcome == COPIED:
            result.copied += 1
            result.say(f"copied {shown}")
        elif outcome == DRY_RUN:
            result.say(f"would copy {shown}")
        elif outcome == SKIPPED:
            result.skipped += 1
            if common.verbose:
                result.say(f"unchanged {shown}")
        elif outcome == MISSING:
            result.missing += 1
            warn(result, common, source, "source file not found")
    return result


def collect(
    stall: Stall,
    common: CommonOptions,
    files: Sequence[str | os.PathLike[str]] = (),
    force: bool = False,
    dry_run: bool = False,
) -> CommandResult:
    """Copy remote files into the stall directory (remote → local)."""
    result = CommandResult()
    root = stall_dir(stall)
    entries = _select(stall, files, common, result)
    pairs = [(e.remote, root / e.local) for e in entries]
    return _run(pairs, "collect", common, result, force, dry_run)


def distribute(
    stall: Stall,
    common: CommonOptions,
    files: Sequence[str | os.PathLike[str]] = (),
    force: bool = False,
    dry_run: bool = False,
) -> CommandResult:
    """Copy stalled files back to their remote locations (local → remote)."""
    result = CommandResult()
    root = stall_dir(stall)
    entries = _select(stall, files, common, result)
    pairs = [(root / e.local, e.remote) for e in entries]
    return _run(pairs, "distribute", common, result, force, dry_run)
