"""File copy policy for collect / distribute.

A copy is skipped when the target exists and is not older than the source
(modification time), unless forced. `shutil.copy2` keeps the source mtime,
so a freshly copied pair compares as up to date.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path

from stall.errors import StallIOError
from stall.events import FileTransferred, emit

log = logging.getLogger(__name__)

# transfer() outcomes
COPIED = "copied"
SKIPPED = "skipped"
MISSING = "missing"
DRY_RUN = "dry-run"


def is_stale(source: Path, target: Path) -> bool:
    """True if ``target`` is missing or older than ``source``."""
    if not target.exists():
        return True
    return source.stat().st_mtime > target.stat().st_mtime


def compare(local: Path, remote: Path) -> str:
    """Status of a stalled pair: ok|local-newer|remote-newer|*-missing."""
    has_local, has_remote = local.is_file(), remote.is_file()
    if not has_local and not has_remote:
        return "both-missing"
    if not has_local:
        return "local-missing"
    if not has_remote:
        return "remote-missing"
    local_mtime = local.stat().st_mtime
    remote_mtime = remote.stat().st_mtime
    if local_mtime > remote_mtime:
        return "local-newer"
    if remote_mtime > local_mtime:
        return "remote-newer"
    return "ok"


def transfer(
    source: Path,
    target: Path,
    direction: str,
    force: bool = False,
    dry_run: bool = False,
) -> str:
    """Copy ``source`` over ``target`` according to the skip policy."""
    if not source.is_file():
        status = MISSING
    elif not force and not is_stale(source, target):
        status = SKIPPED
    elif dry_run:
        status = DRY_RUN
    else:
        status = COPIED
    size = 0
    if status == COPIED:
        log.info("Copying %s -> %s", source, target)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
            size = target.stat().st_size
        except OSError as e:
            raise StallIOError(f"Failed to copy {source} to", target) from e
    else:
        log.debug("%s: %s -> %s", status, source, target)
    emit(
        FileTransferred(
            direction=direction,
            source=str(source),
            target=str(target),
            status=status,
            bytes=size,
        )
    )
    return status


__all__ = [
    "COPIED",
    "SKIPPED",
    "MISSING",
    "DRY_RUN",
    "is_stale",
    "compare",
    "transfer",
]
