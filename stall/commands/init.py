"""`stall init`: create an empty stall file."""
from __future__ import annotations

import os
from pathlib import Path

from stall.registry import Stall

from .common import CommandResult, CommonOptions, display


def init(
    stall_path: str | os.PathLike[str],
    common: CommonOptions,
    dry_run: bool = False,
) -> CommandResult:
    """Create ``stall_path``; raises `StallFileExists` if it is present."""
    result = CommandResult()
    path = Path(stall_path)
    if dry_run:
        result.say(f"would create stall file {display(path, common)}")
        return result
    path.parent.mkdir(parents=True, exist_ok=True)
    Stall(path).write_to_load_path_if_new()
    result.say(f"created stall file {display(path, common)}")
    return result
