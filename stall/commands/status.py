"""`stall status`: compare each stalled copy with its remote."""
from __future__ import annotations

from stall.registry import Stall

from .common import CommandResult, CommonOptions, display, stall_dir
from .transfer import compare


def status(stall: Stall, common: CommonOptions) -> CommandResult:
    result = CommandResult()
    root = stall_dir(stall)
    if stall.is_empty():
        result.say("stall is empty")
        return result
    for entry in stall.entries():
        state = compare(root / entry.local, entry.remote)
        result.say(
            f"{state:<14} {entry.local} -> {display(entry.remote, common)}"
        )
    return result
