"""Stall commands (init, status, add, rm, mv, collect, distribute).

Each command works on an already loaded `Stall` (except `init`, which
creates the file) and returns a `CommandResult`; saving is left to the
caller, which checks `Stall.modified()`.
"""

from .add import add  # noqa: F401
from .collect import collect, distribute  # noqa: F401
from .common import CommandResult, CommonOptions  # noqa: F401
from .init import init  # noqa: F401
from .move import move  # noqa: F401
from .remove import remove  # noqa: F401
from .status import status  # noqa: F401

__all__ = [
    "CommandResult",
    "CommonOptions",
    "add",
    "collect",
    "distribute",
    "init",
    "move",
    "remove",
    "status",
]
