"""Read-only (local, remote) view over a stall registry pair."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Entry:
    local: Path  # path inside the stall directory
    remote: Path  # original location elsewhere in the filesystem

    def as_tuple(self) -> tuple[Path, Path]:
        return (self.local, self.remote)


def file_name(path: Path) -> str | None:
    """Final path component, or None for ``/``, empty paths and ``..``."""
    name = path.name
    if not name or name == "..":
        return None
    return name


__all__ = ["Entry", "file_name"]
