"""Save-state bookkeeping for a stall registry (no I/O)."""
from __future__ import annotations

import os
from pathlib import Path


class LoadStatus:
    __slots__ = ("_load_path", "_modified")

    def __init__(self) -> None:
        self._load_path: Path | None = None
        self._modified = False

    def with_load_path(self, path: str | os.PathLike[str]) -> LoadStatus:
        self.set_load_path(path)
        return self

    def load_path(self) -> Path | None:
        return self._load_path

    def set_load_path(self, path: str | os.PathLike[str]) -> None:
        self._load_path = Path(path)

    def modified(self) -> bool:
        return self._modified

    def set_modified(self, modified: bool) -> None:
        self._modified = bool(modified)

    def __repr__(self) -> str:
        return (
            f"LoadStatus(load_path={self._load_path!r}, "
            f"modified={self._modified!r})"
        )


__all__ = ["LoadStatus"]
