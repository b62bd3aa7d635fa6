"""Stall registry: bijective local↔remote path map + persistence.

Responsibilities:
- Keep local and remote paths unique at the same time (a true bijection);
  an insert colliding on either side evicts the stale pair.
- Load a stall file, trying the YAML record first and falling back to the
  legacy path list.
- Write the YAML record to a path (overwrite, create-only, or load path).

Not thread-safe; callers own one instance per session.
"""
from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from typing import IO, Callable, Dict, Iterator, List, Optional, Tuple

from stall.errors import (
    InvalidStallPath,
    MissingFile,
    StallFileExists,
    StallFormatError,
    StallIOError,
)
from stall.events import (
    EntryInserted,
    EntryRemoved,
    StallFormatFallback,
    StallLoaded,
    StallSaved,
    emit,
)

from .entry import Entry, file_name
from .formats import generate_yaml, iter_list_lines, parse_yaml
from .load_status import LoadStatus

log = logging.getLogger(__name__)

Pair = Tuple[Path, Path]


def _checked(local, remote) -> Pair:
    """Single validation routine for both insertion entry points."""
    local, remote = Path(local), Path(remote)
    if file_name(local) is None:
        raise InvalidStallPath(local, "local path")
    if file_name(remote) is None:
        raise InvalidStallPath(remote, "remote path")
    return local, remote


class Stall:
    """A stall file entry database."""

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self._load_status = LoadStatus()
        if path is not None:
            self._load_status.set_load_path(path)
        self._by_local: Dict[Path, Path] = {}
        self._by_remote: Dict[Path, Path] = {}
        self._mutations = 0
        self._format: str | None = None  # format it was parsed from

    def __repr__(self) -> str:
        return f"Stall({self._load_status!r}, entries={len(self)})"

    def __len__(self) -> int:
        return len(self._by_local)

    def __contains__(self, local: object) -> bool:
        try:
            return Path(local) in self._by_local  # type: ignore[arg-type]
        except TypeError:
            return False

    def __iter__(self) -> Iterator[Entry]:
        return self.entries()

    # --- lookup -----------------------------------------------------------
    def is_empty(self) -> bool:
        return not self._by_local

    def entry_local(self, local: str | os.PathLike[str]) -> Optional[Entry]:
        local = Path(local)
        remote = self._by_local.get(local)
        if remote is None:
            return None
        return Entry(local, remote)

    def entry_remote(self, remote: str | os.PathLike[str]) -> Optional[Entry]:
        remote = Path(remote)
        local = self._by_remote.get(remote)
        if local is None:
            return None
        return Entry(local, remote)

    def entries(self) -> Iterator[Entry]:
        """Iterate entries sorted by local path.

        The registry must not be mutated while the iterator is in use.
        """
        stamp = self._mutations
        for local in sorted(self._by_local):
            if self._mutations != stamp:
                raise RuntimeError("Stall mutated during iteration")
            yield Entry(local, self._by_local[local])

    # --- mutation ---------------------------------------------------------
    def _put(self, local: Path, remote: Path) -> List[Pair]:
        evicted: List[Pair] = []
        old_remote = self._by_local.pop(local, None)
        if old_remote is not None:
            del self._by_remote[old_remote]
            if old_remote != remote:
                evicted.append((local, old_remote))
        old_local = self._by_remote.pop(remote, None)
        if old_local is not None:
            del self._by_local[old_local]
            evicted.append((old_local, remote))
        self._by_local[local] = remote
        self._by_remote[remote] = local
        self._mutations += 1
        return evicted

    def insert(
        self,
        local: str | os.PathLike[str],
        remote: str | os.PathLike[str],
    ) -> List[Pair]:
        """Add an entry, evicting any pair that shares either path.

        Returns the evicted pairs. Raises `InvalidStallPath` if either path
        has no file name (e.g. ``/`` or ``/abc/..``); that is a caller bug.
        """
        local, remote = _checked(local, remote)
        log.info("Adding local: %s remote: %s", local, remote)
        self._load_status.set_modified(True)
        evicted = self._put(local, remote)
        log.debug("Overwrite: %s", evicted)
        emit(
            EntryInserted(
                local=str(local),
                remote=str(remote),
                evicted=[(str(a), str(b)) for a, b in evicted] or None,
            )
        )
        return evicted

    def remove_local(self, local: str | os.PathLike[str]) -> Optional[Pair]:
        """Remove the entry with the given local path, if one exists.

        Marks the stall modified even when nothing was removed.
        """
        local = Path(local)
        log.info("Removing local: %s", local)
        self._load_status.set_modified(True)
        removed = None
        remote = self._by_local.pop(local, None)
        if remote is not None:
            del self._by_remote[remote]
            self._mutations += 1
            removed = (local, remote)
        log.debug("Removed: %s", removed)
        self._emit_removed("local", local, removed)
        return removed

    def remove_remote(self, remote: str | os.PathLike[str]) -> Optional[Pair]:
        """Remove the entry with the given remote path, if one exists.

        Marks the stall modified even when nothing was removed.
        """
        remote = Path(remote)
        log.info("Removing remote: %s", remote)
        self._load_status.set_modified(True)
        removed = None
        local = self._by_remote.pop(remote, None)
        if local is not None:
            del self._by_local[local]
            self._mutations += 1
            removed = (local, remote)
        log.debug("Removed: %s", removed)
        self._emit_removed("remote", remote, removed)
        return removed

    @staticmethod
    def _emit_removed(key: str, path: Path, removed: Optional[Pair]) -> None:
        emit(
            EntryRemoved(
                key=key,
                path=str(path),
                removed=(str(removed[0]), str(removed[1])) if removed else None,
            )
        )

    def _insert_loaded(self, local, remote) -> None:
        """Insert from a parsed file; leaves the load status untouched."""
        self._put(*_checked(local, remote))

    def _insert_list_remote(self, remote: Path) -> None:
        """Insert a list-format line; the local path is the file name."""
        name = file_name(remote)
        if name is None:
            raise InvalidStallPath(remote, "remote path")
        self._insert_loaded(name, remote)

    # --- load status ------------------------------------------------------
    def with_load_path(self, path: str | os.PathLike[str]) -> Stall:
        self.set_load_path(path)
        return self

    def load_path(self) -> Optional[Path]:
        return self._load_status.load_path()

    def set_load_path(self, path: str | os.PathLike[str]) -> None:
        self._load_status.set_load_path(path)

    def modified(self) -> bool:
        return self._load_status.modified()

    def set_modified(self, modified: bool) -> None:
        self._load_status.set_modified(modified)

    # --- reading ----------------------------------------------------------
    @classmethod
    def read_from_path(cls, path: str | os.PathLike[str]) -> Stall:
        """Load a stall file and remember ``path`` as its load path."""
        path = Path(path)
        try:
            with path.open("rb") as f:
                stall = cls.read_from_file(f)
        except FileNotFoundError as e:
            raise MissingFile(path) from e
        except OSError as e:
            raise StallIOError(
                "Failed to open stall file for reading", path
            ) from e
        stall.set_load_path(path)
        emit(
            StallLoaded(
                path=str(path),
                format=stall._format or "yaml",
                entries=len(stall),
            )
        )
        return stall

    @classmethod
    def read_from_file(cls, file: IO) -> Stall:
        """Parse a stall from an open (binary or text) file.

        The whole file is read once; each parser in the chain sees the same
        buffer. Only the last parser's error is raised.
        """
        try:
            data = file.read()
        except UnicodeDecodeError as e:
            raise StallFormatError(
                f"stall file is not valid UTF-8: {e}", reason="decode"
            ) from e
        except OSError as e:
            raise StallIOError("Failed to read stall file") from e
        return cls.parse(data)

    @classmethod
    def parse(cls, data: bytes | str) -> Stall:
        chain: Tuple[Tuple[str, Callable[[bytes | str], Stall]], ...] = (
            ("yaml", cls._parse_yaml),
            ("list", cls._parse_list),
        )
        for i, (fmt, parser) in enumerate(chain):
            try:
                stall = parser(data)
            except StallFormatError as e:
                if i == len(chain) - 1:
                    raise
                log.debug(
                    "Error in %s format (%s), switching to %s format: %s",
                    fmt,
                    e.reason,
                    chain[i + 1][0],
                    e,
                )
                emit(StallFormatFallback(reason=e.reason, message=str(e)))
                continue
            stall._format = fmt
            return stall
        raise AssertionError("unreachable")  # pragma: no cover

    @classmethod
    def _parse_yaml(cls, data: bytes | str) -> Stall:
        doc = parse_yaml(data)
        stall = cls()
        for local, remote in doc.entries.items():
            try:
                stall._insert_loaded(local, remote)
            except InvalidStallPath as e:
                raise StallFormatError(str(e), reason="path") from e
        return stall

    @classmethod
    def _parse_list(cls, data: bytes | str) -> Stall:
        stall = cls()
        for lineno, remote in iter_list_lines(data):
            try:
                stall._insert_list_remote(remote)
            except InvalidStallPath as e:
                raise StallFormatError(
                    str(e), line=lineno, reason="path"
                ) from e
        return stall

    # --- writing ----------------------------------------------------------
    def to_yaml(self) -> str:
        return generate_yaml(e.as_tuple() for e in self.entries())

    def write_to_file(self, file: IO) -> None:
        """Write the YAML record into an open file and flush it."""
        self.generate_yaml_into_file(file, self.to_yaml())

    @staticmethod
    def generate_yaml_into_file(file: IO, text: str) -> None:
        log.debug("Serializing & writing stall file.")
        if isinstance(file, io.TextIOBase):
            file.write(text)
        else:
            file.write(text.encode("utf-8"))
        file.flush()

    def _write(self, path: Path, mode: str) -> None:
        text = self.to_yaml()
        try:
            f = path.open(mode, encoding="utf-8", newline="\n")
        except FileExistsError as e:
            raise StallFileExists(path) from e
        except OSError as e:
            action = "create" if mode == "x" else "open"
            raise StallIOError(
                f"Failed to {action} stall file for writing", path
            ) from e
        try:
            with f:
                self.generate_yaml_into_file(f, text)
        except OSError as e:
            raise StallIOError("Failed to write stall file", path) from e
        emit(
            StallSaved(
                path=str(path),
                mode="create" if mode == "x" else "overwrite",
                entries=len(self),
            )
        )

    def write_to_path(self, path: str | os.PathLike[str]) -> None:
        """Open (create or truncate) a file at ``path`` and write into it."""
        self._write(Path(path), "w")

    def write_to_path_if_new(self, path: str | os.PathLike[str]) -> None:
        """Create a new file at ``path``; raises `StallFileExists` otherwise."""
        self._write(Path(path), "x")

    def write_to_load_path(self) -> bool:
        """Write to the load path. Returns True if data was written."""
        path = self.load_path()
        if path is None:
            return False
        self.write_to_path(path)
        return True

    def write_to_load_path_if_new(self) -> bool:
        """Create the load path file. Returns True if data was written."""
        path = self.load_path()
        if path is None:
            return False
        self.write_to_path_if_new(path)
        return True

    def save(self, path: str | os.PathLike[str] | None = None) -> bool:
        """Write to ``path`` (adopted as load path) or the load path.

        Clears the modified flag on success. Returns False when the stall is
        detached and no path was given.
        """
        if path is not None:
            self.write_to_path(path)
            self.set_load_path(path)
        elif not self.write_to_load_path():
            return False
        self.set_modified(False)
        return True


__all__ = ["Stall", "Pair"]
