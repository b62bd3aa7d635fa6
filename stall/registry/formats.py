"""Stall file formats: structured YAML record + legacy path list.

Structured record (written and read)::

    entries:
      notes.txt: /home/me/notes.txt
      vimrc: /home/me/.vimrc

One top-level mapping with exactly one key, ``entries``, mapping local path
strings to remote path strings. Unknown keys are rejected.

Legacy list (read only): one remote path per line; blank lines and lines
starting with ``#`` or ``//`` are ignored.

Both parsers raise `StallFormatError`; ``reason`` tells the fallback logic
and the metrics what went wrong.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Iterator, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError
from yaml import YAMLError

from stall.errors import StallFormatError

# Paths are never folded across lines.
_NO_WRAP = 2**30

COMMENT_PREFIXES = ("//", "#")


class StallDocument(BaseModel):
    entries: Dict[str, str]

    model_config = ConfigDict(extra="forbid", strict=True)


def _decode(data: bytes | str) -> str:
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise StallFormatError(
            f"stall file is not valid UTF-8: {e}", reason="decode"
        ) from e


def parse_yaml(data: bytes | str) -> StallDocument:
    text = _decode(data)
    try:
        raw = yaml.safe_load(text)
    except (YAMLError, ValueError) as e:
        # ValueError: timestamp-like scalars that are not real dates
        raise StallFormatError(
            f"Failed parsing YAML stall file: {e}", reason="syntax"
        ) from e
    if raw is None:
        raise StallFormatError("empty YAML document", reason="empty")
    try:
        return StallDocument.model_validate(raw)
    except ValidationError as e:
        raise StallFormatError(
            f"Invalid YAML stall record: {e}", reason="schema"
        ) from e


def iter_list_lines(data: bytes | str) -> Iterator[Tuple[int, Path]]:
    """Yield ``(line_number, remote_path)`` for every non-comment line."""
    text = _decode(data)
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        if line.startswith(COMMENT_PREFIXES):
            continue
        yield lineno, Path(line)


def generate_yaml(pairs: Iterable[Tuple[Path, Path]]) -> str:
    doc = StallDocument(
        entries={str(local): str(remote) for local, remote in pairs}
    )
    return yaml.safe_dump(
        doc.model_dump(),
        default_flow_style=False,
        sort_keys=True,
        allow_unicode=True,
        width=_NO_WRAP,
    )


__all__ = [
    "StallDocument",
    "COMMENT_PREFIXES",
    "parse_yaml",
    "iter_list_lines",
    "generate_yaml",
]
