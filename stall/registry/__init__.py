"""Stall entry registry.

Responsibilities:
- `Stall`: bijective local↔remote path map with YAML / legacy list
  persistence (see `stall.registry.stall`)
- `LoadStatus`: load path + modified flag bookkeeping
- `Entry`: read-only (local, remote) view
"""

from .entry import Entry, file_name  # noqa: F401
from .formats import StallDocument  # noqa: F401
from .load_status import LoadStatus  # noqa: F401
from .stall import Stall  # noqa: F401

__all__ = ["Entry", "LoadStatus", "Stall", "StallDocument", "file_name"]
