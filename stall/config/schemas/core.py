"""Core schemas: stall file location + command output policy."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StallConfig(BaseModel):
    # Used when neither --stall nor a stall file in the cwd is given.
    default_dir: str | None = None
    file_name: str = Field(".stall", min_length=1)

    model_config = ConfigDict(extra="forbid")


class OutputConfig(BaseModel):
    short_names: bool = False
    promote_warnings_to_errors: bool = False

    model_config = ConfigDict(extra="forbid")
