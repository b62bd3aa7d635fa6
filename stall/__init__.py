"""Stall: track files copied into a local staging directory.

Public surface lives in `stall.registry` (the entry registry and its
persistence) and `stall.commands` (collect/distribute and friends).
"""

__version__ = "0.2.1"
