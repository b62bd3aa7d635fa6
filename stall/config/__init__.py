"""Config subsystem public API.

Provides:
    get_config() -> AggregatedConfig (stall/output/logging sections)
    as_dict()    -> dict representation
    resolve_stall_path() -> stall file for a --stall argument
    ConfigError  -> raised on validation / unknown key
"""

from .loader import (  # noqa: F401
    AggregatedConfig,
    get_config,
    as_dict,
    ConfigError,
    clear_config_cache,
    resolve_stall_path,
)

__all__ = [
    "AggregatedConfig",
    "get_config",
    "as_dict",
    "ConfigError",
    "clear_config_cache",
    "resolve_stall_path",
]
