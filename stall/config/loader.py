"""Preferences loading & validation.

Precedence (last wins): base.yaml → overrides.local.yaml → ENV (STALL__*).

The config directory is ``$STALL_CONFIG_DIR`` or ``~/.config/stall``; the CLI
``--config`` option passes one explicitly. A missing directory or missing
files simply yield defaults. Unknown keys are rejected.
"""
from __future__ import annotations

import logging
import os
import pathlib
import threading
from functools import lru_cache
from typing import Any, Dict, Type

import yaml
from pydantic import BaseModel, ConfigDict
from yaml import YAMLError

from stall import metrics
from stall.errors import StallError

from .schemas.core import OutputConfig, StallConfig
from .schemas.observability import LoggingConfig

log = logging.getLogger(__name__)


class AggregatedConfig(BaseModel):
    schema_version: int = 1
    stall: StallConfig = StallConfig()
    output: OutputConfig = OutputConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = ConfigDict(extra="forbid")


DEFAULT_CONFIG_DIR = pathlib.Path("~/.config/stall")
ENV_CONFIG_DIR = "STALL_CONFIG_DIR"
ENV_PREFIX = "STALL__"

SUB_SCHEMA_CLASSES: Dict[str, Type[BaseModel]] = {
    "stall": StallConfig,
    "output": OutputConfig,
    "logging": LoggingConfig,
}


class ConfigError(StallError):
    pass


def _load_yaml_if_exists(path: pathlib.Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, YAMLError) as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file {path}: expected a mapping")
    return data


def _merge_dict(
    base: Dict[str, Any], override: Dict[str, Any]
) -> Dict[str, Any]:
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            base[k] = _merge_dict(base[k], v)
        else:
            base[k] = v
    return base


def _cast_env_value(value: str) -> Any:
    if value.lower() in {"true", "false"}:
        return value.lower() == "true"
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _apply_env(cfg: Dict[str, Any]) -> None:
    prefix_len = len(ENV_PREFIX)
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        path_parts = env_key[prefix_len:].lower().split("__")
        target = cfg
        for part in path_parts[:-1]:
            if part not in target or not isinstance(target[part], dict):
                target[part] = {}
            target = target[part]
        target[path_parts[-1]] = _cast_env_value(value)
        dotted_path = ".".join(path_parts)
        metrics.inc("env_override_total", {"path": dotted_path})
        log.debug("config env override path=%s source=env", dotted_path)


_lock = threading.Lock()


def _resolve_config_dir(config_dir: str | None) -> pathlib.Path:
    """Resolve config directory each call honoring env var changes."""
    if config_dir:
        return pathlib.Path(config_dir).expanduser()
    env_dir = os.getenv(ENV_CONFIG_DIR)
    if env_dir:
        return pathlib.Path(env_dir).expanduser()
    return DEFAULT_CONFIG_DIR.expanduser()


def _validate_sub_schemas(raw: Dict[str, Any]) -> None:
    """Validate each known section so errors name the offending section."""
    for name, cls in SUB_SCHEMA_CLASSES.items():
        if name in raw:
            try:
                cls.model_validate(raw[name])
            except Exception as e:  # noqa: BLE001
                raise ConfigError(
                    f"Validation failed for section '{name}': {e}"
                ) from e


@lru_cache(maxsize=4)
def get_config(config_dir: str | None = None) -> AggregatedConfig:  # noqa: D401
    with _lock:
        cfg_dir = _resolve_config_dir(config_dir)
        base_cfg = _load_yaml_if_exists(cfg_dir / "base.yaml")
        overrides_cfg = _load_yaml_if_exists(cfg_dir / "overrides.local.yaml")
        merged = _merge_dict(base_cfg, overrides_cfg)
        _apply_env(merged)
        _validate_sub_schemas(merged)
        try:
            return AggregatedConfig.model_validate(merged)
        except Exception as e:  # noqa: BLE001
            raise ConfigError(str(e)) from e


def clear_config_cache() -> None:
    """Clear cached config (primarily for tests)."""
    get_config.cache_clear()


def as_dict(config_dir: str | None = None) -> Dict[str, Any]:
    return get_config(config_dir).model_dump()


def resolve_stall_path(
    given: str | os.PathLike[str] | None,
    cfg: AggregatedConfig | None = None,
) -> pathlib.Path:
    """Return the stall file for a command line ``--stall`` value.

    A directory (existing, or the configured default when nothing is given)
    resolves to ``<dir>/<stall.file_name>``; anything else is taken as the
    stall file itself.
    """
    cfg = cfg or get_config()
    if given is None:
        base = cfg.stall.default_dir
        directory = pathlib.Path(base).expanduser() if base else pathlib.Path.cwd()
        return directory / cfg.stall.file_name
    path = pathlib.Path(given).expanduser()
    if path.is_dir():
        return path / cfg.stall.file_name
    return path
