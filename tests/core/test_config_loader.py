import os
from pathlib import Path

import pytest

from stall import metrics
from stall.config import (
    ConfigError,
    as_dict,
    clear_config_cache,
    get_config,
    resolve_stall_path,
)


def _config_dir() -> Path:
    return Path(os.environ["STALL_CONFIG_DIR"])


def _write(name: str, text: str) -> None:
    (_config_dir() / name).write_text(text, encoding="utf-8")
    clear_config_cache()


def test_defaults_without_files():
    cfg = get_config()
    assert cfg.stall.file_name == ".stall"
    assert cfg.stall.default_dir is None
    assert cfg.output.short_names is False
    assert cfg.logging.level == "warn"


def test_overrides_local_wins_over_base():
    _write(
        "base.yaml",
        "stall:\n"
        "  file_name: base.stall\n"
        "output:\n"
        "  short_names: true\n",
    )
    _write("overrides.local.yaml", "stall: {file_name: local.stall}\n")
    cfg = get_config()
    assert cfg.stall.file_name == "local.stall"
    assert cfg.output.short_names is True


def test_env_override_metric(monkeypatch):
    monkeypatch.setenv("STALL__OUTPUT__PROMOTE_WARNINGS_TO_ERRORS", "true")
    monkeypatch.setenv("STALL__LOGGING__LEVEL", "debug")
    cfg = as_dict()
    assert cfg["output"]["promote_warnings_to_errors"] is True
    assert cfg["logging"]["level"] == "debug"
    assert metrics.counter(
        "env_override_total", {"path": "output.promote_warnings_to_errors"}
    ) == 1


def test_unknown_key_rejected():
    _write("base.yaml", "stall:\n  file_name: x\n  unknown_field: 1\n")
    with pytest.raises(ConfigError) as exc:
        get_config()
    assert "stall" in str(exc.value)


def test_unknown_section_rejected():
    _write("base.yaml", "colors: {}\n")
    with pytest.raises(ConfigError):
        get_config()


def test_invalid_logging_level_rejected():
    _write("base.yaml", "logging: {level: loud}\n")
    with pytest.raises(ConfigError):
        get_config()


def test_non_mapping_file_rejected():
    _write("base.yaml", "- just\n- a list\n")
    with pytest.raises(ConfigError):
        get_config()


def test_explicit_config_dir(tmp_path: Path):
    (tmp_path / "base.yaml").write_text("stall: {file_name: other}\n")
    assert get_config(str(tmp_path)).stall.file_name == "other"
    assert get_config().stall.file_name == ".stall"


def test_resolve_stall_path(tmp_path: Path, monkeypatch):
    cfg = get_config()
    assert resolve_stall_path(tmp_path, cfg) == tmp_path / ".stall"
    assert resolve_stall_path(tmp_path / "f.stall", cfg) == tmp_path / "f.stall"
    monkeypatch.chdir(tmp_path)
    assert resolve_stall_path(None, cfg) == tmp_path / ".stall"
    _write("base.yaml", f"stall: {{default_dir: '{tmp_path / 'dots'}'}}\n")
    assert resolve_stall_path(None) == tmp_path / "dots" / ".stall"
