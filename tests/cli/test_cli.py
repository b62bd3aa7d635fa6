from pathlib import Path

import pytest

from stall import metrics
from stall.cli import build_parser, main
from stall.registry import Stall


@pytest.fixture()
def home(tmp_path: Path) -> Path:
    d = tmp_path / "home"
    d.mkdir()
    (d / "bashrc").write_text("alias ll='ls -l'\n")
    (d / "profile").write_text("export EDITOR=vim\n")
    return d


def test_parser_rejects_verbose_with_quiet():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["status", "-v", "-q"])


def test_init_then_init_again_reports_file_exists(tmp_path: Path, capsys):
    dots = tmp_path / "dots"
    dots.mkdir()
    assert main(["init", str(dots)]) == 0
    assert (dots / ".stall").read_text() == "entries: {}\n"
    assert main(["init", str(dots)]) == 1
    err = capsys.readouterr().err
    assert "error[file-exists]" in err
    assert metrics.counter(
        "command_failures_total",
        {"command": "init", "error_type": "file-exists"},
    ) == 1


def test_add_collect_status_round(tmp_path: Path, home: Path, capsys):
    dots = tmp_path / "dots"
    dots.mkdir()
    main(["init", str(dots)])
    rc = main(["add", "-s", str(dots), "-c", str(home / "bashrc")])
    assert rc == 0
    stall = Stall.read_from_path(dots / ".stall")
    assert stall.entry_local("bashrc").remote == home / "bashrc"
    assert (dots / "bashrc").exists()
    capsys.readouterr()
    assert main(["status", "-s", str(dots)]) == 0
    out = capsys.readouterr().out
    assert out.split() == ["ok", "bashrc", "->", str(home / "bashrc")]


def test_missing_stall_file_is_reported(tmp_path: Path, capsys):
    assert main(["status", "-s", str(tmp_path / "none.stall")]) == 1
    assert "error[missing-file]" in capsys.readouterr().err


def test_legacy_list_file_is_upgraded_on_save(tmp_path: Path, home: Path):
    stall_file = tmp_path / "legacy.stall"
    stall_file.write_text(f"# old format\n{home / 'bashrc'}\n")
    assert main(["add", "-s", str(stall_file), str(home / "profile")]) == 0
    text = stall_file.read_text()
    assert text.startswith("entries:\n")
    stall = Stall.read_from_path(stall_file)
    assert {e.local for e in stall.entries()} == {Path("bashrc"), Path("profile")}


def test_readonly_commands_do_not_rewrite_legacy_file(tmp_path: Path, home: Path):
    stall_file = tmp_path / "legacy.stall"
    legacy = f"{home / 'bashrc'}\n"
    stall_file.write_text(legacy)
    assert main(["collect", "-s", str(stall_file)]) == 0
    assert stall_file.read_text() == legacy
    assert (tmp_path / "bashrc").exists()


def test_dry_run_does_not_save(tmp_path: Path, home: Path, capsys):
    dots = tmp_path / "dots"
    dots.mkdir()
    main(["init", str(dots)])
    capsys.readouterr()
    assert main(["add", "-s", str(dots), "--dry-run", str(home / "bashrc")]) == 0
    assert "would add bashrc" in capsys.readouterr().out
    assert (dots / ".stall").read_text() == "entries: {}\n"


def test_error_flag_promotes_warnings(tmp_path: Path, home: Path, capsys):
    dots = tmp_path / "dots"
    dots.mkdir()
    main(["init", str(dots)])
    args = ["add", "-s", str(dots), str(home / "missing")]
    assert main(args) == 0
    assert "warning: remote file not found" in capsys.readouterr().err
    assert main(args + ["--error"]) == 1
    assert "error[invalid-file]" in capsys.readouterr().err


def test_rm_and_mv(tmp_path: Path, home: Path):
    dots = tmp_path / "dots"
    dots.mkdir()
    main(["init", str(dots)])
    main(["add", "-s", str(dots), "-c", str(home / "bashrc"), str(home / "profile")])
    assert main(["mv", "-s", str(dots), "-m", "bashrc", "sh/bashrc"]) == 0
    assert (dots / "sh" / "bashrc").exists()
    assert main(["rm", "-s", str(dots), "-d", "profile"]) == 0
    assert not (dots / "profile").exists()
    stall = Stall.read_from_path(dots / ".stall")
    assert [e.local for e in stall.entries()] == [Path("sh/bashrc")]


def test_default_stall_from_preferences(tmp_path: Path, home: Path, monkeypatch):
    dots = tmp_path / "dots"
    dots.mkdir()
    monkeypatch.setenv("STALL__STALL__DEFAULT_DIR", str(dots))
    monkeypatch.setenv("STALL__STALL__FILE_NAME", "index.stall")
    assert main(["init"]) == 0
    assert (dots / "index.stall").exists()
    assert main(["add", str(home / "profile")]) == 0
    assert Stall.read_from_path(dots / "index.stall").entry_local("profile")


def test_list_file_with_date_like_line_loads(tmp_path: Path, capsys):
    stall_file = tmp_path / "legacy.stall"
    stall_file.write_text("2023-02-30\n")
    assert main(["status", "-s", str(stall_file)]) == 0
    assert "2023-02-30" in capsys.readouterr().out
