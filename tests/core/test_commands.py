import os
from pathlib import Path

import pytest

from stall.commands import (
    CommonOptions,
    add,
    collect,
    distribute,
    init,
    move,
    remove,
    status,
)
from stall.errors import InvalidFile, StallFileExists, UsageError
from stall.registry import Stall


@pytest.fixture()
def env(tmp_path: Path):
    remote_dir = tmp_path / "home"
    remote_dir.mkdir()
    (remote_dir / "vimrc").write_text("set nu\n")
    (remote_dir / "gitconfig").write_text("[user]\n")
    stall_path = tmp_path / "dots" / ".stall"
    init(stall_path, CommonOptions())
    return remote_dir, stall_path


def test_init_creates_file_once(tmp_path: Path):
    path = tmp_path / "new" / ".stall"
    res = init(path, CommonOptions(), dry_run=True)
    assert not path.exists()
    assert res.lines == [f"would create stall file {path}"]
    init(path, CommonOptions())
    assert path.read_text() == "entries: {}\n"
    with pytest.raises(StallFileExists):
        init(path, CommonOptions())


def test_add_and_collect(env):
    remote_dir, stall_path = env
    stall = Stall.read_from_path(stall_path)
    res = add(
        stall,
        [remote_dir / "vimrc", remote_dir / "gitconfig"],
        CommonOptions(),
        into="home",
        collect=True,
    )
    assert res.copied == 2
    assert stall.entry_local("home/vimrc").remote == remote_dir / "vimrc"
    assert (stall_path.parent / "home" / "vimrc").read_text() == "set nu\n"
    assert stall.modified()


def test_add_rename_single_only(env):
    remote_dir, stall_path = env
    stall = Stall.read_from_path(stall_path)
    with pytest.raises(UsageError):
        add(
            stall,
            [remote_dir / "vimrc", remote_dir / "gitconfig"],
            CommonOptions(),
            rename="x",
        )
    add(stall, [remote_dir / "vimrc"], CommonOptions(), rename="init.vim")
    assert stall.entry_remote(remote_dir / "vimrc").local == Path("init.vim")


def test_add_missing_remote_warns_or_fails(env):
    remote_dir, stall_path = env
    stall = Stall.read_from_path(stall_path)
    res = add(stall, [remote_dir / "missing"], CommonOptions())
    assert res.warnings and "remote file not found" in res.warnings[0]
    assert stall.is_empty()
    with pytest.raises(InvalidFile):
        add(
            stall,
            [remote_dir / "missing"],
            CommonOptions(promote_warnings_to_errors=True),
        )


def test_add_replaces_pair_with_same_local(env, tmp_path: Path):
    remote_dir, stall_path = env
    other = tmp_path / "other"
    other.mkdir()
    (other / "vimrc").write_text("other\n")
    stall = Stall.read_from_path(stall_path)
    add(stall, [remote_dir / "vimrc"], CommonOptions())
    res = add(stall, [other / "vimrc"], CommonOptions())
    assert res.lines[-1] == f"replaced vimrc -> {remote_dir / 'vimrc'}"
    assert stall.entry_remote(remote_dir / "vimrc") is None


def test_add_dry_run_leaves_stall_untouched(env):
    remote_dir, stall_path = env
    stall = Stall.read_from_path(stall_path)
    res = add(stall, [remote_dir / "vimrc"], CommonOptions(), dry_run=True)
    assert res.lines[0].startswith("would add vimrc")
    assert stall.is_empty()
    assert not stall.modified()


def test_status_reports_states(env):
    remote_dir, stall_path = env
    stall = Stall.read_from_path(stall_path)
    assert status(stall, CommonOptions()).lines == ["stall is empty"]
    add(stall, [remote_dir / "vimrc"], CommonOptions(), collect=True)
    add(stall, [remote_dir / "gitconfig"], CommonOptions())
    lines = status(stall, CommonOptions(short_names=True)).lines
    assert lines[0].split() == ["local-missing", "gitconfig", "->", "gitconfig"]
    assert lines[1].split() == ["ok", "vimrc", "->", "vimrc"]


def test_distribute_pushes_edited_copy(env):
    remote_dir, stall_path = env
    stall = Stall.read_from_path(stall_path)
    add(stall, [remote_dir / "vimrc"], CommonOptions(), collect=True)
    local = stall_path.parent / "vimrc"
    local.write_text("set nonu\n")
    later = (remote_dir / "vimrc").stat().st_mtime + 10
    os.utime(local, (later, later))
    res = distribute(stall, CommonOptions())
    assert res.copied == 1
    assert (remote_dir / "vimrc").read_text() == "set nonu\n"
    res = collect(stall, CommonOptions(verbose=True))
    assert res.copied == 0 and res.skipped == 1
    assert res.lines[0].startswith("unchanged")


def test_collect_selected_files_and_missing(env):
    remote_dir, stall_path = env
    stall = Stall.read_from_path(stall_path)
    add(stall, [remote_dir / "vimrc", remote_dir / "gitconfig"], CommonOptions())
    (remote_dir / "gitconfig").unlink()
    res = collect(stall, CommonOptions(), files=["vimrc", "nope"])
    assert res.copied == 1
    assert res.warnings == ["not in stall: nope"]
    res = collect(stall, CommonOptions())
    assert res.missing == 1
    assert (stall_path.parent / "vimrc").exists()


def test_remove_by_local_and_remote_with_delete(env):
    remote_dir, stall_path = env
    stall = Stall.read_from_path(stall_path)
    add(stall, [remote_dir / "vimrc", remote_dir / "gitconfig"], CommonOptions(), collect=True)
    res = remove(stall, ["vimrc"], CommonOptions(), delete=True)
    assert not (stall_path.parent / "vimrc").exists()
    assert res.lines[-1].startswith("deleted")
    remove(stall, [remote_dir / "gitconfig"], CommonOptions(), remote_naming=True)
    assert stall.is_empty()
    assert (stall_path.parent / "gitconfig").exists()
    res = remove(stall, ["ghost"], CommonOptions())
    assert res.warnings == ["not in stall: ghost"]


def test_move_rekeys_and_moves_copy(env):
    remote_dir, stall_path = env
    stall = Stall.read_from_path(stall_path)
    add(stall, [remote_dir / "vimrc", remote_dir / "gitconfig"], CommonOptions(), collect=True)
    with pytest.raises(InvalidFile):
        move(stall, "vimrc", "gitconfig", CommonOptions())
    with pytest.raises(InvalidFile):
        move(stall, "absent", "x", CommonOptions())
    move(stall, "vimrc", "vim/vimrc", CommonOptions(), move_file=True)
    assert stall.entry_local("vim/vimrc").remote == remote_dir / "vimrc"
    assert stall.entry_local("vimrc") is None
    assert (stall_path.parent / "vim" / "vimrc").read_text() == "set nu\n"
    assert not (stall_path.parent / "vimrc").exists()


def test_local_paths_must_stay_inside_stall(env, tmp_path: Path):
    remote_dir, stall_path = env
    stall = Stall.read_from_path(stall_path)
    with pytest.raises(UsageError):
        add(stall, [remote_dir / "vimrc"], CommonOptions(), into=str(tmp_path))
    with pytest.raises(UsageError):
        add(stall, [remote_dir / "vimrc"], CommonOptions(), rename="../vimrc")
    assert stall.is_empty()
    add(stall, [remote_dir / "vimrc"], CommonOptions())
    with pytest.raises(UsageError):
        move(stall, "vimrc", "../escaped", CommonOptions())
    assert stall.entry_local("vimrc") is not None
