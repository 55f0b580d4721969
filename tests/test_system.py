import os

import pytest

from dotstate.realsystem import RealSystem
from dotstate.system import (
    EmptySystemMixin,
    FileInfo,
    NoUpdateSystemMixin,
    SkipDir,
    System,
    UpdateNotAllowedError,
    mkdir_all,
    walk,
)


class _NoParents(EmptySystemMixin, NoUpdateSystemMixin):
    def __init__(self):
        self.calls = []

    def mkdir(self, name, perm):
        self.calls.append(name)
        raise FileNotFoundError(name)


def _skipping(seen, skip_path):
    def fn(path, info, err):
        seen.append(path)
        if path == skip_path:
            raise SkipDir

    return fn


@pytest.fixture
def tree(tmp_path):
    top = tmp_path / "top"
    (top / "a" / "sub").mkdir(parents=True)
    (top / "a" / "file1").write_text("1")
    (top / "a" / "sub" / "file2").write_text("2")
    (top / "b").write_text("b")
    return RealSystem(tmp_path)


def test_file_info_from_stat(tmp_path):
    path = tmp_path / "f"
    path.write_bytes(b"hello")
    info = FileInfo.from_stat("f", os.lstat(path))
    assert info.name == "f"
    assert info.size == len(b"hello")
    assert info.is_regular()
    assert not info.is_dir()
    assert not info.is_symlink()


def test_file_info_dir_and_symlink(tmp_path):
    (tmp_path / "d").mkdir()
    os.symlink("d", tmp_path / "l")
    assert FileInfo.from_stat("d", os.lstat(tmp_path / "d")).is_dir()
    link = FileInfo.from_stat("l", os.lstat(tmp_path / "l"))
    assert link.is_symlink()
    assert not link.is_dir()


def test_system_is_abstract():
    with pytest.raises(TypeError):
        System()


def test_empty_system_reads():
    empty = EmptySystemMixin()
    assert empty.glob("/**") == []
    assert empty.idempotent_cmd_output(None) == b""
    assert empty.idempotent_cmd_combined_output(None) == b""
    assert empty.raw_path("/home/user") == "/home/user"
    with pytest.raises(FileNotFoundError):
        EmptySystemMixin().lstat("/home/user")
    with pytest.raises(FileNotFoundError):
        EmptySystemMixin().stat("/home/user")
    with pytest.raises(FileNotFoundError):
        EmptySystemMixin().read_file("/home/user")
    with pytest.raises(FileNotFoundError):
        EmptySystemMixin().readlink("/home/user")
    with pytest.raises(FileNotFoundError):
        EmptySystemMixin().read_dir("/home/user")


@pytest.mark.parametrize(
    ("method", "args"),
    [
        ("chmod", ("/x", 0o600)),
        ("mkdir", ("/x", 0o777)),
        ("remove_all", ("/x",)),
        ("rename", ("/x", "/y")),
        ("run_cmd", (None,)),
        ("run_script", ("script", "/", b"")),
        ("write_file", ("/x", b"", 0o666)),
        ("write_symlink", ("target", "/x")),
    ],
)
def test_no_update_system(method, args):
    with pytest.raises(UpdateNotAllowedError):
        getattr(NoUpdateSystemMixin(), method)(*args)


def test_mkdir_all_creates_parents(tmp_path):
    s = RealSystem(tmp_path)
    mkdir_all(s, "/a/b/c", 0o777)
    assert (tmp_path / "a" / "b" / "c").is_dir()
    mkdir_all(s, "/a/b/c", 0o777)
    assert s.stat("/a/b/c").is_dir()


def test_mkdir_all_file_in_the_way(tmp_path):
    (tmp_path / "f").write_text("")
    with pytest.raises(FileExistsError):
        mkdir_all(RealSystem(tmp_path), "/f", 0o777)


def test_mkdir_all_stops_at_root():
    s = _NoParents()
    with pytest.raises(FileNotFoundError):
        mkdir_all(s, "/a/b", 0o777)
    assert s.calls == ["/a/b", "/a"]


def test_walk_order(tree):
    seen = []
    walk(tree, "/top", lambda path, info, err: seen.append(path))
    assert seen == [
        "/top",
        "/top/a",
        "/top/a/file1",
        "/top/a/sub",
        "/top/a/sub/file2",
        "/top/b",
    ]


def test_walk_skip_dir(tree):
    seen = []
    walk(tree, "/top", _skipping(seen, "/top/a"))
    assert seen == ["/top", "/top/a", "/top/b"]


def test_walk_skip_dir_from_file(tree):
    seen = []
    walk(tree, "/top", _skipping(seen, "/top/a/file1"))
    assert seen == ["/top", "/top/a", "/top/a/file1", "/top/b"]


def test_walk_error_stops(tree):
    def fn(path, info, err):
        if path == "/top/a/file1":
            raise ValueError(path)

    with pytest.raises(ValueError):
        walk(tree, "/top", fn)


def test_walk_missing_root(tmp_path):
    calls = []
    walk(RealSystem(tmp_path), "/missing", lambda p, i, e: calls.append((p, i, e)))
    assert len(calls) == 1
    path, info, err = calls[0]
    assert path == "/missing"
    assert info is None
    assert isinstance(err, FileNotFoundError)