"""A System that acts on the real filesystem and runs real commands."""

from __future__ import annotations

import contextlib
import fnmatch
import logging
import os
import posixpath
import re
import shutil
import stat
import sys
import tempfile
from typing import IO, Any, Iterator

from dotstate.cmdlog import Command, log_cmd_combined_output, log_cmd_output, log_cmd_run
from dotstate.system import FileInfo, System

_WINDOWS = sys.platform == "win32"
_log = logging.getLogger(__name__)
_MAGIC = set("*?[{")


def _parent(path: str) -> str:
    return posixpath.dirname(path) or "."


def _name(path: str) -> str:
    return posixpath.basename(path.rstrip("/")) or path or "."


def _expand_braces(pattern: str) -> list[str]:
    m = re.search(r"\{([^{}]*)\}", pattern)
    if m is None:
        return [pattern]
    expanded: list[str] = []
    for alternative in m.group(1).split(","):
        expanded.extend(_expand_braces(pattern[: m.start()] + alternative + pattern[m.end():]))
    return expanded


def _component_matches(name: str, component: str) -> bool:
    return any(
        fnmatch.fnmatchcase(name, alternative.replace("[^", "[!"))
        for alternative in _expand_braces(component)
    )


def _inherited(stream: Any) -> IO[Any] | None:
    try:
        stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None
    return stream


class RealSystem(System):
    """A System on the operating system's filesystem.

    If root is given, absolute paths are taken to lie beneath that directory.
    """

    def __init__(self, root: str | os.PathLike[str] | None = None) -> None:
        self._root = None if root is None else os.fspath(root)

    def _real(self, path: str) -> str:
        if self._root is None:
            return path
        return os.path.join(self._root, *[part for part in path.split("/") if part])

    def chmod(self, name: str, mode: int) -> None:
        if _WINDOWS:
            return
        os.chmod(self._real(name), mode)

    def glob(self, pattern: str) -> list[str]:
        base = "/" if pattern.startswith("/") else ""
        parts = [part for part in pattern.split("/") if part]
        return list(dict.fromkeys(self._glob(base, parts)))

    def _glob(self, base: str, parts: list[str]) -> Iterator[str]:
        if not parts:
            yield base
            return
        head, rest = parts[0], parts[1:]
        if head == "**":
            yield from self._glob(base, rest)
            for name in self._list(base):
                child = self._join(base, name)
                real = self._real(child)
                if os.path.isdir(real) and not os.path.islink(real):
                    yield from self._glob(child, parts)
        elif not _MAGIC.intersection(head):
            child = self._join(base, head)
            if os.path.lexists(self._real(child)):
                yield from self._glob(child, rest)
        else:
            for name in self._list(base):
                if _component_matches(name, head):
                    yield from self._glob(self._join(base, name), rest)

    @staticmethod
    def _join(base: str, name: str) -> str:
        return posixpath.join(base, name) if base else name

    def _list(self, base: str) -> list[str]:
        try:
            return sorted(os.listdir(self._real(base) or "."))
        except OSError:
            return []

    def idempotent_cmd_combined_output(self, cmd: Command) -> bytes:
        return log_cmd_combined_output(_log, cmd)

    def idempotent_cmd_output(self, cmd: Command) -> bytes:
        return log_cmd_output(_log, cmd)

    def lstat(self, name: str) -> FileInfo:
        return FileInfo.from_stat(_name(name), os.lstat(self._real(name)))

    def mkdir(self, name: str, perm: int) -> None:
        os.mkdir(self._real(name), perm)

    def raw_path(self, path: str) -> str:
        return self._real(path)

    def read_dir(self, name: str) -> list[FileInfo]:
        with os.scandir(self._real(name)) as it:
            entries = [
                FileInfo.from_stat(entry.name, entry.stat(follow_symlinks=False))
                for entry in it
            ]
        return sorted(entries, key=lambda info: info.name)

    def read_file(self, name: str) -> bytes:
        with open(self._real(name), "rb") as f:
            return f.read()

    def readlink(self, name: str) -> str:
        linkname = os.readlink(self._real(name))
        if _WINDOWS:
            linkname = linkname.replace("\\", "/")
        return linkname

    def remove_all(self, name: str) -> None:
        real = self._real(name)
        try:
            st = os.lstat(real)
        except FileNotFoundError:
            return
        if stat.S_ISDIR(st.st_mode):
            shutil.rmtree(real)
        else:
            os.remove(real)

    def rename(self, oldpath: str, newpath: str) -> None:
        os.replace(self._real(oldpath), self._real(newpath))

    def run_cmd(self, cmd: Command) -> None:
        log_cmd_run(_log, cmd)

    def run_script(self, scriptname: str, dir: str, data: bytes) -> None:
        # Keep the script's name at the end to preserve any file extension.
        fd, script_path = tempfile.mkstemp(suffix="." + posixpath.basename(scriptname))
        try:
            with os.fdopen(fd, "wb") as f:
                # Make the script private before writing any secrets into it.
                if not _WINDOWS:
                    os.fchmod(f.fileno(), 0o700)
                f.write(data)
            cmd = Command(
                args=[script_path],
                dir=self._script_dir(dir),
                stdin=_inherited(sys.stdin),
                stdout=_inherited(sys.stdout),
                stderr=_inherited(sys.stderr),
            )
            self.run_cmd(cmd)
        finally:
            with contextlib.suppress(FileNotFoundError):
                os.remove(script_path)

    def _script_dir(self, dir: str) -> str:
        # A before_ script's directory may not exist yet, so use the nearest
        # existing ancestor directory.
        while True:
            try:
                info = self.stat(dir)
            except FileNotFoundError:
                parent = _parent(dir)
                if parent == dir:
                    raise
                dir = parent
                continue
            if info.is_dir():
                return self.raw_path(dir)
            dir = _parent(dir)

    def stat(self, name: str) -> FileInfo:
        return FileInfo.from_stat(_name(name), os.stat(self._real(name)))

    def write_file(self, filename: str, data: bytes, perm: int) -> None:
        real = self._real(filename)
        if _WINDOWS:
            with open(real, "wb") as f:
                f.write(data)
        elif self._root is None:
            self._write_atomically(real, data, perm)
        else:
            self._write_in_place(real, data, perm)

    @staticmethod
    def _write_atomically(real: str, data: bytes, perm: int) -> None:
        fd, temp_path = tempfile.mkstemp(dir=os.path.dirname(real) or ".", prefix=".")
        try:
            with os.fdopen(fd, "wb") as f:
                os.fchmod(f.fileno(), perm)
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, real)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.remove(temp_path)
            raise

    @staticmethod
    def _write_in_place(real: str, data: bytes, perm: int) -> None:
        fd = os.open(real, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, perm)
        with os.fdopen(fd, "wb") as f:
            # Set permissions after truncation and before writing, in case the
            # old or the new contents are private.
            os.fchmod(f.fileno(), perm)
            f.write(data)

    def write_symlink(self, oldname: str, newname: str) -> None:
        real = self._real(newname)
        if self._root is None and not _WINDOWS:
            directory = os.path.dirname(real) or "."
            temp_path = os.path.join(directory, f".{os.path.basename(real)}.{os.getpid()}.tmp")
            with contextlib.suppress(FileNotFoundError):
                os.remove(temp_path)
            os.symlink(oldname, temp_path)
            try:
                os.replace(temp_path, real)
            except BaseException:
                with contextlib.suppress(FileNotFoundError):
                    os.remove(temp_path)
                raise
            return
        self.remove_all(newname)
        os.symlink(oldname.replace("/", "\\") if _WINDOWS else oldname, real)