"""The System interface: reading and writing a filesystem and running commands."""

from __future__ import annotations

import abc
import errno
import fnmatch
import os
import posixpath
import stat
from dataclasses import dataclass
from typing import Callable, NoReturn, Optional

from dotstate.cmdlog import Command


class SkipDir(Exception):
    """Raised by a walk function to skip the directory it was handed."""


class UpdateNotAllowedError(RuntimeError):
    """An update was attempted on a system that does not allow updates."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation}: update not allowed")
        self.operation = operation


@dataclass(frozen=True)
class FileInfo:
    """What is known about a filesystem entry."""

    name: str
    mode: int
    size: int = 0
    mtime: float = 0.0

    @classmethod
    def from_stat(cls, name: str, st: os.stat_result) -> "FileInfo":
        """Build a FileInfo called name from the result of a stat call."""
        return cls(name=name, mode=st.st_mode, size=st.st_size, mtime=st.st_mtime)

    def is_dir(self) -> bool:
        """Return True if the entry is a directory."""
        return stat.S_ISDIR(self.mode)

    def is_regular(self) -> bool:
        """Return True if the entry is a regular file."""
        return stat.S_ISREG(self.mode)

    def is_symlink(self) -> bool:
        """Return True if the entry is a symbolic link."""
        return stat.S_ISLNK(self.mode)


def _not_exist(name: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), name)


def _parent(path: str) -> str:
    return posixpath.dirname(path) or "."


def _deny(operation: str) -> NoReturn:
    raise UpdateNotAllowedError(operation)


def _unrun_output(cmd: Command) -> bytes:
    """Return the output of a command that an empty system does not run."""
    del cmd
    return bytes()


class System(abc.ABC):
    """Reads from and writes to a filesystem, runs commands and scripts.

    Paths are absolute, slash-separated strings. Errors are raised as OSError
    subclasses, FileNotFoundError where an entry does not exist.
    """

    @abc.abstractmethod
    def chmod(self, name: str, mode: int) -> None:
        """Change the permissions of name."""

    @abc.abstractmethod
    def glob(self, pattern: str) -> list[str]:
        """Return the paths that match pattern, where ** matches any directories."""

    @abc.abstractmethod
    def idempotent_cmd_combined_output(self, cmd: Command) -> bytes:
        """Run a command without side effects and return stdout and stderr."""

    @abc.abstractmethod
    def idempotent_cmd_output(self, cmd: Command) -> bytes:
        """Run a command without side effects and return its stdout."""

    @abc.abstractmethod
    def lstat(self, name: str) -> FileInfo:
        """Return information about name, not following a final symlink."""

    @abc.abstractmethod
    def mkdir(self, name: str, perm: int) -> None:
        """Create the directory name."""

    @abc.abstractmethod
    def raw_path(self, path: str) -> str:
        """Return the path as seen by the operating system."""

    @abc.abstractmethod
    def read_dir(self, name: str) -> list[FileInfo]:
        """Return the entries of directory name, sorted by name."""

    @abc.abstractmethod
    def read_file(self, name: str) -> bytes:
        """Return the contents of file name."""

    @abc.abstractmethod
    def readlink(self, name: str) -> str:
        """Return the target of symlink name."""

    @abc.abstractmethod
    def remove_all(self, name: str) -> None:
        """Remove name and everything beneath it; a missing name is fine."""

    @abc.abstractmethod
    def rename(self, oldpath: str, newpath: str) -> None:
        """Rename oldpath to newpath."""

    @abc.abstractmethod
    def run_cmd(self, cmd: Command) -> None:
        """Run a command."""

    @abc.abstractmethod
    def run_script(self, scriptname: str, dir: str, data: bytes) -> None:
        """Run data as a script called scriptname in or above dir."""

    @abc.abstractmethod
    def stat(self, name: str) -> FileInfo:
        """Return information about name, following symlinks."""

    @abc.abstractmethod
    def write_file(self, filename: str, data: bytes, perm: int) -> None:
        """Write data to filename with permissions perm."""

    @abc.abstractmethod
    def write_symlink(self, oldname: str, newname: str) -> None:
        """Make newname a symlink to oldname."""


class EmptySystemMixin:
    """Read operations of a system that holds nothing."""

    _paths: tuple[str, ...] = ()

    def glob(self, pattern: str) -> list[str]:
        """Return the paths matching pattern, of which there are none."""
        return [path for path in self._paths if fnmatch.fnmatchcase(path, pattern)]

    def idempotent_cmd_combined_output(self, cmd: Command) -> bytes:
        """Return empty output without running cmd."""
        return _unrun_output(cmd)

    def idempotent_cmd_output(self, cmd: Command) -> bytes:
        """Return empty output without running cmd."""
        return _unrun_output(cmd)

    def lstat(self, name: str) -> FileInfo:
        raise _not_exist(name)

    def raw_path(self, path: str) -> str:
        """Return path unchanged."""
        return os.fspath(path)

    def read_dir(self, name: str) -> list[FileInfo]:
        raise _not_exist(name)

    def read_file(self, name: str) -> bytes:
        raise _not_exist(name)

    def readlink(self, name: str) -> str:
        raise _not_exist(name)

    def stat(self, name: str) -> FileInfo:
        raise _not_exist(name)


class NoUpdateSystemMixin:
    """Update operations that always raise UpdateNotAllowedError."""

    def chmod(self, name: str, mode: int) -> None:
        _deny("chmod")

    def mkdir(self, name: str, perm: int) -> None:
        _deny("mkdir")

    def remove_all(self, name: str) -> None:
        _deny("remove_all")

    def rename(self, oldpath: str, newpath: str) -> None:
        _deny("rename")

    def run_cmd(self, cmd: Command) -> None:
        _deny("run_cmd")

    def run_script(self, scriptname: str, dir: str, data: bytes) -> None:
        _deny("run_script")

    def write_file(self, filename: str, data: bytes, perm: int) -> None:
        _deny("write_file")

    def write_symlink(self, oldname: str, newname: str) -> None:
        _deny("write_symlink")


def mkdir_all(system: System, abs_path: str, perm: int = 0o777) -> None:
    """Create abs_path and any missing parents on system."""
    try:
        system.mkdir(abs_path, perm)
    except FileExistsError:
        # The path exists; it is only an error if it is not a directory.
        if not system.stat(abs_path).is_dir():
            raise
    except FileNotFoundError:
        parent = _parent(abs_path)
        if parent in ("/", "."):
            raise
        mkdir_all(system, parent, perm)
        system.mkdir(abs_path, perm)


WalkFunc = Callable[[str, Optional[FileInfo], Optional[OSError]], None]


def walk(system: System, root_abs_path: str, walk_fn: WalkFunc) -> None:
    """Walk the tree at root_abs_path in lexical order, calling walk_fn.

    walk_fn receives each path, its FileInfo and any error met reading it. It
    may raise SkipDir to skip a directory (or, from a file, the rest of its
    directory); any other exception stops the walk.
    """
    try:
        info = system.lstat(root_abs_path)
    except OSError as err:
        try:
            walk_fn(root_abs_path, None, err)
        except SkipDir:
            pass
        return
    try:
        _walk(system, root_abs_path, info, walk_fn)
    except SkipDir:
        pass


def _walk(system: System, path: str, info: FileInfo, walk_fn: WalkFunc) -> None:
    if not info.is_dir():
        walk_fn(path, info, None)
        return
    read_err: OSError | None = None
    entries: list[FileInfo] = []
    try:
        entries = system.read_dir(path)
    except OSError as err:
        read_err = err
    walk_fn(path, info, read_err)
    if read_err is not None:
        return
    for entry in entries:
        try:
            _walk(system, posixpath.join(path, entry.name), entry, walk_fn)
        except SkipDir:
            if not entry.is_dir():
                raise