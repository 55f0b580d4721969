"""Systems that read from and write to TAR archives."""

from __future__ import annotations

import copy
import errno
import io
import os
import posixpath
import stat
import tarfile
from typing import IO, Any

from dotstate.system import EmptySystemMixin, FileInfo, NoUpdateSystemMixin, System

_TYPE_MODES = {
    tarfile.DIRTYPE: stat.S_IFDIR,
    tarfile.REGTYPE: stat.S_IFREG,
    tarfile.AREGTYPE: stat.S_IFREG,
    tarfile.SYMTYPE: stat.S_IFLNK,
}


def _join(root: str, name: str) -> str:
    parts = [part for part in (root, name) if part]
    if not parts:
        return ""
    return posixpath.normpath(posixpath.join(*parts))


def _not_exist(name: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), name)


def _invalid(name: str) -> OSError:
    return OSError(errno.EINVAL, os.strerror(errno.EINVAL), name)


class TarReaderSystem(EmptySystemMixin, NoUpdateSystemMixin, System):
    """A read-only system holding the entries of a TAR archive.

    Entry names lose their first strip_components components and are placed
    beneath root_abs_path. Entries with too few components are skipped.
    """

    def __init__(
        self,
        tar: tarfile.TarFile,
        root_abs_path: str = "",
        strip_components: int = 0,
    ) -> None:
        self._file_infos: dict[str, FileInfo] = {}
        self._contents: dict[str, bytes] = {}
        self._linknames: dict[str, str] = {}
        for member in tar:
            name = member.name.rstrip("/")
            if strip_components > 0:
                components = name.split("/")
                if len(components) <= strip_components:
                    continue
                name = "/".join(components[strip_components:])
            abs_path = _join(root_abs_path, name)

            type_mode = _TYPE_MODES.get(member.type)
            if type_mode is None:
                flag = chr(member.type[0]) if member.type else ""
                raise ValueError(f"unsupported typeflag '{flag}'")
            self._file_infos[abs_path] = FileInfo(
                name=posixpath.basename(name),
                mode=type_mode | (member.mode & 0o7777),
                size=member.size,
                mtime=float(member.mtime),
            )
            if type_mode == stat.S_IFREG:
                extracted = tar.extractfile(member)
                self._contents[abs_path] = extracted.read() if extracted is not None else b""
            elif type_mode == stat.S_IFLNK:
                self._linknames[abs_path] = member.linkname

    def file_infos(self) -> dict[str, FileInfo]:
        """Return the FileInfo of every entry, keyed by absolute path."""
        return self._file_infos

    def lstat(self, name: str) -> FileInfo:
        try:
            return self._file_infos[name]
        except KeyError:
            raise _not_exist(name) from None

    def read_file(self, name: str) -> bytes:
        if name in self._contents:
            return self._contents[name]
        if name in self._file_infos:
            raise _invalid(name)
        raise _not_exist(name)

    def readlink(self, name: str) -> str:
        if name in self._linknames:
            return self._linknames[name]
        if name in self._file_infos:
            raise _invalid(name)
        raise _not_exist(name)


class TarWriterSystem(EmptySystemMixin, NoUpdateSystemMixin, System):
    """A system whose directories, files, scripts and symlinks go into a TAR archive.

    Each header starts as a copy of header_template. The underlying file
    object is not closed by close().
    """

    def __init__(self, fileobj: IO[bytes], header_template: tarfile.TarInfo | None = None) -> None:
        if header_template is None:
            header_template = tarfile.TarInfo()
            header_template.mode = 0
        self._template = header_template
        self._tar = tarfile.open(fileobj=fileobj, mode="w")

    def close(self) -> None:
        """Finish the archive."""
        self._tar.close()

    def __enter__(self) -> "TarWriterSystem":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _header(self, name: str, type: bytes) -> tarfile.TarInfo:
        info = copy.copy(self._template)
        info.pax_headers = dict(self._template.pax_headers)
        info.name = name
        info.type = type
        info.size = 0
        info.linkname = ""
        return info

    def mkdir(self, name: str, perm: int) -> None:
        info = self._header(name.rstrip("/") + "/", tarfile.DIRTYPE)
        info.mode = perm
        self._tar.addfile(info)

    def run_script(self, scriptname: str, dir: str, data: bytes) -> None:
        self.write_file(scriptname, data, 0o700)

    def write_file(self, filename: str, data: bytes, perm: int) -> None:
        info = self._header(filename, tarfile.REGTYPE)
        info.size = len(data)
        info.mode = perm
        self._tar.addfile(info, io.BytesIO(data))

    def write_symlink(self, oldname: str, newname: str) -> None:
        info = self._header(newname, tarfile.SYMTYPE)
        info.linkname = oldname
        self._tar.addfile(info)