"""A system that writes to a ZIP archive."""

from __future__ import annotations

import stat
import zipfile
from datetime import datetime, timezone
from typing import IO, Any

from dotstate.system import EmptySystemMixin, NoUpdateSystemMixin, System

_UNIX = 3
_MSDOS_DIR = 0x10
_EARLIEST = (1980, 1, 1, 0, 0, 0)


class ZipWriterSystem(EmptySystemMixin, NoUpdateSystemMixin, System):
    """A system whose directories, files, scripts and symlinks go into a ZIP archive.

    Every entry carries the modification time modified, which defaults to now.
    """

    def __init__(self, fileobj: IO[bytes], modified: datetime | None = None) -> None:
        if modified is None:
            modified = datetime.now(timezone.utc)
        self._date_time = max(tuple(modified.timetuple()[:6]), _EARLIEST)
        self._zip = zipfile.ZipFile(fileobj, "w")

    def close(self) -> None:
        """Finish the archive."""
        self._zip.close()

    def __enter__(self) -> "ZipWriterSystem":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _info(self, name: str, mode: int, compress_type: int) -> zipfile.ZipInfo:
        info = zipfile.ZipInfo(name, date_time=self._date_time)
        info.create_system = _UNIX
        info.external_attr = mode << 16
        if stat.S_ISDIR(mode):
            info.external_attr |= _MSDOS_DIR
        info.compress_type = compress_type
        return info

    def mkdir(self, name: str, perm: int) -> None:
        self._zip.writestr(self._info(name, stat.S_IFDIR | perm, zipfile.ZIP_STORED), b"")

    def run_script(self, scriptname: str, dir: str, data: bytes) -> None:
        self.write_file(scriptname, data, 0o700)

    def write_file(self, filename: str, data: bytes, perm: int) -> None:
        info = self._info(filename, stat.S_IFREG | perm, zipfile.ZIP_DEFLATED)
        self._zip.writestr(info, data)

    def write_symlink(self, oldname: str, newname: str) -> None:
        info = self._info(newname, stat.S_IFLNK, zipfile.ZIP_STORED)
        self._zip.writestr(info, oldname.encode())