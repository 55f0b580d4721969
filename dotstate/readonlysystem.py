"""A System wrapper that allows reading only."""

from __future__ import annotations

from dotstate.cmdlog import Command
from dotstate.system import FileInfo, NoUpdateSystemMixin, System


class ReadOnlySystem(NoUpdateSystemMixin, System):
    """Passes reads to a wrapped system and refuses every update."""

    def __init__(self, system: System) -> None:
        self._system = system

    def glob(self, pattern: str) -> list[str]:
        return self._system.glob(pattern)

    def idempotent_cmd_combined_output(self, cmd: Command) -> bytes:
        return self._system.idempotent_cmd_combined_output(cmd)

    def idempotent_cmd_output(self, cmd: Command) -> bytes:
        return self._system.idempotent_cmd_output(cmd)

    def lstat(self, name: str) -> FileInfo:
        return self._system.lstat(name)

    def raw_path(self, path: str) -> str:
        return self._system.raw_path(path)

    def read_dir(self, name: str) -> list[FileInfo]:
        return self._system.read_dir(name)

    def read_file(self, name: str) -> bytes:
        return self._system.read_file(name)

    def readlink(self, name: str) -> str:
        return self._system.readlink(name)

    def stat(self, name: str) -> FileInfo:
        return self._system.stat(name)