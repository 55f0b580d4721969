"""Parsing of `git status --ignored --porcelain=v2` output."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_XY = r"([!.?ACDMRU])([!.?ACDMRU]) "
_SUB = r"(N\.\.\.|S[.C][.M][.U]) "
_MODE = r"([0-7]+) "
_HASH = r"([0-9a-f]+) "

_ORDINARY_RX = re.compile(
    r"1 " + _XY + _SUB + _MODE * 3 + _HASH * 2 + r"(.*)"
)
_RENAMED_OR_COPIED_RX = re.compile(
    r"2 " + _XY + _SUB + _MODE * 3 + _HASH * 2 + r"([CR])([0-9]+) (.*?)\t(.*)"
)
_UNMERGED_RX = re.compile(
    r"u " + _XY + _SUB + _MODE * 4 + _HASH * 3 + r"(.*)"
)
_UNTRACKED_RX = re.compile(r"\? (.*)")
_IGNORED_RX = re.compile(r"! (.*)")


class ParseError(ValueError):
    """A line of status output could not be parsed."""

    def __init__(self, text: str) -> None:
        super().__init__(f"{text}: parse error")
        self.text = text


@dataclass
class OrdinaryStatus:
    """Status of a modified file."""

    x: str
    y: str
    sub: str
    mh: int
    mi: int
    mw: int
    hh: str
    hi: str
    path: str


@dataclass
class RenamedOrCopiedStatus:
    """Status of a renamed or copied file."""

    x: str
    y: str
    sub: str
    mh: int
    mi: int
    mw: int
    hh: str
    hi: str
    rc: str
    score: int
    path: str
    orig_path: str


@dataclass
class UnmergedStatus:
    """Status of an unmerged file."""

    x: str
    y: str
    sub: str
    m1: int
    m2: int
    m3: int
    mw: int
    h1: str
    h2: str
    h3: str
    path: str


@dataclass
class UntrackedStatus:
    """Status of an untracked file."""

    path: str


@dataclass
class IgnoredStatus:
    """Status of an ignored file."""

    path: str


@dataclass
class Status:
    """The parsed status of a working tree."""

    ordinary: list[OrdinaryStatus] = field(default_factory=list)
    renamed_or_copied: list[RenamedOrCopiedStatus] = field(default_factory=list)
    unmerged: list[UnmergedStatus] = field(default_factory=list)
    untracked: list[UntrackedStatus] = field(default_factory=list)
    ignored: list[IgnoredStatus] = field(default_factory=list)

    def empty(self) -> bool:
        """Return True if no entries were recorded."""
        return not (
            self.ignored
            or self.ordinary
            or self.renamed_or_copied
            or self.unmerged
            or self.untracked
        )


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _match(rx: re.Pattern[str], text: str) -> re.Match[str]:
    m = rx.fullmatch(text)
    if m is None:
        raise ParseError(text)
    return m


def _octal(value: str) -> int:
    return int(value, 8)


def parse_status_porcelain_v2(output: bytes | str) -> Status | None:
    """Parse porcelain v2 status output; return None if it records nothing.

    Raises ParseError for any line that is not understood.
    """
    text = output.decode("utf-8", "surrogateescape") if isinstance(output, bytes) else output
    status = Status()
    for line in _lines(text):
        kind = line[:1]
        if kind == "1":
            g = _match(_ORDINARY_RX, line).groups()
            status.ordinary.append(
                OrdinaryStatus(
                    x=g[0], y=g[1], sub=g[2],
                    mh=_octal(g[3]), mi=_octal(g[4]), mw=_octal(g[5]),
                    hh=g[6], hi=g[7], path=g[8],
                )
            )
        elif kind == "2":
            g = _match(_RENAMED_OR_COPIED_RX, line).groups()
            status.renamed_or_copied.append(
                RenamedOrCopiedStatus(
                    x=g[0], y=g[1], sub=g[2],
                    mh=_octal(g[3]), mi=_octal(g[4]), mw=_octal(g[5]),
                    hh=g[6], hi=g[7], rc=g[8], score=int(g[9]),
                    path=g[10], orig_path=g[11],
                )
            )
        elif kind == "u":
            g = _match(_UNMERGED_RX, line).groups()
            status.unmerged.append(
                UnmergedStatus(
                    x=g[0], y=g[1], sub=g[2],
                    m1=_octal(g[3]), m2=_octal(g[4]), m3=_octal(g[5]), mw=_octal(g[6]),
                    h1=g[7], h2=g[8], h3=g[9], path=g[10],
                )
            )
        elif kind == "?":
            status.untracked.append(UntrackedStatus(path=_match(_UNTRACKED_RX, line).group(1)))
        elif kind == "!":
            status.ignored.append(IgnoredStatus(path=_match(_IGNORED_RX, line).group(1)))
        elif kind == "#":
            continue
        else:
            raise ParseError(line)
    if status.empty():
        return None
    return status