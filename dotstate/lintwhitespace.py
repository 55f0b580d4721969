"""Checks text files for CRLF line endings, trailing whitespace and missing final newlines."""

from __future__ import annotations

import argparse
import os
import re
import stat
import sys

_IGNORE_RXS = [
    re.compile(pattern)
    for pattern in (
        r"\.svg\Z",
        r"\A\.devcontainer/library-scripts\Z",
        r"\A\.git\Z",
        r"\Aassets/scripts/install\.ps1\Z",
        r"\Acompletions/[^/]*\.ps1\Z",
        r"\A[^/]+\.io/(?:public|resources|themes/book)\Z",
    )
]
# Whitespace as understood by the line check: tab, newline, form feed, CR, space.
_TRAILING_WHITESPACE_RX = re.compile(rb"[\t\n\f\r ]+\Z")

_BINARY_BYTES = (
    frozenset(range(0x00, 0x09))
    | {0x0B}
    | frozenset(range(0x0E, 0x1B))
    | frozenset(range(0x1C, 0x20))
)
_TEXT_BOMS = (b"\xfe\xff", b"\xff\xfe", b"\xef\xbb\xbf")
_NON_TEXT_SIGNATURES = (b"%PDF-", b"%!PS-Adobe-", b"GIF87a", b"GIF89a")
_SNIFF_LEN = 512


def _is_text(data: bytes) -> bool:
    head = data[:_SNIFF_LEN]
    if head.startswith(_TEXT_BOMS):
        return True
    if head.startswith(_NON_TEXT_SIGNATURES):
        return False
    return not any(byte in _BINARY_BYTES for byte in head)


def _ignored(rel_path: str) -> bool:
    return any(rx.search(rel_path) for rx in _IGNORE_RXS)


def lint_file(filename: str | os.PathLike[str]) -> list[str]:
    """Return the whitespace problems found in a text file; binary files have none."""
    name = os.fspath(filename)
    with open(name, "rb") as f:
        data = f.read()
    if not _is_text(data):
        return []
    lines = data.split(b"\n")
    problems: list[str] = []
    for number, line in enumerate(lines, 1):
        if line.endswith(b"\r"):
            problems.append(f"{name}:{number}: CRLF line ending")
        elif _TRAILING_WHITESPACE_RX.search(line):
            problems.append(f"{name}:{number}: trailing whitespace")
    if data and lines[-1]:
        problems.append(f"{name}: no newline at end of file")
    return problems


def find_files(root: str | os.PathLike[str] = ".") -> list[str]:
    """Return the sorted, slash-separated paths relative to root of files to lint."""
    root = os.fspath(root)
    found: list[str] = []
    walk_errors: list[OSError] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=walk_errors.append):
        if walk_errors:
            break
        rel_dir = os.path.relpath(dirpath, root)
        rel_dir = "" if rel_dir == "." else rel_dir.replace(os.sep, "/")

        def rel(name: str) -> str:
            return f"{rel_dir}/{name}" if rel_dir else name

        dirnames[:] = sorted(d for d in dirnames if not _ignored(rel(d)))
        for filename in filenames:
            rel_path = rel(filename)
            if _ignored(rel_path):
                continue
            if stat.S_ISREG(os.lstat(os.path.join(dirpath, filename)).st_mode):
                found.append(rel_path)
    if walk_errors:
        raise walk_errors[0]
    return sorted(found)


def main(argv: list[str] | None = None) -> int:
    """Lint every file beneath a directory, print problems, return an exit code."""
    parser = argparse.ArgumentParser(
        prog="lint-whitespace",
        description="Report whitespace problems in text files.",
    )
    parser.add_argument("root", nargs="?", default=".", help="directory to check")
    args = parser.parse_args(argv)

    problems: list[str] = []
    try:
        rel_paths = find_files(args.root)
    except OSError as err:
        print(err)
        return 1
    for rel_path in rel_paths:
        path = rel_path if args.root == "." else os.path.join(args.root, rel_path)
        try:
            problems.extend(lint_file(path))
        except OSError as err:
            problems.append(str(err))
    for problem in problems:
        print(problem)
    return 1 if problems else 0


if __name__ == "__main__":
    sys.exit(main())