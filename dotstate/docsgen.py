"""Converts a documentation page into a website content page with front matter."""

from __future__ import annotations

import argparse
import enum
import json
import posixpath
import re
import sys
from typing import Iterable, Iterator

_LINK_RX = re.compile(r"https://[^\s()<>\[\]\"']+?/blob/[^\s/]+/docs/[A-Z]+\.md")
_PAGE_RENAMES = {
    "HOWTO": "how-to",
    "QUICKSTART": "quick-start",
}
_TOC_MARKER = "<!--- toc --->"


class _State(enum.Enum):
    REPLACE_TITLE = "replace-title"
    FIND_TOC = "find-toc"
    SKIP_TOC = "skip-toc"
    COPY_CONTENT = "copy-content"


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _site_link(match: re.Match[str]) -> str:
    name = posixpath.splitext(posixpath.basename(match.group(0)))[0]
    return f"/docs/{_PAGE_RENAMES.get(name, name.lower())}/"


def rewrite_links(text: str) -> str:
    """Replace links to upper-case docs pages in a repository with site links."""
    return _LINK_RX.sub(_site_link, text)


def _strip_newline(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def convert(
    lines: Iterable[str],
    short_title: str = "",
    long_title: str = "",
    debug: bool = False,
) -> Iterator[str]:
    """Yield the content page for a documentation page given as lines.

    The first line is replaced by long_title, the table of contents that
    follows the toc marker up to the next blank line is dropped, and the rest
    is copied with its links rewritten.
    """
    yield f"---\ntitle: {_quote(short_title)}\n---\n\n"
    state = _State.REPLACE_TITLE
    for raw_line in lines:
        line = _strip_newline(raw_line)
        if debug:
            print(f"{state.value}: {_quote(line)}", file=sys.stderr)
        if state is _State.REPLACE_TITLE:
            yield f"# {long_title}\n\n"
            state = _State.FIND_TOC
        elif state is _State.FIND_TOC:
            if line == _TOC_MARKER:
                state = _State.SKIP_TOC
        elif state is _State.SKIP_TOC:
            if line == "":
                state = _State.COPY_CONTENT
        else:
            yield rewrite_links(line) + "\n"


def main(argv: list[str] | None = None) -> int:
    """Convert standard input to a content page on standard output."""
    parser = argparse.ArgumentParser(prog="docsgen", description="Generate a docs content page.")
    parser.add_argument("-debug", "--debug", action="store_true", help="debug")
    parser.add_argument("-shorttitle", "--shorttitle", default="", help="short title")
    parser.add_argument("-longtitle", "--longtitle", default="", help="long title")
    args = parser.parse_args(argv)
    try:
        for chunk in convert(sys.stdin, args.shorttitle, args.longtitle, args.debug):
            sys.stdout.write(chunk)
    except OSError as err:
        print(err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())