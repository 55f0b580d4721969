import io

import pytest

from dotstate.docsgen import convert, main, rewrite_links

BASE = "https://example.com/owner/project/blob/main/docs/"

PAGE = [
    "# Original title",
    "Intro text",
    "<!--- toc --->",
    "* [Section](#section)",
    "",
    "## Section",
    f"See {BASE}QUICKSTART.md for more.",
]


@pytest.mark.parametrize(
    "name, expected",
    [("HOWTO", "/docs/how-to/"), ("QUICKSTART", "/docs/quick-start/"), ("FAQ", "/docs/faq/")],
)
def test_rewrite_links(name, expected):
    assert rewrite_links(f"see {BASE}{name}.md here") == f"see {expected} here"


def test_rewrite_links_leaves_other_links():
    text = f"see {BASE}lower.md and https://example.com/page"
    assert rewrite_links(text) == text


def test_convert():
    output = "".join(convert(PAGE, "Short", "Long title", False))
    assert output == (
        '---\ntitle: "Short"\n---\n\n'
        "# Long title\n\n"
        "## Section\n"
        "See /docs/quick-start/ for more.\n"
    )


def test_convert_strips_line_endings():
    lines = [line + "\r\n" for line in PAGE]
    assert "".join(convert(lines, "S", "L")) == "".join(convert(PAGE, "S", "L"))


def test_convert_empty_input_has_front_matter_only():
    assert "".join(convert([], "Short", "Long")) == '---\ntitle: "Short"\n---\n\n'


def test_convert_debug(capsys):
    list(convert(PAGE, "S", "L", True))
    err = capsys.readouterr().err
    assert err.splitlines()[0] == 'replace-title: "# Original title"'


def test_main(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("\n".join(PAGE) + "\n"))
    assert main(["-shorttitle", "Short", "-longtitle", "Long title"]) == 0
    assert capsys.readouterr().out == "".join(convert(PAGE, "Short", "Long title"))