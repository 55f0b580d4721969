import pytest

from dotstate.gitstatus import (
    IgnoredStatus,
    OrdinaryStatus,
    ParseError,
    RenamedOrCopiedStatus,
    Status,
    UnmergedStatus,
    UntrackedStatus,
    parse_status_porcelain_v2,
)

CASES = [
    (
        "added",
        "1 A. N... 000000 100644 100644 0000000000000000000000000000000000000000 cea5c3500651a923bacd80f960dd20f04f71d509 main.go\n",
        Status(ordinary=[OrdinaryStatus(
            x="A", y=".", sub="N...", mh=0, mi=0o100644, mw=0o100644,
            hh="0000000000000000000000000000000000000000",
            hi="cea5c3500651a923bacd80f960dd20f04f71d509",
            path="main.go",
        )]),
    ),
    (
        "removed",
        "1 D. N... 100644 000000 000000 cea5c3500651a923bacd80f960dd20f04f71d509 0000000000000000000000000000000000000000 main.go\n",
        Status(ordinary=[OrdinaryStatus(
            x="D", y=".", sub="N...", mh=0o100644, mi=0, mw=0,
            hh="cea5c3500651a923bacd80f960dd20f04f71d509",
            hi="0000000000000000000000000000000000000000",
            path="main.go",
        )]),
    ),
    (
        "update",
        "1 .M N... 100644 100644 100644 353dbbb3c29a80fb44d4e26dac111739d25294db 353dbbb3c29a80fb44d4e26dac111739d25294db cmd/git.go\n",
        Status(ordinary=[OrdinaryStatus(
            x=".", y="M", sub="N...", mh=0o100644, mi=0o100644, mw=0o100644,
            hh="353dbbb3c29a80fb44d4e26dac111739d25294db",
            hi="353dbbb3c29a80fb44d4e26dac111739d25294db",
            path="cmd/git.go",
        )]),
    ),
    (
        "renamed",
        "2 R. N... 100644 100644 100644 9d06c86ecba40e1c695e69b55a40843df6a79cef 9d06c86ecba40e1c695e69b55a40843df6a79cef R100 chezmoi_rename.go\tchezmoi.go\n",
        Status(renamed_or_copied=[RenamedOrCopiedStatus(
            x="R", y=".", sub="N...", mh=0o100644, mi=0o100644, mw=0o100644,
            hh="9d06c86ecba40e1c695e69b55a40843df6a79cef",
            hi="9d06c86ecba40e1c695e69b55a40843df6a79cef",
            rc="R", score=100,
            path="chezmoi_rename.go", orig_path="chezmoi.go",
        )]),
    ),
    (
        "renamed_2",
        "2 R. N... 100644 100644 100644 ddbd961d7e4db2bb6615a9e8ce86364fa65e732d ddbd961d7e4db2bb6615a9e8ce86364fa65e732d R100 dot_config/chezmoi/private_chezmoi.toml\tdot_config/chezmoi/chezmoi.toml",
        Status(renamed_or_copied=[RenamedOrCopiedStatus(
            x=chr(82), y=chr(46), sub="N...", mh=0o100644, mi=0o100644, mw=0o100644,
            hh="ddbd961d7e4db2bb6615a9e8ce86364fa65e732d",
            hi="ddbd961d7e4db2bb6615a9e8ce86364fa65e732d",
            rc="R", score=100,
            path="dot_config/chezmoi/private_chezmoi.toml",
            orig_path="dot_config/chezmoi/chezmoi.toml",
        )]),
    ),
    (
        "modified_2",
        "1 .M N... 100644 100644 100644 5716ca5987cbf97d6bb54920bea6adde242d87e6 5716ca5987cbf97d6bb54920bea6adde242d87e6 foo\n",
        Status(ordinary=[OrdinaryStatus(
            x=".", y="M", sub="N...", mh=0o100644, mi=0o100644, mw=0o100644,
            hh="5716ca5987cbf97d6bb54920bea6adde242d87e6",
            hi="5716ca5987cbf97d6bb54920bea6adde242d87e6",
            path="foo",
        )]),
    ),
    ("untracked", "? chezmoi.go\n", Status(untracked=[UntrackedStatus(path="chezmoi.go")])),
    ("ignored", "! chezmoi.go\n", Status(ignored=[IgnoredStatus(path="chezmoi.go")])),
]


@pytest.mark.parametrize(("name", "output", "expected"), CASES, ids=[c[0] for c in CASES])
def test_parse_status_porcelain_v2(name, output, expected):
    actual = parse_status_porcelain_v2(output.encode())
    assert actual == expected
    assert actual.empty() is False


def test_parse_empty_output_returns_none():
    assert parse_status_porcelain_v2(b"") is None


def test_parse_only_headers_returns_none():
    assert parse_status_porcelain_v2(b"# branch.oid abc\n# branch.head main\n") is None


def test_status_empty():
    assert Status().empty() is True


def test_parse_unmerged():
    line = (
        "u UU N... 100644 100644 100644 100644 "
        "aaaaaaaa bbbbbbbb cccccccc conflict.txt\n"
    )
    actual = parse_status_porcelain_v2(line)
    assert actual == Status(unmerged=[UnmergedStatus(
        x="U", y="U", sub="N...",
        m1=0o100644, m2=0o100644, m3=0o100644, mw=0o100644,
        h1="aaaaaaaa", h2="bbbbbbbb", h3="cccccccc", path="conflict.txt",
    )])


def test_parse_multiple_lines():
    actual = parse_status_porcelain_v2(b"? a\n? b\n! c\n")
    assert [u.path for u in actual.untracked] == ["a", "b"]
    assert [i.path for i in actual.ignored] == ["c"]


def test_parse_error_unknown_kind():
    with pytest.raises(ParseError) as excinfo:
        parse_status_porcelain_v2(b"x nonsense\n")
    assert str(excinfo.value) == "x nonsense: parse error"


def test_parse_error_malformed_ordinary():
    with pytest.raises(ParseError):
        parse_status_porcelain_v2(b"1 ZZ N... 1 2 3\n")