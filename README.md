# dotstate

Building blocks for tools that manage dotfiles and other per-user
configuration: a common interface over filesystems and archives, a parser
for git status output, nested-data merging and logged command execution.

It needs nothing beyond the Python standard library (Python 3.10 or later).

## What is inside

- `dotstate.system` — the abstract `System` class that every backend
  follows, with paths given as absolute, slash-separated strings and errors
  raised as `OSError` subclasses (`FileNotFoundError` for missing entries).
  Also `FileInfo` (name, mode, size, mtime, with `is_dir`, `is_regular`,
  `is_symlink` and `FileInfo.from_stat`), the `EmptySystemMixin` (reads find
  nothing) and `NoUpdateSystemMixin` (every change raises
  `UpdateNotAllowedError`) helpers, and two functions that work on any
  system:
  - `mkdir_all(system, abs_path, perm)` creates a directory and any missing
    parents;
  - `walk(system, root_abs_path, walk_fn)` visits a tree in lexical order,
    calling `walk_fn(path, info, error)`; raising `SkipDir` skips a
    directory.
- `dotstate.realsystem` — `RealSystem(root=None)`, a system on the real
  filesystem. With a `root`, absolute paths are taken to lie beneath that
  directory. Without one, files are written atomically through a temporary
  file and symlinks are replaced atomically. Permissions are set before
  contents are written. `glob` understands `**`, `*`, `?`, `[...]` and
  `{a,b}`. `run_script` writes the script to a private temporary file and
  runs it in the given directory, or in its nearest existing ancestor.
- `dotstate.readonlysystem` — `ReadOnlySystem`, which passes reads to a
  wrapped system and refuses every change with `UpdateNotAllowedError`.
- `dotstate.tarsystem` — `TarReaderSystem(tar, root_abs_path, strip_components)`,
  a read-only system built from an open `tarfile.TarFile` (directories,
  regular files and symlinks; other entry types raise `ValueError`), and
  `TarWriterSystem(fileobj, header_template)`, which records `mkdir`,
  `write_file`, `write_symlink` and `run_script` as tar entries.
- `dotstate.zipsystem` — `ZipWriterSystem(fileobj, modified)`, which records
  the same operations as zip entries, deflating file contents and stamping
  every entry with `modified` (default: now).
- `dotstate.gitstatus` — `parse_status_porcelain_v2` for the output of
  `git status --ignored --porcelain=v2`. It returns a `Status` holding
  lists of `OrdinaryStatus`, `RenamedOrCopiedStatus`, `UnmergedStatus`,
  `UntrackedStatus` and `IgnoredStatus`, or `None` when there is nothing to
  report, and raises `ParseError` (a `ValueError`) on a malformed line.
- `dotstate.recursivemerge` — `recursive_merge(dest, source)`, which merges
  nested dictionaries into `dest` in place, copying what it takes from
  `source` so the two never share inner dictionaries.
- `dotstate.cmdlog` — `Command` (arguments, working directory, environment
  and streams) and `log_cmd_output`, `log_cmd_combined_output` and
  `log_cmd_run`, which run a command, log it to a `logging.Logger` (the
  details go in the record's `fields` attribute) and raise
  `subprocess.CalledProcessError` when it fails. `first_few_bytes` shortens
  output for logging.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Examples

Merging configuration data:

```python
from dotstate.recursivemerge import recursive_merge

dest = {"a": 1, "c": {"d": 4, "e": 5}}
recursive_merge(dest, {"c": {"e": 50, "f": 60}})
# dest == {"a": 1, "c": {"d": 4, "e": 50, "f": 60}}
```

Parsing git status:

```python
from dotstate.gitstatus import parse_status_porcelain_v2

status = parse_status_porcelain_v2(b"? notes.txt\n")
print(status.untracked[0].path)  # notes.txt
```

Writing a tar archive through the system interface:

```python
import io
import tarfile

from dotstate.tarsystem import TarWriterSystem

buffer = io.BytesIO()
with TarWriterSystem(buffer, tarfile.TarInfo()) as system:
    system.mkdir(".dir", 0o777)
    system.write_file(".dir/file", b"# contents\n", 0o666)
    system.write_symlink(".dir/file", "link")
```

Reading it back, dropping nothing and placing entries under `/home/user`:

```python
buffer.seek(0)
with tarfile.open(fileobj=buffer) as tar:
    reader = TarReaderSystem(tar, "/home/user")
print(reader.read_file("/home/user/.dir/file"))
```

## Commands

`dotstate-lint-whitespace [root]` walks a directory (the current one by
default) and reports text files with CRLF line endings, trailing whitespace
or a missing final newline. It exits with status 1 if it finds any problem.

```
dotstate-lint-whitespace
```

`dotstate-docs-gen` reads a Markdown document on standard input and writes
a page with a front-matter `title` (`--shorttitle`), replaces the first line
with a heading (`--longtitle`), drops the table of contents that follows a
`<!--- toc --->` marker up to the next blank line, and rewrites links to
upper-case `docs/NAME.md` pages into `/docs/name/` links. `--debug` traces
each line on standard error.

```
dotstate-docs-gen --help
```

## What it does not do

There is no command that applies or adds dotfiles, no reading of a source
directory of dotfile templates, and no persistent storage of what was last
written or which scripts have run. The package supplies the systems, parsers
and helpers such a tool would be built from.