"""walk.py - File tree walker and marker line search.

The walker yields regular files under a root directory in sorted order,
skipping VCS metadata directories and anything matched by the root
``.gitignore`` / ``.ignore`` files or by extra exclude globs.  Ignore
patterns use git's wildmatch rules via :class:`pathspec.GitIgnoreSpec`.

The line search reads one file at a time and yields only the lines that
contain the marker, each paired with the absolute byte offset of its first
byte.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from pathspec import GitIgnoreSpec

from codesync.kmp import CODESYNC_MATCHER, Matcher

logger = logging.getLogger(__name__)

_SKIP_DIRS = {".git", ".hg", ".svn"}
_IGNORE_FILES = (".gitignore", ".ignore")

# Files with a NUL byte in this prefix are treated as binary and skipped.
_BINARY_SNIFF_BYTES = 8192


def read_ignore_lines(root: Path) -> list[str]:
    """Concatenated lines of the ignore files at *root*, in precedence order."""
    lines: list[str] = []
    for name in _IGNORE_FILES:
        path = root / name
        if path.is_file():
            lines.extend(path.read_text(encoding="utf-8", errors="replace").splitlines())
            logger.debug("loaded ignore rules from %s", path)
    return lines


class IgnoreFilter:
    """Gitignore-style patterns relative to the walk root.

    Later patterns override earlier ones, so a ``!`` line re-includes
    a path an earlier line excluded.
    """

    def __init__(self, root: Path, lines: Iterable[str] = ()) -> None:
        self.root = root
        self.lines = list(lines)
        self.spec = GitIgnoreSpec.from_lines(self.lines)

    @classmethod
    def load(cls, root: Path, extra: Iterable[str] = ()) -> IgnoreFilter:
        return cls(root, [*read_ignore_lines(root), *extra])

    def is_ignored(self, rel: str, is_dir: bool) -> bool:
        # pathspec treats a trailing slash as "this is a directory"
        return self.spec.match_file(rel + "/" if is_dir else rel)


def _raise(err: OSError) -> None:
    raise err


def walk_files(
    root: Path | str = ".",
    *,
    respect_gitignore: bool = True,
    exclude: Iterable[str] = (),
) -> Iterator[Path]:
    """Yield regular files under *root*, sorted, honoring ignore rules.

    Symlinks are not followed.  Traversal errors propagate.
    """
    root = Path(root)
    if root.is_file():
        yield root
        return

    if respect_gitignore:
        ignore = IgnoreFilter.load(root, exclude)
    else:
        ignore = IgnoreFilter(root, exclude)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        base = Path(dirpath)
        rel_base = base.relative_to(root).as_posix()
        prefix = "" if rel_base == "." else rel_base + "/"

        kept = []
        for d in sorted(dirnames):
            if d in _SKIP_DIRS or ignore.is_ignored(prefix + d, is_dir=True):
                logger.debug("skipping directory %s%s", prefix, d)
                continue
            kept.append(d)
        dirnames[:] = kept

        for name in sorted(filenames):
            path = base / name
            if path.is_symlink() or not path.is_file():
                continue
            if ignore.is_ignored(prefix + name, is_dir=False):
                continue
            yield path


def read_source(path: Path) -> bytes | None:
    """File bytes, or ``None`` when the file looks binary.  Read errors propagate."""
    data = path.read_bytes()
    if b"\0" in data[:_BINARY_SNIFF_BYTES]:
        logger.debug("skipping binary file %s", path)
        return None
    return data


def marker_lines(data: bytes, matcher: Matcher = CODESYNC_MATCHER) -> Iterator[tuple[int, bytes]]:
    """Yield ``(byte_offset_of_line, line)`` for each line of *data* containing the marker.

    Lines keep their terminators so offsets stay exact.
    """
    if matcher.find(data) is None:
        return
    offset = 0
    for line in data.splitlines(keepends=True):
        if matcher.is_match(line):
            yield offset, line
        offset += len(line)


def search_lines(path: Path, matcher: Matcher = CODESYNC_MATCHER) -> Iterator[tuple[int, bytes]]:
    """:func:`marker_lines` over the contents of *path*; binary files yield nothing."""
    data = read_source(path)
    if data is not None:
        yield from marker_lines(data, matcher)
