"""annotation.py - Annotation model and argument parser.

An annotation is the marker token followed immediately by a parenthesized
argument list::

    // CODESYNC(label)
    # CODESYNC(label, 3)

The first argument is the label that groups related annotations across the
tree; the optional second argument states how many annotations carry that
label.  Comment syntax, language and indentation are ignored entirely.

All positions are absolute **byte** offsets into the source file.  Lines are
handled as ``bytes`` so that spans survive the file -> line -> capture
transforms unchanged; argument text is decoded as UTF-8 (invalid sequences
are replaced) only for the values exposed to the rules.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, TypeVar

from codesync.kmp import CODESYNC_MATCHER, Matcher
from codesync.walk import marker_lines, read_source, walk_files

logger = logging.getLogger(__name__)

# Stated count when the second argument is omitted.
DEFAULT_COUNT = 2

# Largest count accepted in the second argument (unsigned 16-bit).
MAX_COUNT = 0xFFFF

# ( label [, count] )  -- captures keep their surrounding whitespace, except
# for the single conventional space after the comma.
ARGS_RE = re.compile(rb"\(([^,)]*)(?:, ?([^)]*))?\)")

_DIGITS_RE = re.compile(r"[0-9]+")

T = TypeVar("T")


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Parsed arguments
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Arg(Generic[T]):
    """One argument: processed value, raw matched text and its byte span."""

    val: T
    match_: str
    start: int
    end: int

    def span(self) -> tuple[int, int]:
        return (self.start, self.end)

    def has_extra_whitespace(self) -> bool:
        return self.match_.strip() != self.match_


@dataclass(frozen=True)
class Args:
    """Successfully parsed ``(label[, count])`` argument list."""

    label: Arg[str]
    count: Arg[int] | None
    len: int  # bytes from "(" through ")" inclusive

    def count_or_default(self, default: int = DEFAULT_COUNT) -> int:
        return self.count.val if self.count is not None else default

    def arguments(self) -> list[Arg]:
        """Label first, then count when present."""
        return [self.label] if self.count is None else [self.label, self.count]


@dataclass(frozen=True)
class Malformed:
    """No ``(label[, count])`` list directly after the marker."""

    kind = "malformed"


@dataclass(frozen=True)
class InvalidCount:
    """Second argument is not an unsigned 16-bit integer."""

    start: int
    end: int

    kind = "invalid-count"

    def span(self) -> tuple[int, int]:
        return (self.start, self.end)


ArgsError = Malformed | InvalidCount


def parse_args(line: bytes, pos: int, line_offset: int = 0) -> Args | ArgsError:
    """Parse the argument list starting at ``line[pos]``.

    *line_offset* is the absolute file offset of ``line[0]``; every span in
    the result is absolute.
    """
    m = ARGS_RE.match(line, pos)
    if m is None:
        return Malformed()

    raw_label = _decode(m.group(1))
    label = raw_label.strip()
    if not label:
        return Malformed()

    count: Arg[int] | None = None
    if m.group(2) is not None:
        start = line_offset + m.start(2)
        end = line_offset + m.end(2)
        raw_count = _decode(m.group(2))
        stripped = raw_count.strip()
        if not _DIGITS_RE.fullmatch(stripped) or int(stripped) > MAX_COUNT:
            return InvalidCount(start, end)
        count = Arg(int(stripped), raw_count, start, end)

    return Args(
        label=Arg(label, raw_label, line_offset + m.start(1), line_offset + m.end(1)),
        count=count,
        len=m.end() - pos,
    )


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Match:
    """One marker occurrence and the parse outcome of what follows it."""

    byte_offset: int
    args: Args | ArgsError
    marker_len: int = len(CODESYNC_MATCHER)

    @property
    def is_valid(self) -> bool:
        return isinstance(self.args, Args)

    def span(self) -> tuple[int, int]:
        end = self.byte_offset + self.marker_len
        if isinstance(self.args, Args):
            end += self.args.len
        return (self.byte_offset, end)


def parse_line(line_offset: int, line: bytes, matcher: Matcher = CODESYNC_MATCHER) -> list[Match]:
    """Return one :class:`Match` per marker occurrence in *line*, left to right.

    Scanning resumes after the closing ``)`` of a parsed argument list, so a
    marker quoted inside another annotation's arguments is not reported.
    """
    if isinstance(line, str):
        line = line.encode("utf-8")
    matches = []
    pos = 0
    while True:
        idx = matcher.find(line, pos)
        if idx is None:
            break
        args_pos = idx + len(matcher)
        args = parse_args(line, args_pos, line_offset)
        matches.append(Match(byte_offset=line_offset + idx, args=args, marker_len=len(matcher)))
        if isinstance(args, Args):
            pos = args_pos + args.len
        elif isinstance(args, InvalidCount):
            pos = args.end - line_offset + 1
        else:
            pos = args_pos
    return matches


class FileMatches:
    """All matches found in one file, in ascending byte-offset order."""

    def __init__(
        self, path: Path, matches: Iterable[Match] = (), content: bytes | None = None
    ) -> None:
        self.path = Path(path)
        self.matches: list[Match] = list(matches)
        self._content = content

    def __repr__(self) -> str:
        return f"FileMatches({str(self.path)!r}, {len(self.matches)} matches)"

    def __len__(self) -> int:
        return len(self.matches)

    def push(self, m: Match) -> None:
        self.matches.append(m)

    def valid(self) -> Iterator[Match]:
        return (m for m in self.matches if m.is_valid)

    def invalid(self) -> Iterator[Match]:
        return (m for m in self.matches if not m.is_valid)

    def content(self) -> bytes:
        """File bytes as scanned; read from disk only when not kept by the scan."""
        if self._content is None:
            self._content = self.path.read_bytes()
        return self._content


# ---------------------------------------------------------------------------
# Views into Matches (index based, nothing copied)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _MatchRef:
    owner: Matches = field(repr=False, compare=False)
    file_index: int
    match_index: int

    @property
    def file(self) -> FileMatches:
        return self.owner.files[self.file_index]

    @property
    def match(self) -> Match:
        return self.file.matches[self.match_index]

    @property
    def path(self) -> Path:
        return self.file.path

    def span(self) -> tuple[int, int]:
        return self.match.span()


@dataclass(frozen=True)
class Comment(_MatchRef):
    """A successfully parsed annotation plus the file it lives in."""

    @property
    def args(self) -> Args:
        args = self.match.args
        assert isinstance(args, Args)
        return args

    @property
    def label(self) -> str:
        return self.args.label.val

    def count(self, default: int = DEFAULT_COUNT) -> int:
        return self.args.count_or_default(default)


@dataclass(frozen=True)
class InvalidMatch(_MatchRef):
    """An annotation whose argument list failed to parse."""

    @property
    def error(self) -> ArgsError:
        return self.match.args  # type: ignore[return-value]

    def error_span(self) -> tuple[int, int]:
        """Span to underline: the bad count if there is one, else the match."""
        err = self.error
        if isinstance(err, InvalidCount):
            return err.span()
        return self.span()


class Matches:
    """Every :class:`FileMatches` from one scan.  Immutable once built."""

    def __init__(self, files: Iterable[FileMatches]) -> None:
        self.files: tuple[FileMatches, ...] = tuple(files)

    def __repr__(self) -> str:
        return f"Matches({len(self.files)} files)"

    @classmethod
    def collect(
        cls,
        root: Path | str = ".",
        *,
        respect_gitignore: bool = True,
        exclude: Iterable[str] = (),
        matcher: Matcher = CODESYNC_MATCHER,
    ) -> Matches:
        """Walk *root* and parse every annotation in every regular file.

        I/O errors are not caught: an unreadable file aborts the scan.
        """
        files = []
        for path in walk_files(root, respect_gitignore=respect_gitignore, exclude=exclude):
            data = read_source(path)
            found: list[Match] = []
            if data is not None:
                for line_offset, line in marker_lines(data, matcher):
                    found.extend(parse_line(line_offset, line, matcher))
            # Files with annotations keep the bytes they were parsed from
            fm = FileMatches(path, found, content=data if found else None)
            if fm.matches:
                logger.debug("%s: %d annotation(s)", path, len(fm.matches))
            files.append(fm)
        logger.debug("scanned %d files", len(files))
        return cls(files)

    def __iter__(self) -> Iterator[FileMatches]:
        return iter(self.files)

    def total(self) -> int:
        return sum(len(f.matches) for f in self.files)

    def comments(self) -> Iterator[Comment]:
        for fi, fm in enumerate(self.files):
            for mi, m in enumerate(fm.matches):
                if m.is_valid:
                    yield Comment(self, fi, mi)

    def invalid(self) -> Iterator[InvalidMatch]:
        for fi, fm in enumerate(self.files):
            for mi, m in enumerate(fm.matches):
                if not m.is_valid:
                    yield InvalidMatch(self, fi, mi)

    def group_by_label(self) -> dict[str, list[Comment]]:
        """Comments keyed by label; groups keep scan order."""
        groups: dict[str, list[Comment]] = {}
        for comment in self.comments():
            groups.setdefault(comment.label, []).append(comment)
        return groups
