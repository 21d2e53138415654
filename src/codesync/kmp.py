"""kmp.py - Exact substring matcher for the annotation marker.

Knuth-Morris-Pratt search with the failure table computed once per needle.
The same :class:`Matcher` instance is reused for every line of every file,
so the table is never rebuilt during a run.

Works on ``bytes`` and ``str`` alike: only element equality is used.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

MARKER = b"CODESYNC"


def table(needle: Sequence) -> list[int]:
    """Build the partial-match table for *needle*.

    ``t[i]`` is the length of the longest proper prefix of ``needle[: i + 1]``
    that is also a suffix of it.
    """
    m = len(needle)
    t = [0] * m
    i = 1
    j = 0
    while i < m:
        if needle[i] == needle[j]:
            j += 1
            t[i] = j
            i += 1
        elif j == 0:
            t[i] = 0
            i += 1
        else:
            # Fall back to the next shorter border and retry the same i
            j = t[j - 1]
    return t


def search(haystack: Sequence, needle: Sequence, tbl: Sequence[int], start: int = 0) -> int | None:
    """Return the offset of the first *needle* in *haystack* at or after *start*.

    *tbl* must be ``table(needle)``.  Returns ``None`` when there is no match,
    when *haystack* is empty, or when *needle* is longer than the haystack.
    """
    n = len(haystack)
    m = len(needle)
    if m == 0 or n - start < m:
        return None

    t_i = start
    p_i = 0
    while t_i < n:
        if haystack[t_i] == needle[p_i]:
            t_i += 1
            p_i += 1
            if p_i == m:
                return t_i - m
        elif p_i == 0:
            t_i += 1
        else:
            p_i = tbl[p_i - 1]
    return None


class Matcher:
    """A fixed needle with its precomputed failure table."""

    def __init__(self, needle: bytes | str = MARKER) -> None:
        if not needle:
            raise ValueError("needle must not be empty")
        self.needle = needle
        self.table = table(needle)

    def __len__(self) -> int:
        return len(self.needle)

    def __repr__(self) -> str:
        return f"Matcher({self.needle!r})"

    def find(self, haystack: bytes | str, start: int = 0) -> int | None:
        """Offset of the first occurrence at or after *start*, or ``None``."""
        return search(haystack, self.needle, self.table, start)

    def find_all(self, haystack: bytes | str) -> Iterator[int]:
        """Yield every non-overlapping occurrence in ascending order."""
        pos = 0
        while True:
            idx = self.find(haystack, pos)
            if idx is None:
                return
            yield idx
            pos = idx + len(self.needle)

    def is_match(self, haystack: bytes | str) -> bool:
        return self.find(haystack) is not None


# Built once per process and shared by the scanner and the line search.
CODESYNC_MATCHER = Matcher(MARKER)
