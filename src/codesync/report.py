"""report.py - Terminal rendering of consistency findings.

Each finding is printed compiler style::

    error[count-mismatch]: expected 2 comments with label `init`, found 1
      --> src/a.py:3:5
       |
     3 | # CODESYNC(init)
       |   ^^^^^^^^^^^^^^
       = note: ...
       = help: did you mean `foo_bar`?

Byte spans are turned into line/column positions using the file contents
cached on :class:`~codesync.annotation.FileMatches`.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from codesync.annotation import DEFAULT_COUNT, FileMatches, Matches
from codesync.cli import rel_display_path
from codesync.consistency import CheckReport, Finding, Location

_SEVERITY_STYLE = {"error": "bold red", "note": "bold cyan"}


class SourceCache:
    """Path -> file bytes, reusing the contents already held by the scan."""

    def __init__(self, matches: Matches | None = None) -> None:
        self._files: dict[Path, FileMatches] = {}
        if matches is not None:
            self._files = {fm.path: fm for fm in matches.files}

    def content(self, path: Path) -> bytes:
        fm = self._files.get(path)
        if fm is None:
            fm = self._files[path] = FileMatches(path)
        return fm.content()

    def locate(self, loc: Location) -> tuple[int, int, str, int]:
        """Return ``(line, column, line_text, underline_width)`` for *loc*.

        Line and column are 1-based; the column counts characters, not bytes.
        Spans running past the end of their first line are cut there.
        """
        data = self.content(loc.path)
        start = min(loc.start, len(data))
        line_start = data.rfind(b"\n", 0, start) + 1
        line_end = data.find(b"\n", start)
        if line_end == -1:
            line_end = len(data)
        line_no = data.count(b"\n", 0, start) + 1
        prefix = data[line_start:start].decode("utf-8", errors="replace")
        text = data[line_start:line_end].decode("utf-8", errors="replace").rstrip("\r")
        end = min(max(loc.end, start), line_end)
        width = len(data[start:end].decode("utf-8", errors="replace"))
        return line_no, len(prefix) + 1, text, max(width, 1)


class Reporter:
    """Prints findings to a rich console."""

    def __init__(self, console: Console | None = None, sources: SourceCache | None = None) -> None:
        self.console = console or Console(highlight=False)
        self.sources = sources or SourceCache()

    def render(self, finding: Finding) -> Text:
        out = Text()
        out.append(finding.severity, style=_SEVERITY_STYLE.get(finding.severity, "bold"))
        out.append(f"[{finding.code}]", style=_SEVERITY_STYLE.get(finding.severity, "bold"))
        out.append(": ")
        out.append(finding.message, style="bold")
        out.append("\n")

        located = [(loc, self.sources.locate(loc)) for loc in finding.locations]
        gutter = max((len(str(info[0])) for _, info in located), default=1)
        pad = " " * gutter
        for loc, (line_no, col, text, width) in located:
            out.append(f"{pad}--> ", style="bold blue")
            out.append(f"{rel_display_path(loc.path)}:{line_no}:{col}\n")
            out.append(f"{pad} |\n", style="bold blue")
            out.append(f"{line_no:>{gutter}} | ", style="bold blue")
            out.append(text + "\n")
            out.append(f"{pad} | ", style="bold blue")
            out.append(" " * (col - 1) + "^" * width + "\n", style=_SEVERITY_STYLE["error"])
        for note in finding.notes:
            out.append(f"{pad} = ", style="bold blue")
            out.append(f"note: {note}\n")
        if finding.suggestion is not None:
            out.append(f"{pad} = ", style="bold blue")
            out.append(f"help: did you mean `{finding.suggestion}`?\n")
        return out

    def emit(self, finding: Finding) -> None:
        self.console.print(self.render(finding), soft_wrap=True)

    def emit_all(self, report: CheckReport) -> None:
        for finding in report.findings:
            self.emit(finding)

    def summary_line(self, report: CheckReport) -> Text:
        count = len(report.findings)
        style = "green" if count == 0 else "red"
        text = Text()
        text.append(
            f"Checked {report.annotations} annotations in {report.files_scanned} files: "
        )
        text.append(f"{count} {'problem' if count == 1 else 'problems'}", style=style)
        if report.stopped_after is not None:
            text.append(f" (stopped after {report.stopped_after} checks)", style="dim")
        return text


def label_table(matches: Matches, default_count: int = DEFAULT_COUNT) -> Table:
    """Table of label groups with declared and found counts."""
    table = Table(title="Labels", show_lines=False, pad_edge=False)
    table.add_column("Label", style="bold")
    table.add_column("Declared")
    table.add_column("Found", justify="right")
    table.add_column("Files", justify="right")

    for label, comments in sorted(matches.group_by_label().items()):
        declared = Counter(c.count(default_count) for c in comments)
        files = {c.file_index for c in comments}
        ok = len(declared) == 1 and next(iter(declared)) == len(comments)
        table.add_row(
            Text(label),
            ", ".join(str(n) for n in sorted(declared)),
            Text(str(len(comments)), style="green" if ok else "red"),
            str(len(files)),
        )
    return table
