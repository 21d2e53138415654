"""consistency.py - Cross-file consistency rules for annotations.

The checker needs the complete :class:`~codesync.annotation.Matches` of a
scan because label groups span files.  Rules run in stages:

1. ``invalid``  - malformed annotations and unparsable counts.
2. ``counts``   - per-label count agreement and group size.
3. ``style``    - label casing, stray whitespace, label pattern.

Each stage reports everything it finds; if a stage produced findings the
later stages are skipped, since they assume the earlier ones passed.
Nothing here raises on bad annotations: every problem is a :class:`Finding`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from codesync.annotation import (
    DEFAULT_COUNT,
    Arg,
    Comment,
    InvalidCount,
    Matches,
)
from codesync.inflect import STYLE_EXAMPLES, normalize_style, to_style

STAGES = ("invalid", "counts", "style")

MALFORMED_NOTE = (
    "comment must contain a label and an optional count, "
    "e.g., `CODESYNC(my-label)`, `CODESYNC(my-label, 3)`"
)


@dataclass(frozen=True)
class Location:
    """A byte span inside one file."""

    path: Path
    start: int
    end: int

    def to_dict(self) -> dict[str, Any]:
        return {"path": str(self.path), "start": self.start, "end": self.end}


@dataclass(frozen=True)
class Finding:
    """One reported problem, ready for rendering."""

    code: str
    message: str
    locations: tuple[Location, ...]
    severity: str = "error"  # "error" or "note"
    notes: tuple[str, ...] = ()
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
            "locations": [loc.to_dict() for loc in self.locations],
        }
        if self.notes:
            d["notes"] = list(self.notes)
        if self.suggestion is not None:
            d["suggestion"] = self.suggestion
        return d


@dataclass
class CheckOptions:
    """Which rules to run and how."""

    check_invalid: bool = True
    check_counts: bool = True
    case_style: str | None = None
    acronyms: tuple[str, ...] = ()
    word_aware_acronyms: bool = False
    strict_whitespace: bool = False
    label_pattern: re.Pattern[str] | None = None
    default_count: int = DEFAULT_COUNT

    def __post_init__(self) -> None:
        if self.case_style is not None:
            self.case_style = normalize_style(self.case_style)
        if isinstance(self.label_pattern, str):
            self.label_pattern = re.compile(self.label_pattern)
        self.acronyms = tuple(self.acronyms)


@dataclass
class CheckReport:
    """Findings from one run plus where the run stopped."""

    findings: list[Finding] = field(default_factory=list)
    stopped_after: str | None = None
    files_scanned: int = 0
    annotations: int = 0

    @property
    def has_errors(self) -> bool:
        return any(f.severity == "error" for f in self.findings)

    @property
    def passed(self) -> bool:
        return not self.findings

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": self.files_scanned,
            "annotations": self.annotations,
            "passed": self.passed,
            "stopped_after": self.stopped_after,
            "findings": [f.to_dict() for f in self.findings],
        }


def pluralize(word: str, count: int) -> str:
    return word if count == 1 else f"{word}s"


def _loc(path: Path, span: tuple[int, int]) -> Location:
    return Location(path, span[0], span[1])


class Checker:
    """Runs the enabled rules over a complete scan."""

    def __init__(self, options: CheckOptions | None = None) -> None:
        self.options = options or CheckOptions()

    def check(self, matches: Matches) -> CheckReport:
        opts = self.options
        report = CheckReport(files_scanned=len(matches.files), annotations=matches.total())

        if opts.check_invalid:
            report.findings.extend(self.check_invalid(matches))
            if report.findings:
                report.stopped_after = "invalid"
                return report

        groups = matches.group_by_label()

        if opts.check_counts:
            for label, comments in groups.items():
                finding = self.check_counts(label, comments)
                if finding is not None:
                    report.findings.append(finding)
            if report.findings:
                report.stopped_after = "counts"
                return report

        comments = list(matches.comments())
        if opts.case_style is not None:
            report.findings.extend(self.check_casing(comments))
        if opts.strict_whitespace:
            report.findings.extend(self.check_whitespace(comments))
        if opts.label_pattern is not None:
            report.findings.extend(self.check_pattern(comments))
        return report

    # -- stage 1 --

    def check_invalid(self, matches: Matches) -> list[Finding]:
        findings = []
        for m in matches.invalid():
            if isinstance(m.error, InvalidCount):
                findings.append(
                    Finding(
                        code="invalid-count",
                        message="invalid count",
                        locations=(_loc(m.path, m.error_span()),),
                        notes=("second argument must be an integer",),
                    )
                )
            else:
                findings.append(
                    Finding(
                        code="malformed",
                        message="malformed codesync comment",
                        locations=(_loc(m.path, m.span()),),
                        notes=(MALFORMED_NOTE,),
                    )
                )
        return findings

    # -- stage 2 --

    def check_counts(self, label: str, comments: list[Comment]) -> Finding | None:
        """Compare declared counts within one label group.

        Absent counts take ``default_count``.  One distinct count must equal
        the group size; several distinct counts are an error by themselves.
        """
        default = self.options.default_count
        counts = sorted({c.count(default) for c in comments})
        locations = tuple(_loc(c.path, c.span()) for c in comments)

        if not counts:
            return None
        if len(counts) == 1:
            expected = counts[0]
            found = len(comments)
            if found == expected:
                return None
            return Finding(
                code="count-mismatch",
                message=(
                    f"expected {expected} {pluralize('comment', expected)} "
                    f"with label `{label}`, found {found}"
                ),
                locations=locations,
            )
        return Finding(
            code="count-disagreement",
            message=f"all comments with label `{label}` must have the same count",
            locations=locations,
            notes=(f"declared counts: {', '.join(str(c) for c in counts)}",),
        )

    # -- stage 3 --

    def check_casing(self, comments: list[Comment]) -> list[Finding]:
        opts = self.options
        style = opts.case_style
        assert style is not None
        findings = []
        for c in comments:
            label = c.label
            expected = to_style(label, style, opts.acronyms, opts.word_aware_acronyms)
            if expected == label:
                continue
            findings.append(
                Finding(
                    code="casing",
                    message=f"label `{label}` is not {STYLE_EXAMPLES[style]}",
                    locations=(_loc(c.path, c.args.label.span()),),
                    suggestion=expected or None,
                )
            )
        return findings

    def check_whitespace(self, comments: list[Comment]) -> list[Finding]:
        findings = []
        for c in comments:
            for name, arg in zip(("label", "count"), c.args.arguments()):
                if arg.has_extra_whitespace():
                    findings.append(_whitespace_finding(c, name, arg))
        return findings

    def check_pattern(self, comments: list[Comment]) -> list[Finding]:
        pattern = self.options.label_pattern
        assert pattern is not None
        findings = []
        for c in comments:
            if pattern.fullmatch(c.label) is None:
                findings.append(
                    Finding(
                        code="label-pattern",
                        message=f"label `{c.label}` does not match `{pattern.pattern}`",
                        locations=(_loc(c.path, c.args.label.span()),),
                    )
                )
        return findings


def _whitespace_finding(c: Comment, name: str, arg: Arg) -> Finding:
    return Finding(
        code="whitespace",
        message=f"extra whitespace around {name} `{arg.match_.strip()}`",
        locations=(_loc(c.path, arg.span()),),
        suggestion=arg.match_.strip(),
    )


def run_checks(matches: Matches, options: CheckOptions | None = None) -> CheckReport:
    """Convenience wrapper: ``Checker(options).check(matches)``."""
    return Checker(options).check(matches)
