"""check.py - The ``codesync check`` command.

Scans a directory tree for ``CODESYNC(label[, count])`` annotations and
reports malformed annotations, count mismatches and (optionally) label
style problems.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from codesync.annotation import Matches
from codesync.cli import VerboseOption, error_exit, get_config, json_print, setup_logging
from codesync.consistency import Checker
from codesync.report import Reporter, SourceCache, label_table

logger = logging.getLogger(__name__)

out_console = Console(highlight=False)

_EPILOG = """\
[bold]Examples:[/bold]

codesync check                               Check the current directory

codesync check src/                          Check one subtree

codesync check --case snake                  Require snake_case labels

codesync check --strict-whitespace           Reject "( label )" padding

codesync check --json                        Machine-readable JSON output

codesync check --summary                     Show a label/count table

[bold]Finding codes:[/bold]

malformed            Marker not followed by (label[, count])

invalid-count        Count is not an integer in 0..65535

count-mismatch       Number of comments differs from the declared count

count-disagreement   Comments sharing a label declare different counts

casing               Label is not in the configured case style

whitespace           Argument has leading/trailing whitespace

label-pattern        Label does not match label_pattern

[dim]Settings are read from codesync.toml or [tool.codesync] in pyproject.toml;
command-line options take precedence.[/dim]"""

app = typer.Typer(
    help="Check CODESYNC annotations for consistency.",
    rich_markup_mode="rich",
    epilog=_EPILOG,
)


@app.command(epilog=_EPILOG)
def main(
    path: Path = typer.Argument(Path("."), help="Directory (or file) to scan."),
    case: str | None = typer.Option(
        None, "--case", help="Required label style (camel, pascal, snake, ...)."
    ),
    acronym: list[str] = typer.Option(
        None, "--acronym", help="Acronym kept uppercase in camel/Pascal suggestions."
    ),
    word_aware: bool | None = typer.Option(
        None, "--word-aware/--blind-acronyms", help="Only uppercase whole-word acronyms."
    ),
    strict_whitespace: bool | None = typer.Option(
        None, "--strict-whitespace/--no-strict-whitespace", help="Flag padded arguments."
    ),
    label_pattern: str | None = typer.Option(
        None, "--label-pattern", help="Regex every label must fully match."
    ),
    gitignore: bool | None = typer.Option(
        None, "--gitignore/--no-gitignore", help="Honor .gitignore/.ignore at the root."
    ),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON."),
    summary: bool = typer.Option(False, "--summary", help="Print a label/count table."),
    verbose: bool = VerboseOption,
) -> None:
    """Check annotation consistency across a source tree."""
    setup_logging(verbose)

    try:
        cfg = get_config(path if path.is_dir() else path.parent).merged(
            case_style=case,
            acronyms=list(acronym) if acronym else None,
            word_aware_acronyms=word_aware,
            strict_whitespace=strict_whitespace,
            label_pattern=label_pattern,
            respect_gitignore=gitignore,
        )
    except (KeyError, ValueError) as exc:
        error_exit(str(exc).strip("'\""), json_mode=json_output, code=2)
    logger.debug("config: %s", cfg)

    try:
        matches = Matches.collect(
            path, respect_gitignore=cfg.respect_gitignore, exclude=cfg.exclude
        )
    except OSError as exc:
        error_exit(f"could not scan {path}: {exc}", json_mode=json_output)

    report = Checker(cfg.check_options()).check(matches)

    if json_output:
        json_print(report.to_dict())
    else:
        reporter = Reporter(out_console, SourceCache(matches))
        try:
            reporter.emit_all(report)
        except OSError as exc:
            error_exit(f"could not read source for diagnostics: {exc}")
        if summary:
            out_console.print(label_table(matches, cfg.default_count))
        out_console.print(reporter.summary_line(report), soft_wrap=True)

    if report.findings:
        raise typer.Exit(code=1)


def main_entry() -> None:
    """Package entry point for ``codesync-check``."""
    app()


if __name__ == "__main__":
    main_entry()
