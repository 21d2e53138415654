"""Shared CLI utilities for codesync.

Common Typer options, config loading and standardised output / error
helpers used by the command modules.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from codesync.config import ProjectConfig, load_config

VerboseOption: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging.")


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def get_config(root: Path | None = None) -> ProjectConfig:
    """Load the project config, falling back to defaults when there is none.

    Unknown keys (``KeyError``) and bad values (``ValueError``) propagate.
    """
    try:
        return load_config(root)
    except FileNotFoundError:
        return ProjectConfig(root=(root or Path.cwd()).resolve())


# ---------------------------------------------------------------------------
# Standardised output helpers
# ---------------------------------------------------------------------------

_err_console = Console(stderr=True)


def error_exit(msg: str, *, json_mode: bool = False, code: int = 1) -> NoReturn:
    """Print *msg* as an error and ``raise typer.Exit(code)``."""
    if json_mode:
        print(json.dumps({"error": msg}, indent=2))
    else:
        _err_console.print(f"[red bold]error:[/red bold] {escape(msg)}", highlight=False)
    raise typer.Exit(code=code)


def json_print(data: dict[str, Any] | list[Any]) -> None:
    """Print *data* as pretty-printed JSON to stdout."""
    print(json.dumps(data, indent=2))


def rel_display_path(filepath: Path, base_dir: Path | None = None) -> str:
    """Return *filepath* relative to *base_dir* (default: cwd) when possible."""
    base = base_dir if base_dir is not None else Path.cwd()
    try:
        return filepath.resolve().relative_to(base.resolve()).as_posix()
    except ValueError:
        return str(filepath)
